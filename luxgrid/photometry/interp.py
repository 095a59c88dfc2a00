from __future__ import annotations

import math
from typing import Sequence, Tuple

import numpy as np

from luxgrid.models.dataset import PhotometricDataset


def normalize_horizontal(angle_deg: float) -> float:
    """Wrap a horizontal angle into [0, 360)."""
    h = math.fmod(float(angle_deg), 360.0)
    if h < 0.0:
        h += 360.0
    # -1e-17 + 360 rounds to 360.0
    if h >= 360.0:
        h -= 360.0
    return h


def clamp_vertical(angle_deg: float) -> float:
    return max(0.0, min(180.0, float(angle_deg)))


def _find_bracket(val: float, arr: Sequence[float]) -> Tuple[int, int, float]:
    """Bracketing indices and fractional weight; clamps at the ends, never extrapolates."""
    n = len(arr)
    if n == 0:
        return 0, 0, 0.0
    if val <= arr[0]:
        return 0, 0, 0.0
    if val >= arr[-1]:
        return n - 1, n - 1, 0.0
    for i in range(n - 1):
        if arr[i] <= val <= arr[i + 1]:
            d = arr[i + 1] - arr[i]
            t = (val - arr[i]) / d if d != 0 else 0.0
            return i, i + 1, t
    return n - 1, n - 1, 0.0


def intensity_at(dataset: PhotometricDataset, vertical_deg: float, horizontal_deg: float) -> float:
    """
    Interpolate recorded candela at a (vertical, horizontal) angle pair.

    Args:
        dataset: Parsed photometric data
        vertical_deg: Vertical angle (0 = nadir), clamped into [0, 180]
        horizontal_deg: Horizontal angle, wrapped into [0, 360)

    Returns:
        Candela as recorded in the file (before the candela multiplier), >= 0
    """
    v_angles = dataset.angles.vertical_deg
    h_angles = dataset.angles.horizontal_deg
    candela = dataset.candela.values_cd

    v = clamp_vertical(vertical_deg)
    h = normalize_horizontal(horizontal_deg)

    v_lo, v_hi, v_t = _find_bracket(v, v_angles)
    h_lo, h_hi, h_t = _find_bracket(h, h_angles)

    c00 = candela[h_lo][v_lo]
    c01 = candela[h_lo][v_hi]
    c10 = candela[h_hi][v_lo]
    c11 = candela[h_hi][v_hi]

    # Exact vertices take these branches so no rounding creeps in.
    if v_t == 0.0 and h_t == 0.0:
        value = c00
    else:
        c0 = c00 * (1.0 - v_t) + c01 * v_t
        c1 = c10 * (1.0 - v_t) + c11 * v_t
        value = c0 * (1.0 - h_t) + c1 * h_t

    if not math.isfinite(value) or value < 0.0:
        return 0.0
    return float(value)


def scaled_intensity_at(dataset: PhotometricDataset, vertical_deg: float, horizontal_deg: float) -> float:
    """Delivered candela: recorded value times multiplier and ballast factors."""
    return intensity_at(dataset, vertical_deg, horizontal_deg) * dataset.intensity_scale


def intensity_table(
    dataset: PhotometricDataset,
    vertical_deg: Sequence[float],
    horizontal_deg: Sequence[float],
) -> np.ndarray:
    """Sample the dataset on a [horizontal][vertical] grid of query angles."""
    out = np.zeros((len(horizontal_deg), len(vertical_deg)), dtype=float)
    for i, h in enumerate(horizontal_deg):
        for j, v in enumerate(vertical_deg):
            out[i, j] = intensity_at(dataset, v, h)
    return out
