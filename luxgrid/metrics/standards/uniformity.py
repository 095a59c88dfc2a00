from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Mapping, Sequence, Tuple, Union

import numpy as np

from luxgrid.core.errors import InputValidationError
from luxgrid.metrics.core import UNDEFINED, MetricValue, UniformityMetrics, evaluate_thresholds, is_undefined


UNIFORMITY_REQUIREMENTS: Dict[str, Tuple[float, float]] = {
    # space type: (min/avg, min/max)
    "office": (0.6, 0.3),
    "industrial": (0.5, 0.3),
    "retail": (0.4, 0.2),
    "educational": (0.6, 0.3),
    "healthcare": (0.7, 0.4),
    "outdoor": (0.3, 0.1),
    "default": (0.5, 0.3),
}

DIVERSITY_LIMITS: Dict[str, float] = {
    "office": 3.0,
    "industrial": 4.0,
    "retail": 5.0,
    "educational": 3.0,
    "healthcare": 2.5,
    "outdoor": 8.0,
    "default": 4.0,
}

# lx/m
GRADIENT_LIMITS: Dict[str, float] = {
    "precision": 100.0,
    "detailed": 200.0,
    "normal": 300.0,
    "rough": 500.0,
    "circulation": 1000.0,
    "default": 300.0,
}


def _lookup(table: Mapping[str, object], key: str | None):
    k = (key or "default").strip().lower()
    if k.endswith("work"):
        k = k[: -len("work")].rstrip("_ ")
    return table.get(k, table["default"])


def evaluate_uniformity(metrics: UniformityMetrics, space_type: str | None = None) -> Dict[str, object]:
    min_avg, min_max = _lookup(UNIFORMITY_REQUIREMENTS, space_type)
    out = evaluate_thresholds(
        {"min_to_avg": metrics.min_to_avg, "min_to_max": metrics.min_to_max},
        {"min_to_avg": min_avg, "min_to_max": min_max},
    )
    out["space_type"] = space_type or "default"
    return out


def evaluate_diversity(diversity: MetricValue, space_type: str | None = None) -> Dict[str, object]:
    limit = _lookup(DIVERSITY_LIMITS, space_type)
    out = evaluate_thresholds({"diversity_max": diversity}, {"diversity_max": limit}, upper_bounds=("diversity_max",))
    out["space_type"] = space_type or "default"
    return out


@dataclass(frozen=True)
class GradientResult:
    gradients: np.ndarray  # (ny-1, nx-1), lx/m
    maximum: float
    average: MetricValue


Spacing = Union[float, Tuple[float, float]]


def uniformity_gradient(values: Sequence[Sequence[float]], grid_spacing: Spacing) -> GradientResult:
    """
    Largest neighbour step per cell, in lux per metre.

    Each cell (j, i) with a right and a lower neighbour takes
    max(|E[j][i+1] - E[j][i]| / pitch_x, |E[j+1][i] - E[j][i]| / pitch_y).
    ``grid_spacing`` is one pitch for both axes or an ``(x, y)`` pair.
    """
    if isinstance(grid_spacing, tuple):
        pitch_x, pitch_y = grid_spacing
    else:
        pitch_x = pitch_y = grid_spacing
    if not pitch_x > 0 or not pitch_y > 0:
        raise InputValidationError(f"Grid spacing must be > 0, got {grid_spacing}")
    arr = np.asarray(values, dtype=float)
    if arr.ndim != 2:
        raise InputValidationError("Gradient needs a 2-D grid")
    if arr.shape[0] < 2 or arr.shape[1] < 2:
        return GradientResult(gradients=np.zeros((0, 0)), maximum=0.0, average=UNDEFINED)
    core = arr[:-1, :-1]
    dx = np.abs(arr[:-1, 1:] - core) / pitch_x
    dy = np.abs(arr[1:, :-1] - core) / pitch_y
    grad = np.maximum(dx, dy)
    return GradientResult(gradients=grad, maximum=float(grad.max()), average=float(grad.mean()))


def evaluate_gradient(max_gradient: float, task_type: str | None = None) -> Dict[str, object]:
    limit = _lookup(GRADIENT_LIMITS, task_type)
    out = evaluate_thresholds({"gradient_max": max_gradient}, {"gradient_max": limit}, upper_bounds=("gradient_max",))
    out["task_type"] = task_type or "default"
    return out


def evaluate_space(
    metrics: UniformityMetrics,
    values: Sequence[Sequence[float]],
    grid_spacing: Spacing,
    space_type: str | None = None,
    task_type: str | None = None,
) -> Dict[str, object]:
    """Uniformity, diversity and gradient checks combined into one verdict."""
    grad = uniformity_gradient(values, grid_spacing)
    parts = {
        "uniformity": evaluate_uniformity(metrics, space_type),
        "diversity": evaluate_diversity(metrics.diversity, space_type),
        "gradient": evaluate_gradient(grad.maximum, task_type),
    }
    status = "PASS" if all(p["status"] == "PASS" for p in parts.values()) else "FAIL"
    return {
        "status": status,
        "max_gradient": grad.maximum,
        "avg_gradient": None if is_undefined(grad.average) else grad.average,
        **parts,
    }
