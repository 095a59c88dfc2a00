"""
Point-by-point illuminance on the workplane.

The inverse square law for illuminance:
    E = I(θ,φ) × cos(θ) / d²

Where:
    E = illuminance at point (lux)
    I(θ,φ) = luminous intensity toward the point (candela)
    θ = angle between the downward vertical and the line to the luminaire
    d = distance from light source to point

Inter-reflections are not simulated. The summed direct illuminance is
scaled by the constant room factor 1 + 0.4·ρc + 0.4·ρw + 0.2·ρf.
"""

from __future__ import annotations

import logging
import math
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

import numpy as np

from luxgrid.core.errors import CalculationCancelled, InputValidationError
from luxgrid.core.types import Point3D
from luxgrid.metrics.core import UNDEFINED, MetricValue
from luxgrid.models.luminaire import LuminaireLayout, PositionedLuminaire
from luxgrid.models.room import Reflectances, RoomGeometry
from luxgrid.photometry.interp import intensity_at


logger = logging.getLogger(__name__)

CancelCheck = Callable[[], bool]

# Guards against floor(10 / 0.1) landing on 99.
_POINT_COUNT_EPS = 1e-9
_MIN_DISTANCE = 1e-3


@dataclass(frozen=True)
class GridMetadata:
    spacing: float
    nx: int  # points along the room length (X)
    ny: int  # points along the room width (Y)
    length: float
    width: float
    workplane_height: float

    @property
    def point_count(self) -> int:
        return self.nx * self.ny

    @property
    def pitch(self) -> Tuple[float, float]:
        """Actual (x, y) distance between neighbouring points; may exceed ``spacing``."""
        px = self.length / (self.nx - 1) if self.nx > 1 else self.spacing
        py = self.width / (self.ny - 1) if self.ny > 1 else self.spacing
        return px, py


@dataclass(frozen=True)
class IlluminanceGrid:
    """Sampled workplane illuminance. ``values[j][i]`` is row j (Y), column i (X)."""
    values: Tuple[Tuple[int, ...], ...]
    metadata: GridMetadata
    minimum: int
    maximum: int
    total: int

    @property
    def point_count(self) -> int:
        return self.metadata.point_count

    @property
    def average(self) -> float:
        return self.total / self.point_count

    @property
    def uniformity(self) -> MetricValue:
        """Minimum to average ratio (Emin/Eavg)."""
        avg = self.average
        if avg <= 0:
            return UNDEFINED
        return self.minimum / avg

    def point(self, i: int, j: int) -> Point3D:
        return Point3D(
            _axis_coordinate(i, self.metadata.nx, self.metadata.length),
            _axis_coordinate(j, self.metadata.ny, self.metadata.width),
            self.metadata.workplane_height,
        )

    def as_array(self) -> np.ndarray:
        arr = np.asarray(self.values, dtype=float)
        arr.setflags(write=False)
        return arr


def reflection_factor(reflectances: Reflectances) -> float:
    """Ambient inter-reflection multiplier applied to direct illuminance."""
    return 1.0 + 0.4 * reflectances.ceiling + 0.4 * reflectances.wall + 0.2 * reflectances.floor


def fallback_intensity(lumens: float, cos_theta: float, exponent: float) -> float:
    """Closed-form intensity I = Φ/(4π)·cos^n θ for luminaires without photometry."""
    if cos_theta <= 0.0:
        return 0.0
    return lumens / (4.0 * math.pi) * cos_theta**exponent


def luminaire_intensity(luminaire: PositionedLuminaire, to_target: Point3D) -> float:
    """
    Candela emitted by ``luminaire`` toward ``to_target`` (luminaire to target vector).

    Vertical angle is measured from nadir; horizontal angle from +X toward +Y.
    """
    d = to_target.length()
    if d < _MIN_DISTANCE:
        return 0.0
    cos_down = -to_target.z / d
    if luminaire.photometry is None:
        return fallback_intensity(luminaire.lumens, cos_down, luminaire.cosine_exponent)
    vertical = math.degrees(math.acos(max(-1.0, min(1.0, cos_down))))
    horizontal = math.degrees(math.atan2(to_target.y, to_target.x))
    return intensity_at(luminaire.photometry, vertical, horizontal) * luminaire.photometry.intensity_scale


def point_direct_illuminance(point: Point3D, luminaire: PositionedLuminaire) -> float:
    """
    Direct horizontal illuminance at ``point`` from one luminaire.

    Luminaires at or below the workplane contribute nothing.
    """
    delta = luminaire.position - point
    distance = delta.length()
    if distance < _MIN_DISTANCE:
        return 0.0
    cos_theta = delta.z / distance
    if cos_theta <= 0.0:
        return 0.0
    intensity = luminaire_intensity(luminaire, point - luminaire.position)
    return intensity * cos_theta / (distance * distance)


def grid_point_counts(room: RoomGeometry, grid_spacing: float) -> Tuple[int, int]:
    if not grid_spacing > 0 or not math.isfinite(grid_spacing):
        raise InputValidationError(f"Grid spacing must be a finite value > 0, got {grid_spacing}")
    nx = int(math.floor(room.length / grid_spacing + _POINT_COUNT_EPS)) + 1
    ny = int(math.floor(room.width / grid_spacing + _POINT_COUNT_EPS)) + 1
    return nx, ny


def _axis_coordinate(index: int, count: int, extent: float) -> float:
    if count == 1:
        return extent / 2.0
    return index / (count - 1) * extent


def _round_lux(value: float) -> int:
    # Half-up rounding; negative results clamp to zero.
    if not value > 0.0:
        return 0
    return int(math.floor(value + 0.5))


def _compute_row(
    j: int,
    meta: GridMetadata,
    luminaires: Sequence[PositionedLuminaire],
    factor: float,
) -> Tuple[int, ...]:
    y = _axis_coordinate(j, meta.ny, meta.width)
    row: List[int] = []
    for i in range(meta.nx):
        point = Point3D(_axis_coordinate(i, meta.nx, meta.length), y, meta.workplane_height)
        direct = 0.0
        for lum in luminaires:
            direct += point_direct_illuminance(point, lum)
        row.append(_round_lux(direct * factor))
    return tuple(row)


def calculate_grid_illuminance(
    room: RoomGeometry,
    luminaires: Sequence[PositionedLuminaire],
    grid_spacing: float,
    *,
    workers: int = 1,
    cancel_check: Optional[CancelCheck] = None,
) -> IlluminanceGrid:
    """
    Calculate illuminance on a workplane grid from explicit luminaire instances.

    Args:
        room: Room geometry (meters)
        luminaires: Positioned luminaires; may be empty
        grid_spacing: Distance between sample points (meters)
        workers: Threads used to evaluate rows; 1 evaluates inline. Rows are
            pure Python and hold the GIL, so extra workers do not speed up
            the arithmetic; the result is identical either way.
        cancel_check: Polled between rows; returning True aborts the run

    Returns:
        IlluminanceGrid of rounded lux values
    """
    nx, ny = grid_point_counts(room, grid_spacing)
    meta = GridMetadata(
        spacing=float(grid_spacing),
        nx=nx,
        ny=ny,
        length=room.length,
        width=room.width,
        workplane_height=room.workplane_height,
    )
    factor = reflection_factor(room.reflectances)
    logger.debug("Grid %dx%d (%d points), %d luminaires, factor %.3f", nx, ny, nx * ny, len(luminaires), factor)

    rows: List[Tuple[int, ...]] = [()] * ny
    if workers <= 1:
        for j in range(ny):
            if cancel_check is not None and cancel_check():
                raise CalculationCancelled(j, ny)
            rows[j] = _compute_row(j, meta, luminaires, factor)
    else:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = [pool.submit(_compute_row, j, meta, luminaires, factor) for j in range(ny)]
            for j, fut in enumerate(futures):
                if cancel_check is not None and cancel_check():
                    for pending in futures[j:]:
                        pending.cancel()
                    raise CalculationCancelled(j, ny)
                rows[j] = fut.result()

    lo = min(min(r) for r in rows)
    hi = max(max(r) for r in rows)
    total = sum(sum(r) for r in rows)
    grid = IlluminanceGrid(values=tuple(rows), metadata=meta, minimum=lo, maximum=hi, total=total)
    logger.info("Illuminance grid: min %d lx, avg %.1f lx, max %d lx", lo, grid.average, hi)
    return grid


def compute_grid(
    room: RoomGeometry,
    layout: LuminaireLayout,
    grid_spacing: float,
    *,
    workers: int = 1,
    cancel_check: Optional[CancelCheck] = None,
) -> IlluminanceGrid:
    """Place ``layout`` in ``room`` and sample the workplane every ``grid_spacing`` metres."""
    return calculate_grid_illuminance(
        room,
        layout.place(room),
        grid_spacing,
        workers=workers,
        cancel_check=cancel_check,
    )
