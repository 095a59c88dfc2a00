"""
Vertical-plane and task quantities that complement the horizontal grid.

Cylindrical illuminance is the mean of the vertical illuminance toward
eight equally spaced horizontal directions.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from luxgrid.calculation.illuminance import luminaire_intensity, point_direct_illuminance
from luxgrid.core.errors import InputValidationError
from luxgrid.core.types import Point3D
from luxgrid.metrics.core import UNDEFINED, MetricValue
from luxgrid.models.luminaire import LuminaireLayout, PositionedLuminaire
from luxgrid.models.room import RoomGeometry


CYLINDRICAL_DIRECTIONS = 8


def vertical_illuminance(
    luminaires: Sequence[PositionedLuminaire],
    point: Point3D,
    direction: Tuple[float, float],
) -> float:
    """
    Illuminance on a vertical plane at ``point`` facing ``direction`` (dx, dy).

    Each luminaire adds I·sinθ·|cos α| / d², θ from the vertical and α the
    horizontal angle between the plane normal and the luminaire.
    """
    dx, dy = direction
    norm = math.hypot(dx, dy)
    if norm == 0.0:
        raise InputValidationError("Direction must have a horizontal component")
    dx, dy = dx / norm, dy / norm

    total = 0.0
    for lum in luminaires:
        delta = lum.position - point
        horiz = delta.horizontal_length()
        d = delta.length()
        if horiz < 1e-12 or d <= 0.0:
            continue
        cos_alpha = (delta.x * dx + delta.y * dy) / horiz
        intensity = luminaire_intensity(lum, Point3D(-delta.x, -delta.y, -delta.z))
        sin_theta = horiz / d
        total += intensity * sin_theta * abs(cos_alpha) / (d * d)
    return total


def cylindrical_illuminance(luminaires: Sequence[PositionedLuminaire], point: Point3D) -> float:
    total = 0.0
    for i in range(CYLINDRICAL_DIRECTIONS):
        angle = 2.0 * math.pi * i / CYLINDRICAL_DIRECTIONS
        total += vertical_illuminance(luminaires, point, (math.cos(angle), math.sin(angle)))
    return total / CYLINDRICAL_DIRECTIONS


def equivalent_spherical_illuminance(horizontal: float, cylindrical: float) -> float:
    """ESI = (Eh + 2·Ec) / 3"""
    return (horizontal + 2.0 * cylindrical) / 3.0


def modelling_index(cylindrical: float, horizontal: float) -> MetricValue:
    """Ec / Eh; 0.3 to 0.6 reads as good modelling."""
    if horizontal <= 0.0:
        return UNDEFINED
    return cylindrical / horizontal


@dataclass(frozen=True)
class SpaceHeightRatio:
    length_ratio: float
    width_ratio: float


def space_height_ratio(length: float, width: float, mounting_height: float) -> SpaceHeightRatio:
    if not mounting_height > 0:
        raise InputValidationError(f"Mounting height must be > 0, got {mounting_height}")
    space_l = length / (math.ceil(length / mounting_height) + 1)
    space_w = width / (math.ceil(width / mounting_height) + 1)
    return SpaceHeightRatio(space_l / mounting_height, space_w / mounting_height)


def lighting_power_density(layout: LuminaireLayout, room: RoomGeometry) -> MetricValue:
    """Installed W/m²; UNDEFINED when the layout carries no wattage."""
    if layout.input_watts is None:
        return UNDEFINED
    return layout.input_watts * layout.count / room.floor_area


def veiling_luminance_index(
    luminaire: PositionedLuminaire,
    eye: Point3D,
    task: Point3D,
) -> MetricValue:
    """
    VLI = L·cos²θ / θ², θ (radians) between the line of sight to the task
    and the line to the luminaire.
    """
    sight = task - eye
    to_lum = luminaire.position - eye
    if sight.length() == 0.0 or to_lum.length() == 0.0:
        raise InputValidationError("Eye, task and luminaire positions must be distinct")
    cos_theta = sight.dot(to_lum) / (sight.length() * to_lum.length())
    theta = math.acos(max(-1.0, min(1.0, cos_theta)))
    if theta == 0.0:
        return UNDEFINED

    d = to_lum.length()
    cos_view = to_lum.z / d
    projected = luminaire.luminous_area * cos_view
    if projected <= 0.0:
        return 0.0
    luminance = luminaire_intensity(luminaire, Point3D(-to_lum.x, -to_lum.y, -to_lum.z)) / projected
    return luminance * math.cos(theta) ** 2 / theta**2


@dataclass(frozen=True)
class PointQuantities:
    point: Point3D
    horizontal: float
    cylindrical: float
    esi: float
    modelling_index: MetricValue


def point_quantities(
    luminaires: Sequence[PositionedLuminaire],
    point: Point3D,
    horizontal: Optional[float] = None,
) -> PointQuantities:
    """
    Cylindrical illuminance, ESI and modelling index at one point.

    ``horizontal`` is the grid value at the point; when omitted the direct
    horizontal illuminance is summed here.
    """
    if horizontal is None:
        horizontal = sum(point_direct_illuminance(point, lum) for lum in luminaires)
    ec = cylindrical_illuminance(luminaires, point)
    return PointQuantities(
        point=point,
        horizontal=horizontal,
        cylindrical=ec,
        esi=equivalent_spherical_illuminance(horizontal, ec),
        modelling_index=modelling_index(ec, horizontal),
    )
