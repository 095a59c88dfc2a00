from __future__ import annotations

import math
from dataclasses import dataclass, field

from luxgrid.core.errors import InputValidationError
from luxgrid.core.units import Measurement, normalize_dimensions


@dataclass(frozen=True)
class Reflectances:
    ceiling: float = 0.7
    wall: float = 0.5
    floor: float = 0.2

    def __post_init__(self) -> None:
        for name in ("ceiling", "wall", "floor"):
            v = getattr(self, name)
            if not 0.0 <= float(v) <= 1.0:
                raise InputValidationError(f"{name} reflectance must be within [0, 1], got {v}")

    @staticmethod
    def from_percentages(ceiling: float, wall: float, floor: float) -> "Reflectances":
        return Reflectances(ceiling=ceiling / 100.0, wall=wall / 100.0, floor=floor / 100.0)

    @property
    def average(self) -> float:
        return (self.ceiling + self.wall + self.floor) / 3.0


@dataclass(frozen=True)
class RoomGeometry:
    """
    Rectangular room, all lengths in metres.

    Attributes:
        length: Extent along X (meters)
        width: Extent along Y (meters)
        height: Floor to ceiling (meters)
        workplane_height: Height of the calculation plane above the floor (meters)
        reflectances: Ceiling / wall / floor reflectance fractions
    """
    length: float
    width: float
    height: float
    workplane_height: float
    reflectances: Reflectances = field(default_factory=Reflectances)

    def __post_init__(self) -> None:
        for name in ("length", "width", "height", "workplane_height"):
            v = getattr(self, name)
            if not math.isfinite(v):
                raise InputValidationError(f"Room {name} must be finite, got {v}")
        if not self.length > 0 or not self.width > 0:
            raise InputValidationError(
                f"Room length and width must be > 0, got {self.length} x {self.width}"
            )
        if not self.workplane_height > 0:
            raise InputValidationError(f"Workplane height must be > 0, got {self.workplane_height}")
        if not self.height > self.workplane_height:
            raise InputValidationError(
                f"Room height ({self.height}) must exceed workplane height ({self.workplane_height})"
            )

    @staticmethod
    def from_units(
        length: Measurement,
        width: Measurement,
        height: Measurement,
        workplane_height: Measurement,
        reflectances: Reflectances | None = None,
    ) -> "RoomGeometry":
        dims = normalize_dimensions(length, width, height, workplane_height)
        return RoomGeometry(
            length=dims.length,
            width=dims.width,
            height=dims.height,
            workplane_height=dims.workplane_height,
            reflectances=reflectances or Reflectances(),
        )

    @property
    def floor_area(self) -> float:
        return self.length * self.width

    @property
    def perimeter(self) -> float:
        return 2.0 * (self.length + self.width)

    @property
    def cavity_height(self) -> float:
        return self.height - self.workplane_height

    @property
    def wall_area(self) -> float:
        return self.perimeter * self.height

    @property
    def surface_area(self) -> float:
        return 2.0 * self.floor_area + self.wall_area
