from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class Point3D:
    """A point (or displacement) in 3D space (meters)."""
    x: float
    y: float
    z: float

    def __add__(self, other: "Point3D") -> "Point3D":
        return Point3D(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: "Point3D") -> "Point3D":
        return Point3D(self.x - other.x, self.y - other.y, self.z - other.z)

    def __mul__(self, scalar: float) -> "Point3D":
        return Point3D(self.x * scalar, self.y * scalar, self.z * scalar)

    def dot(self, other: "Point3D") -> float:
        return self.x * other.x + self.y * other.y + self.z * other.z

    def length(self) -> float:
        return math.sqrt(self.x**2 + self.y**2 + self.z**2)

    def horizontal_length(self) -> float:
        return math.hypot(self.x, self.y)

    def normalize(self) -> "Point3D":
        L = self.length()
        if L < 1e-10:
            return Point3D(0, 0, 1)
        return Point3D(self.x / L, self.y / L, self.z / L)

    def to_tuple(self) -> Tuple[float, float, float]:
        return (self.x, self.y, self.z)
