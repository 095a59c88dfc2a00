from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

from luxgrid.core.errors import InputValidationError
from luxgrid.core.types import Point3D
from luxgrid.models.dataset import PhotometricDataset
from luxgrid.models.room import RoomGeometry


DEFAULT_COSINE_EXPONENT = 3.0
DEFAULT_LUMINOUS_SIDE_M = 0.3


class DistributionType(str, Enum):
    DIRECT = "direct"
    INDIRECT = "indirect"
    SEMI_DIRECT = "semi-direct"
    SEMI_INDIRECT = "semi-indirect"
    DIRECT_INDIRECT = "direct-indirect"

    @classmethod
    def parse(cls, value: "str | DistributionType") -> "DistributionType":
        if isinstance(value, DistributionType):
            return value
        key = str(value).strip().lower().replace("_", "-")
        for member in cls:
            if member.value == key:
                return member
        raise InputValidationError(f"Unknown distribution type: {value!r}")


class LuminaireType(str, Enum):
    DOWNLIGHT = "downlight"
    HIGHBAY = "highbay"
    FLOODLIGHT = "floodlight"
    PANEL = "panel"
    PENDANT = "pendant"
    TRACK = "track"
    WALLWASH = "wallwash"
    COVE = "cove"
    UPLIGHTING = "uplighting"
    DEFAULT = "default"

    @classmethod
    def parse(cls, value: "str | LuminaireType | None") -> "LuminaireType":
        """Resolve a free-text type; anything unrecognized is DEFAULT."""
        if isinstance(value, LuminaireType):
            return value
        if value is None:
            return cls.DEFAULT
        key = str(value).strip().lower().replace("-", "").replace(" ", "")
        for member in cls:
            if member.value == key:
                return member
        return cls.DEFAULT


@dataclass(frozen=True)
class FixtureProfile:
    cosine_exponent: float
    distribution: DistributionType
    spacing_criterion: Tuple[float, float]  # (x, y)


FIXTURE_PROFILES: Dict[LuminaireType, FixtureProfile] = {
    LuminaireType.DOWNLIGHT: FixtureProfile(4.0, DistributionType.DIRECT, (1.0, 1.0)),
    LuminaireType.HIGHBAY: FixtureProfile(2.0, DistributionType.DIRECT, (1.2, 1.2)),
    LuminaireType.FLOODLIGHT: FixtureProfile(2.5, DistributionType.DIRECT, (1.2, 1.0)),
    LuminaireType.PANEL: FixtureProfile(1.2, DistributionType.DIRECT, (1.4, 1.4)),
    LuminaireType.PENDANT: FixtureProfile(2.5, DistributionType.DIRECT_INDIRECT, (1.3, 1.3)),
    LuminaireType.TRACK: FixtureProfile(2.5, DistributionType.SEMI_DIRECT, (1.2, 1.2)),
    LuminaireType.WALLWASH: FixtureProfile(2.5, DistributionType.SEMI_DIRECT, (1.2, 1.2)),
    LuminaireType.COVE: FixtureProfile(2.5, DistributionType.INDIRECT, (1.2, 1.2)),
    LuminaireType.UPLIGHTING: FixtureProfile(2.5, DistributionType.INDIRECT, (1.2, 1.2)),
    LuminaireType.DEFAULT: FixtureProfile(2.5, DistributionType.DIRECT, (1.2, 1.2)),
}


@dataclass(frozen=True)
class PositionedLuminaire:
    """One luminaire instance, ready for point-by-point summation."""
    position: Point3D
    lumens: float
    cosine_exponent: float = DEFAULT_COSINE_EXPONENT
    photometry: Optional[PhotometricDataset] = None
    luminous_area: float = DEFAULT_LUMINOUS_SIDE_M * DEFAULT_LUMINOUS_SIDE_M
    row: int = 0
    column: int = 0


@dataclass(frozen=True)
class LuminaireLayout:
    """
    A uniform rows x columns array of identical luminaires.

    Attributes:
        rows: Luminaire rows (along the room width)
        columns: Luminaire columns (along the room length)
        mounting_height: Height of the luminaires above the workplane (meters)
        lumens: Luminous flux per luminaire (lm)
        distribution: Explicit distribution tag; overrides the type's default
        photometry: Parsed photometric data shared by every unit
        luminaire_type: Fixture archetype; resolved once into a FixtureProfile
        luminous_width, luminous_length, luminous_diameter: Luminous opening (meters)
        input_watts: Electrical input per luminaire (W)
        beam_angle_deg: Nominal beam angle, used by the spacing criterion
    """
    rows: int
    columns: int
    mounting_height: float
    lumens: float
    distribution: Optional[DistributionType] = None
    photometry: Optional[PhotometricDataset] = None
    luminaire_type: Optional[LuminaireType] = None
    luminous_width: float = DEFAULT_LUMINOUS_SIDE_M
    luminous_length: float = DEFAULT_LUMINOUS_SIDE_M
    luminous_diameter: Optional[float] = None
    input_watts: Optional[float] = None
    beam_angle_deg: Optional[float] = None
    profile: FixtureProfile = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if self.rows < 1 or self.columns < 1:
            raise InputValidationError(f"Layout needs at least 1 row and 1 column, got {self.rows}x{self.columns}")
        if not self.mounting_height > 0 or not math.isfinite(self.mounting_height):
            raise InputValidationError(f"Mounting height must be a finite value > 0, got {self.mounting_height}")
        if not self.lumens > 0 or not math.isfinite(self.lumens):
            raise InputValidationError(f"Luminous flux must be a finite value > 0, got {self.lumens}")
        if not self.luminous_area > 0 or not math.isfinite(self.luminous_area):
            raise InputValidationError("Luminous opening must have a positive area")
        if self.distribution is not None:
            object.__setattr__(self, "distribution", DistributionType.parse(self.distribution))
        if self.luminaire_type is not None:
            object.__setattr__(self, "luminaire_type", LuminaireType.parse(self.luminaire_type))
        object.__setattr__(self, "profile", FIXTURE_PROFILES[self.luminaire_type or LuminaireType.DEFAULT])

    @property
    def count(self) -> int:
        return self.rows * self.columns

    @property
    def total_lumens(self) -> float:
        return self.lumens * self.count

    @property
    def cosine_exponent(self) -> float:
        if self.luminaire_type is None:
            return DEFAULT_COSINE_EXPONENT
        return self.profile.cosine_exponent

    @property
    def effective_distribution(self) -> DistributionType:
        if self.distribution is not None:
            return self.distribution
        return self.profile.distribution

    @property
    def luminous_area(self) -> float:
        if self.luminous_diameter is not None:
            r = self.luminous_diameter / 2.0
            return math.pi * r * r
        return self.luminous_width * self.luminous_length

    def spacing(self, room: RoomGeometry) -> Tuple[float, float]:
        """Centre-to-centre spacing (x, y) of the array in the given room."""
        return room.length / self.columns, room.width / self.rows

    def position(self, room: RoomGeometry, row: int, column: int) -> Point3D:
        sx, sy = self.spacing(room)
        return Point3D(
            (column + 0.5) * sx,
            (row + 0.5) * sy,
            room.workplane_height + self.mounting_height,
        )

    def place(self, room: RoomGeometry) -> List[PositionedLuminaire]:
        area = self.luminous_area
        exponent = self.cosine_exponent
        return [
            PositionedLuminaire(
                position=self.position(room, r, c),
                lumens=self.lumens,
                cosine_exponent=exponent,
                photometry=self.photometry,
                luminous_area=area,
                row=r,
                column=c,
            )
            for r in range(self.rows)
            for c in range(self.columns)
        ]
