from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple

import numpy as np

from luxgrid.core.errors import InputValidationError
from luxgrid.models.angles import AngleGrid
from luxgrid.models.candela import CandelaGrid
from luxgrid.models.photometry import BallastInfo, PhotometryHeader
from luxgrid.models.tilt import TiltSpec


@dataclass(frozen=True)
class PhotometricDataset:
    """A fully parsed angular-candela table.

    Instances are immutable and may be shared read-only between any number
    of grid calculations.
    """

    standard_line: str | None
    keywords: Dict[str, Tuple[str, ...]]
    header_lines: Tuple[str, ...]  # lines before TILT= that are not keywords
    tilt: TiltSpec
    photometry: PhotometryHeader
    ballast: BallastInfo
    angles: AngleGrid
    candela: CandelaGrid

    def __post_init__(self) -> None:
        v = self.angles.vertical_deg
        h = self.angles.horizontal_deg
        if not v or not h:
            raise InputValidationError("Photometric dataset needs at least one vertical and one horizontal angle")
        rows = self.candela.values_cd
        if len(rows) != len(h):
            raise InputValidationError(
                f"Candela matrix has {len(rows)} rows but {len(h)} horizontal angles"
            )
        for i, row in enumerate(rows):
            if len(row) != len(v):
                raise InputValidationError(
                    f"Candela row {i} has {len(row)} values but {len(v)} vertical angles"
                )

    @property
    def vertical_angles(self) -> Tuple[float, ...]:
        return self.angles.vertical_deg

    @property
    def horizontal_angles(self) -> Tuple[float, ...]:
        return self.angles.horizontal_deg

    @property
    def intensity_scale(self) -> float:
        """Factor turning recorded candela into delivered candela."""
        return (
            self.photometry.candela_multiplier
            * self.ballast.ballast_factor
            * self.ballast.ballast_lamp_factor
        )

    @property
    def rated_lumens(self) -> float:
        return self.photometry.num_lamps * self.photometry.lumens_per_lamp

    def keyword(self, key: str, default: str | None = None) -> str | None:
        values = self.keywords.get(key)
        return values[0] if values else default

    def candela_array(self) -> np.ndarray:
        arr = np.asarray(self.candela.values_cd, dtype=float)
        arr.setflags(write=False)
        return arr

    def peak(self) -> Tuple[float, float, float]:
        """Return ``(candela, horizontal_deg, vertical_deg)`` of the recorded maximum."""
        arr = self.candela_array()
        hi, vi = np.unravel_index(int(np.argmax(arr)), arr.shape)
        return float(arr[hi, vi]), float(self.horizontal_angles[hi]), float(self.vertical_angles[vi])
