from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from luxgrid.core.errors import InputValidationError
from luxgrid.models.luminaire import FIXTURE_PROFILES, LuminaireLayout, LuminaireType
from luxgrid.models.room import RoomGeometry


REFERENCE_BEAM_DEG = 60.0
MAX_SPACING_FACTOR = 1.5


def beam_factor(beam_angle_deg: Optional[float]) -> float:
    """Beam angle relative to a 60° reference, limited to [0.7, 1.5]."""
    if beam_angle_deg is None:
        return 1.0
    return max(0.7, min(1.5, beam_angle_deg / REFERENCE_BEAM_DEG))


def spacing_criterion(
    luminaire_type: "LuminaireType | str | None",
    beam_angle_deg: Optional[float] = None,
) -> Tuple[float, float]:
    scx, scy = FIXTURE_PROFILES[LuminaireType.parse(luminaire_type)].spacing_criterion
    f = beam_factor(beam_angle_deg)
    return scx * f, scy * f


@dataclass(frozen=True)
class RecommendedSpacing:
    x: float
    y: float
    max_x: float
    max_y: float


def recommended_spacing(
    luminaire_type: "LuminaireType | str | None",
    mounting_height: float,
    beam_angle_deg: Optional[float] = None,
) -> RecommendedSpacing:
    if not mounting_height > 0:
        raise InputValidationError(f"Mounting height must be > 0, got {mounting_height}")
    scx, scy = spacing_criterion(luminaire_type, beam_angle_deg)
    x = scx * mounting_height
    y = scy * mounting_height
    return RecommendedSpacing(x=x, y=y, max_x=x * MAX_SPACING_FACTOR, max_y=y * MAX_SPACING_FACTOR)


def _status(ratio: float) -> str:
    if ratio <= 1.5:
        return "good"
    if ratio <= 2.0:
        return "acceptable"
    return "poor"


@dataclass(frozen=True)
class SpacingEvaluation:
    recommended: RecommendedSpacing
    actual: Tuple[float, float]
    ratio: Tuple[float, float]
    status: Tuple[str, str]

    @property
    def overall(self) -> str:
        if "poor" in self.status:
            return "poor"
        if "acceptable" in self.status:
            return "acceptable"
        return "good"


def evaluate_spacing(
    luminaire_type: "LuminaireType | str | None",
    spacing_x: float,
    spacing_y: float,
    mounting_height: float,
    beam_angle_deg: Optional[float] = None,
) -> SpacingEvaluation:
    rec = recommended_spacing(luminaire_type, mounting_height, beam_angle_deg)
    rx = spacing_x / rec.x
    ry = spacing_y / rec.y
    return SpacingEvaluation(
        recommended=rec,
        actual=(spacing_x, spacing_y),
        ratio=(rx, ry),
        status=(_status(rx), _status(ry)),
    )


def evaluate_layout_spacing(room: RoomGeometry, layout: LuminaireLayout) -> SpacingEvaluation:
    sx, sy = layout.spacing(room)
    return evaluate_spacing(layout.luminaire_type, sx, sy, layout.mounting_height, layout.beam_angle_deg)
