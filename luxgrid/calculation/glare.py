"""
Discomfort glare: DGR, UGR and VCP.

Both ratings sum a per-luminaire glare factor over the luminaires in the
observer's field of view:

    DGR = 10 × log₁₀ [ 0.5 × Σ 0.5·L^1.6·ω^0.8 / (P·(Lb + 0.07·Ev)^0.85) ]
    UGR =  8 × log₁₀ [ 0.25 × Σ L²·ω / (P²·Lb) ]

Where:
    L  = luminaire luminance (cd/m²)
    ω  = solid angle subtended at the eye (sr)
    P  = position index
    Lb = background luminance (cd/m²)
    Ev = direct vertical illuminance at the eye (lux)

VCP is a cubic transform of DGR, clamped to [0, 100].

Every function takes the observer explicitly; there is no default eye
position.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from luxgrid.calculation.illuminance import luminaire_intensity
from luxgrid.core.errors import InputValidationError
from luxgrid.core.types import Point3D
from luxgrid.metrics.core import UNDEFINED, MetricValue, is_undefined
from luxgrid.models.luminaire import PositionedLuminaire
from luxgrid.models.room import RoomGeometry


POSITION_INDEX_CUTOFF_DEG = 53.0
SEATED_EYE_HEIGHT = 1.2
STANDING_EYE_HEIGHT = 1.7


@dataclass(frozen=True)
class ObserverPosition:
    """
    Observer eye position and line of sight.

    The line of sight is horizontal; ``view_azimuth_deg`` is measured from +X
    toward +Y (0 looks along the room length).
    """
    x: float
    y: float
    eye_height: float
    view_azimuth_deg: float = 0.0
    name: str = "Observer"

    def __post_init__(self) -> None:
        if not self.eye_height > 0:
            raise InputValidationError(f"Observer eye height must be > 0, got {self.eye_height}")

    @property
    def eye(self) -> Point3D:
        return Point3D(self.x, self.y, self.eye_height)


@dataclass(frozen=True)
class ViewGeometry:
    """Where a luminaire sits relative to the observer."""
    vertical_deg: float    # above the line of sight
    horizontal_deg: float  # off the line of sight, 0..180
    distance: float
    delta: Point3D         # eye to luminaire

    @property
    def in_field_of_view(self) -> bool:
        return self.vertical_deg > 0.0 and self.horizontal_deg <= 90.0


def view_geometry(luminaire_position: Point3D, observer: ObserverPosition) -> ViewGeometry:
    delta = luminaire_position - observer.eye
    horiz = delta.horizontal_length()
    vertical = math.degrees(math.atan2(delta.z, horiz))
    if horiz < 1e-12:
        horizontal = 0.0
    else:
        bearing = math.degrees(math.atan2(delta.y, delta.x))
        horizontal = abs((bearing - observer.view_azimuth_deg + 180.0) % 360.0 - 180.0)
    return ViewGeometry(vertical_deg=vertical, horizontal_deg=horizontal, distance=delta.length(), delta=delta)


# =============================================================================
# Position index
# =============================================================================

def position_index(vertical_deg: float, horizontal_deg: float) -> float:
    """
    Position index for a source ``vertical_deg`` above and ``horizontal_deg``
    beside the line of sight.

    Sources at or above 53° (and below eye level) take P = 1.
    """
    V = float(vertical_deg)
    H = float(horizontal_deg)
    if not 0.0 <= V < POSITION_INDEX_CUTOFF_DEG:
        return 1.0
    return math.exp(
        (35.2 - 0.31889 * V - 1.22 * (V / 10.0) ** 2) * 1e-3 * H
        + (21.0 + 0.26667 * V - 0.002963 * V**2) * 1e-5 * H**2
    )


def solid_angle(luminous_area: float, geometry: ViewGeometry) -> float:
    """ω = A·|Δz| / d³: luminous area projected toward the eye over d²."""
    d = geometry.distance
    if d <= 0.0:
        return 0.0
    return luminous_area * abs(geometry.delta.z) / d**3


# =============================================================================
# Adaptation terms
# =============================================================================

def background_luminance(room: RoomGeometry, average_illuminance: float) -> float:
    """
    Background luminance from area-weighted room reflectance.

        Lb = E_avg × ρ_avg / π
    """
    rho = room.reflectances
    floor = room.floor_area
    walls = room.wall_area
    weighted = (rho.ceiling * floor + rho.floor * floor + rho.wall * walls) / room.surface_area
    return max(0.0, average_illuminance) * weighted / math.pi


def vertical_illuminance_at_eye(
    luminaires: Sequence[PositionedLuminaire],
    observer: ObserverPosition,
) -> float:
    """Direct illuminance at the eye, E_v = Σ I·sinθ·cosθ / d²."""
    total = 0.0
    for lum in luminaires:
        g = view_geometry(lum.position, observer)
        if g.distance <= 0.0 or g.delta.z <= 0.0:
            continue
        intensity = luminaire_intensity(lum, Point3D(-g.delta.x, -g.delta.y, -g.delta.z))
        cos_t = g.delta.z / g.distance
        sin_t = g.delta.horizontal_length() / g.distance
        total += intensity * sin_t * cos_t / g.distance**2
    return total


def average_luminance(luminaire: PositionedLuminaire) -> float:
    """Flux-based luminaire luminance Φ / (A·π)."""
    return luminaire.lumens / (luminaire.luminous_area * math.pi)


def directional_luminance(luminaire: PositionedLuminaire, observer: ObserverPosition) -> float:
    """Luminance toward the eye: I(γ) / (A·cos γ); 0 when the opening is edge-on."""
    g = view_geometry(luminaire.position, observer)
    if g.distance <= 0.0:
        return 0.0
    cos_gamma = g.delta.z / g.distance
    projected = luminaire.luminous_area * cos_gamma
    if projected <= 0.0:
        return 0.0
    intensity = luminaire_intensity(luminaire, Point3D(-g.delta.x, -g.delta.y, -g.delta.z))
    return intensity / projected


# =============================================================================
# Glare factors and ratings
# =============================================================================

def dgr_glare_factor(
    luminance: float,
    omega: float,
    p: float,
    background: float,
    vertical_illuminance: float,
) -> MetricValue:
    adaptation = background + 0.07 * vertical_illuminance
    if adaptation <= 0.0 or p <= 0.0:
        return UNDEFINED
    return 0.5 * luminance**1.6 * omega**0.8 / (p * adaptation**0.85)


def ugr_glare_factor(luminance: float, omega: float, p: float, background: float) -> MetricValue:
    if background <= 0.0 or p <= 0.0:
        return UNDEFINED
    return luminance**2 * omega / (p**2 * background)


@dataclass(frozen=True)
class GlareContribution:
    index: int
    vertical_deg: float
    horizontal_deg: float
    position_index: float
    solid_angle: float
    dgr_factor: float
    ugr_factor: float


def discomfort_glare_rating(
    luminaires: Sequence[PositionedLuminaire],
    observer: ObserverPosition,
    background: float,
    vertical_illuminance: float,
) -> MetricValue:
    total = 0.0
    for lum in luminaires:
        g = view_geometry(lum.position, observer)
        if not g.in_field_of_view:
            continue
        m = dgr_glare_factor(
            average_luminance(lum),
            solid_angle(lum.luminous_area, g),
            position_index(g.vertical_deg, g.horizontal_deg),
            background,
            vertical_illuminance,
        )
        if is_undefined(m):
            return UNDEFINED
        total += m  # type: ignore[operator]
    if total <= 0.0:
        return UNDEFINED
    return 10.0 * math.log10(0.5 * total)


def unified_glare_rating(
    luminaires: Sequence[PositionedLuminaire],
    observer: ObserverPosition,
    background: float,
) -> MetricValue:
    total = 0.0
    for lum in luminaires:
        g = view_geometry(lum.position, observer)
        if not g.in_field_of_view:
            continue
        f = ugr_glare_factor(
            directional_luminance(lum, observer),
            solid_angle(lum.luminous_area, g),
            position_index(g.vertical_deg, g.horizontal_deg),
            background,
        )
        if is_undefined(f):
            return UNDEFINED
        total += f  # type: ignore[operator]
    if total <= 0.0:
        return UNDEFINED
    return 8.0 * math.log10(0.25 * total)


def visual_comfort_probability(dgr: MetricValue) -> MetricValue:
    if is_undefined(dgr):
        return UNDEFINED
    D = float(dgr)  # type: ignore[arg-type]
    vcp = 100.0 - 4.2 * D + 0.0883 * D**2 - 0.000689 * D**3
    return max(0.0, min(100.0, vcp))


def ugr_class(ugr_value: MetricValue) -> Optional[int]:
    """
    Round a UGR up to the standard steps 10, 13, 16, 19, 22, 25, 28.
    """
    if is_undefined(ugr_value):
        return None
    for step in (10, 13, 16, 19, 22, 25):
        if ugr_value <= step:  # type: ignore[operator]
            return step
    return 28


# =============================================================================
# Per-observer evaluation
# =============================================================================

@dataclass(frozen=True)
class GlareResult:
    """Glare indices at one observer position."""
    observer: ObserverPosition
    dgr: MetricValue
    ugr: MetricValue
    vcp: MetricValue
    background_luminance: float
    vertical_illuminance: float
    contributions: Tuple[GlareContribution, ...] = field(default_factory=tuple)

    @property
    def ugr_class(self) -> Optional[int]:
        return ugr_class(self.ugr)

    def complies_with(self, ugr_limit: float) -> bool:
        """Undefined UGR (nothing in view) complies trivially."""
        if is_undefined(self.ugr):
            return True
        return self.ugr <= ugr_limit  # type: ignore[operator]


def evaluate_glare(
    room: RoomGeometry,
    luminaires: Sequence[PositionedLuminaire],
    observer: ObserverPosition,
    average_illuminance: float,
) -> GlareResult:
    """DGR, UGR and VCP for ``observer`` given the room's average illuminance."""
    lb = background_luminance(room, average_illuminance)
    ev = vertical_illuminance_at_eye(luminaires, observer)

    contributions: List[GlareContribution] = []
    for i, lum in enumerate(luminaires):
        g = view_geometry(lum.position, observer)
        if not g.in_field_of_view:
            continue
        p = position_index(g.vertical_deg, g.horizontal_deg)
        omega = solid_angle(lum.luminous_area, g)
        m = dgr_glare_factor(average_luminance(lum), omega, p, lb, ev)
        u = ugr_glare_factor(directional_luminance(lum, observer), omega, p, lb)
        contributions.append(
            GlareContribution(
                index=i,
                vertical_deg=g.vertical_deg,
                horizontal_deg=g.horizontal_deg,
                position_index=p,
                solid_angle=omega,
                dgr_factor=0.0 if is_undefined(m) else float(m),  # type: ignore[arg-type]
                ugr_factor=0.0 if is_undefined(u) else float(u),  # type: ignore[arg-type]
            )
        )

    dgr = discomfort_glare_rating(luminaires, observer, lb, ev)
    return GlareResult(
        observer=observer,
        dgr=dgr,
        ugr=unified_glare_rating(luminaires, observer, lb),
        vcp=visual_comfort_probability(dgr),
        background_luminance=lb,
        vertical_illuminance=ev,
        contributions=tuple(contributions),
    )


@dataclass(frozen=True)
class GlareAnalysis:
    """Glare over a grid of observer positions, four view directions each."""
    results: Tuple[GlareResult, ...]
    positions_analyzed: int

    def _defined_ugr(self) -> List[float]:
        return [float(r.ugr) for r in self.results if not is_undefined(r.ugr)]  # type: ignore[arg-type]

    @property
    def max_ugr(self) -> MetricValue:
        vals = self._defined_ugr()
        return max(vals) if vals else UNDEFINED

    @property
    def min_ugr(self) -> MetricValue:
        vals = self._defined_ugr()
        return min(vals) if vals else UNDEFINED

    def complies_with(self, ugr_limit: float) -> bool:
        return all(r.complies_with(ugr_limit) for r in self.results)


def analyze_room_glare(
    room: RoomGeometry,
    luminaires: Sequence[PositionedLuminaire],
    average_illuminance: float,
    observer_spacing: float = 2.0,
    eye_height: float = SEATED_EYE_HEIGHT,
) -> GlareAnalysis:
    """
    Evaluate glare at observer positions spaced ``observer_spacing`` apart,
    inset by one spacing from the walls, looking along ±X and ±Y.
    """
    if not observer_spacing > 0:
        raise InputValidationError(f"Observer spacing must be > 0, got {observer_spacing}")
    results: List[GlareResult] = []
    positions = 0
    x = observer_spacing
    while x < room.length - observer_spacing + 1e-9:
        y = observer_spacing
        while y < room.width - observer_spacing + 1e-9:
            positions += 1
            for azimuth, label in ((0.0, "+X"), (180.0, "-X"), (90.0, "+Y"), (270.0, "-Y")):
                obs = ObserverPosition(x, y, eye_height, azimuth, name=f"({x:.1f}, {y:.1f}) {label}")
                results.append(evaluate_glare(room, luminaires, obs, average_illuminance))
            y += observer_spacing
        x += observer_spacing
    return GlareAnalysis(results=tuple(results), positions_analyzed=positions)
