"""
Zonal cavity quantities and coefficient of utilization.

    RCR = 5 × h × (L + W) / (L × W)

Each CU formula is a named function with its own constants and clamp; they
are empirical fits used by different calculation paths and are not
interchangeable.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from luxgrid.core.errors import InputValidationError
from luxgrid.models.luminaire import DistributionType
from luxgrid.models.room import Reflectances, RoomGeometry


# Reference working plane used by the room-index method (meters).
ROOM_INDEX_WORKPLANE = 0.85

_DISTRIBUTION_BLEND = {
    DistributionType.DIRECT: (1.0, 0.0),
    DistributionType.INDIRECT: (0.0, 1.0),
    DistributionType.SEMI_DIRECT: (0.7, 0.3),
    DistributionType.SEMI_INDIRECT: (0.3, 0.7),
    DistributionType.DIRECT_INDIRECT: (0.5, 0.5),
}


def _clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def cavity_ratio(cavity_height: float, length: float, width: float) -> float:
    """5·h·(L+W)/(L·W); 0 for a zero-height cavity."""
    if length <= 0 or width <= 0:
        raise InputValidationError(f"Cavity footprint must be positive, got {length} x {width}")
    if cavity_height <= 0:
        return 0.0
    return 5.0 * cavity_height * (length + width) / (length * width)


def room_cavity_ratio(room: RoomGeometry) -> float:
    return cavity_ratio(room.cavity_height, room.length, room.width)


@dataclass(frozen=True)
class CavityRatios:
    room: float
    ceiling: float
    floor: float


def cavity_ratios(room: RoomGeometry, suspension_length: float = 0.0) -> CavityRatios:
    """
    Room, ceiling and floor cavity ratios.

    Luminaires are taken as recessed unless ``suspension_length`` is given;
    the floor cavity runs from the floor up to the workplane.
    """
    rcr = cavity_ratio(room.cavity_height - suspension_length, room.length, room.width)
    ccr = cavity_ratio(suspension_length, room.length, room.width)
    fcr = cavity_ratio(room.workplane_height, room.length, room.width)
    return CavityRatios(room=rcr, ceiling=ccr, floor=fcr)


def effective_cavity_reflectance(base_reflectance: float, wall_reflectance: float, ratio: float) -> float:
    """(ρ + 0.8·ρw·CR) / (1 + 0.8·CR)"""
    return (base_reflectance + 0.8 * wall_reflectance * ratio) / (1.0 + 0.8 * ratio)


@dataclass(frozen=True)
class EffectiveReflectances:
    ceiling_cavity: float
    floor_cavity: float
    wall: float


def effective_reflectances(room: RoomGeometry, suspension_length: float = 0.0) -> EffectiveReflectances:
    ratios = cavity_ratios(room, suspension_length)
    rho = room.reflectances
    return EffectiveReflectances(
        ceiling_cavity=effective_cavity_reflectance(rho.ceiling, rho.wall, ratios.ceiling),
        floor_cavity=effective_cavity_reflectance(rho.floor, rho.wall, ratios.floor),
        wall=rho.wall,
    )


def room_index(room: RoomGeometry) -> float:
    """k = L·W / ((H - 0.85)·(L + W)), measured from the 0.85 m reference plane."""
    mount = room.height - ROOM_INDEX_WORKPLANE
    if mount <= 0:
        raise InputValidationError(
            f"Room height must exceed the {ROOM_INDEX_WORKPLANE} m reference plane, got {room.height}"
        )
    return room.floor_area / (mount * (room.length + room.width))


# =============================================================================
# Coefficient of utilization
# =============================================================================

def utilization_cu(rcr: float, reflectances: Reflectances, distribution: DistributionType) -> float:
    """Distribution-weighted CU, clamped to [0.1, 0.95]."""
    rc, rw, rf = reflectances.ceiling, reflectances.wall, reflectances.floor
    direct = 0.95 * (0.8 + 0.2 * rc) * (0.7 + 0.3 * rw) * (0.9 + 0.1 * rf) * math.exp(-0.25 * rcr)
    indirect = 0.75 * (0.6 + 0.4 * rc) * (0.7 + 0.3 * rw) * (0.95 + 0.05 * rf) * math.exp(-0.15 * rcr)
    w_direct, w_indirect = _DISTRIBUTION_BLEND[DistributionType.parse(distribution)]
    return _clamp(w_direct * direct + w_indirect * indirect, 0.1, 0.95)


def average_illuminance_cu(rcr: float, reflectances: Reflectances) -> float:
    """Lumen-method CU, clamped to [0.2, 0.95]."""
    rc, rw, rf = reflectances.ceiling, reflectances.wall, reflectances.floor
    cu = 0.9 * math.exp(-0.2 * rcr) * (0.7 + 0.3 * rc) * (0.7 + 0.3 * rw) * (0.8 + 0.2 * rf)
    return _clamp(cu, 0.2, 0.95)


def iesna_cu(rcr: float, reflectances: Reflectances) -> float:
    """CU used by the advanced IESNA quantities, clamped to [0.1, 0.95]."""
    rc, rw, rf = reflectances.ceiling, reflectances.wall, reflectances.floor
    cu = 0.95 * math.exp(-0.24 * rcr) * (0.8 + 0.2 * rc) * (0.8 + 0.2 * rf) * (0.7 + 0.3 * rw)
    return _clamp(cu, 0.1, 0.95)


def room_index_cu(k: float, reflectances: Reflectances) -> float:
    """Utilance from the room index k, clamped to [0.1, 0.95]."""
    cu = 0.4
    if k < 1.0:
        cu *= 0.8
    elif k > 3.0:
        cu *= 1.2
    else:
        cu *= 0.8 + (k - 1.0) * 0.13
    cu *= 0.7 + 0.3 * (0.7 * reflectances.ceiling + 0.3 * reflectances.wall)
    return _clamp(cu, 0.1, 0.95)
