"""
Lumen method average illuminance.

    E_avg = Φ_total × CU × LLF / A
"""

from __future__ import annotations

from dataclasses import dataclass

from luxgrid.core.errors import InputValidationError
from luxgrid.metrics.cavity import average_illuminance_cu, room_cavity_ratio, room_index, room_index_cu
from luxgrid.models.luminaire import LuminaireLayout
from luxgrid.models.room import RoomGeometry


DEFAULT_LIGHT_LOSS_FACTOR = 0.8


@dataclass(frozen=True)
class LumenMethodResult:
    average: float
    cu: float
    light_loss_factor: float
    total_lumens: float
    area: float

    @property
    def rounded(self) -> int:
        return int(self.average + 0.5)

    def luminaires_for(self, target_lux: float, lumens_per_luminaire: float) -> int:
        """Luminaires needed to reach ``target_lux`` with the same CU and LLF."""
        if not target_lux > 0 or not lumens_per_luminaire > 0:
            raise InputValidationError("Target illuminance and luminaire flux must be > 0")
        per_unit = lumens_per_luminaire * self.cu * self.light_loss_factor / self.area
        count = target_lux / per_unit
        whole = int(count)
        return whole if whole == count else whole + 1


def _check_llf(light_loss_factor: float) -> None:
    if not 0.0 < light_loss_factor <= 1.0:
        raise InputValidationError(f"Light loss factor must be within (0, 1], got {light_loss_factor}")


def average_illuminance(
    room: RoomGeometry,
    layout: LuminaireLayout,
    light_loss_factor: float = DEFAULT_LIGHT_LOSS_FACTOR,
) -> LumenMethodResult:
    _check_llf(light_loss_factor)
    cu = average_illuminance_cu(room_cavity_ratio(room), room.reflectances)
    total = layout.total_lumens
    area = room.floor_area
    return LumenMethodResult(
        average=total * cu * light_loss_factor / area,
        cu=cu,
        light_loss_factor=light_loss_factor,
        total_lumens=total,
        area=area,
    )


def room_index_method(
    room: RoomGeometry,
    layout: LuminaireLayout,
    light_loss_factor: float = DEFAULT_LIGHT_LOSS_FACTOR,
) -> LumenMethodResult:
    """Same as :func:`average_illuminance` with the CU taken from the room index."""
    _check_llf(light_loss_factor)
    cu = room_index_cu(room_index(room), room.reflectances)
    total = layout.total_lumens
    area = room.floor_area
    return LumenMethodResult(
        average=total * cu * light_loss_factor / area,
        cu=cu,
        light_loss_factor=light_loss_factor,
        total_lumens=total,
        area=area,
    )
