import pytest

from luxgrid.calculation.lumen_method import average_illuminance, room_index_method
from luxgrid.core.errors import InputValidationError
from luxgrid.metrics.cavity import average_illuminance_cu, room_cavity_ratio
from luxgrid.models.luminaire import LuminaireLayout
from luxgrid.models.room import Reflectances, RoomGeometry


@pytest.fixture
def office():
    return RoomGeometry(10.0, 8.0, 3.0, 0.8, Reflectances(0.7, 0.5, 0.2))


def test_lumen_method_formula(office):
    layout = LuminaireLayout(rows=3, columns=3, mounting_height=2.2, lumens=5000.0)
    res = average_illuminance(office, layout)
    cu = average_illuminance_cu(room_cavity_ratio(office), office.reflectances)
    assert res.cu == pytest.approx(cu)
    assert res.total_lumens == 45000.0
    assert res.area == 80.0
    assert res.light_loss_factor == 0.8
    assert res.average == pytest.approx(45000.0 * cu * 0.8 / 80.0)


def test_average_scales_linearly_with_flux(office):
    one = average_illuminance(office, LuminaireLayout(3, 3, 2.2, 4000.0))
    two = average_illuminance(office, LuminaireLayout(3, 3, 2.2, 8000.0))
    assert two.average == pytest.approx(2.0 * one.average)


def test_room_index_method(office):
    res = room_index_method(office, LuminaireLayout(2, 2, 2.2, 3000.0), light_loss_factor=0.7)
    assert 0.1 <= res.cu <= 0.95
    assert res.average == pytest.approx(12000.0 * res.cu * 0.7 / 80.0)


def test_luminaires_needed(office):
    res = average_illuminance(office, LuminaireLayout(3, 3, 2.2, 5000.0))
    n = res.luminaires_for(res.average, 5000.0)
    assert n == 9 or n == 10
    assert res.luminaires_for(2 * res.average, 5000.0) >= 18


@pytest.mark.parametrize("llf", [0.0, -0.1, 1.5])
def test_light_loss_factor_range(office, llf):
    with pytest.raises(InputValidationError):
        average_illuminance(office, LuminaireLayout(1, 1, 2.2, 1000.0), light_loss_factor=llf)
