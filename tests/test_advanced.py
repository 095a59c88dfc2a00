import math

import pytest

from luxgrid.calculation.advanced import (
    cylindrical_illuminance,
    equivalent_spherical_illuminance,
    lighting_power_density,
    modelling_index,
    point_quantities,
    space_height_ratio,
    veiling_luminance_index,
    vertical_illuminance,
)
from luxgrid.core.errors import InputValidationError
from luxgrid.core.types import Point3D
from luxgrid.metrics.core import UNDEFINED
from luxgrid.models.luminaire import LuminaireLayout, PositionedLuminaire
from luxgrid.models.room import RoomGeometry


def _lum(x, y, z, lumens=1000.0):
    return PositionedLuminaire(position=Point3D(x, y, z), lumens=lumens)


def test_vertical_illuminance_facing_source():
    lum = _lum(2.0, 0.0, 2.0)
    point = Point3D(0.0, 0.0, 0.0)
    d = math.sqrt(8.0)
    cos_down = 2.0 / d
    intensity = 1000.0 / (4.0 * math.pi) * cos_down**3
    expected = intensity * (2.0 / d) * 1.0 / (d * d)
    assert vertical_illuminance([lum], point, (1.0, 0.0)) == pytest.approx(expected)
    # Plane edge-on to the source receives nothing.
    assert vertical_illuminance([lum], point, (0.0, 1.0)) == pytest.approx(0.0)


def test_direction_must_be_horizontal():
    with pytest.raises(InputValidationError):
        vertical_illuminance([], Point3D(0, 0, 0), (0.0, 0.0))


def test_cylindrical_is_mean_of_eight_directions():
    lum = _lum(2.0, 0.0, 2.0)
    point = Point3D(0.0, 0.0, 0.0)
    directions = [(math.cos(2 * math.pi * i / 8), math.sin(2 * math.pi * i / 8)) for i in range(8)]
    expected = sum(vertical_illuminance([lum], point, d) for d in directions) / 8.0
    assert cylindrical_illuminance([lum], point) == pytest.approx(expected)


def test_esi_and_modelling_index():
    assert equivalent_spherical_illuminance(300.0, 150.0) == pytest.approx(200.0)
    assert modelling_index(150.0, 300.0) == pytest.approx(0.5)
    assert modelling_index(150.0, 0.0) is UNDEFINED


def test_point_quantities_sum_horizontal_when_missing():
    lum = _lum(1.0, 1.0, 2.0)
    pq = point_quantities([lum], Point3D(1.0, 1.0, 0.0))
    assert pq.horizontal == pytest.approx(1000.0 / (4.0 * math.pi) / 4.0)
    # Straight overhead adds nothing to vertical planes.
    assert pq.cylindrical == 0.0
    assert pq.modelling_index == 0.0


def test_space_height_ratio():
    r = space_height_ratio(10.0, 8.0, 2.0)
    assert r.length_ratio == pytest.approx(10.0 / 6.0 / 2.0)
    assert r.width_ratio == pytest.approx(8.0 / 5.0 / 2.0)
    with pytest.raises(InputValidationError):
        space_height_ratio(10.0, 8.0, 0.0)


def test_lighting_power_density():
    room = RoomGeometry(10.0, 8.0, 3.0, 0.8)
    assert lighting_power_density(LuminaireLayout(3, 3, 2.2, 5000.0), room) is UNDEFINED
    with_watts = LuminaireLayout(3, 3, 2.2, 5000.0, input_watts=40.0)
    assert lighting_power_density(with_watts, room) == pytest.approx(360.0 / 80.0)


def test_veiling_luminance_index_falls_off_with_angle():
    eye = Point3D(0.0, 0.0, 1.2)
    task = Point3D(2.0, 0.0, 0.8)
    near = veiling_luminance_index(_lum(2.0, 0.0, 2.5), eye, task)
    far = veiling_luminance_index(_lum(2.0, 2.0, 2.5), eye, task)
    assert near > far > 0.0


def test_veiling_luminance_index_on_line_of_sight_is_undefined():
    eye = Point3D(0.0, 0.0, 1.2)
    lum = _lum(0.0, 0.0, 2.2)
    assert veiling_luminance_index(lum, eye, Point3D(0.0, 0.0, 3.2)) is UNDEFINED
