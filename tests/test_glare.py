"""Tests for DGR / UGR / VCP with explicit observers."""

import math

import pytest

from luxgrid.calculation.glare import (
    ObserverPosition,
    analyze_room_glare,
    background_luminance,
    discomfort_glare_rating,
    evaluate_glare,
    position_index,
    solid_angle,
    ugr_class,
    unified_glare_rating,
    vertical_illuminance_at_eye,
    view_geometry,
    visual_comfort_probability,
)
from luxgrid.core.errors import InputValidationError
from luxgrid.core.types import Point3D
from luxgrid.metrics.core import UNDEFINED, is_undefined
from luxgrid.models.luminaire import LuminaireLayout, PositionedLuminaire
from luxgrid.models.room import Reflectances, RoomGeometry


@pytest.fixture
def office():
    return RoomGeometry(10.0, 8.0, 3.0, 0.8, Reflectances(0.7, 0.5, 0.2))


def test_position_index_on_line_of_sight_is_one():
    assert position_index(0.0, 0.0) == 1.0


def test_position_index_is_one_at_and_above_53_degrees():
    assert position_index(53.0, 40.0) == 1.0
    assert position_index(70.0, 10.0) == 1.0


def test_position_index_grows_off_axis():
    assert position_index(10.0, 30.0) > position_index(10.0, 0.0)


def test_observer_requires_positive_eye_height():
    with pytest.raises(InputValidationError):
        ObserverPosition(1.0, 1.0, 0.0)


def test_view_geometry_respects_view_direction():
    lum = Point3D(2.0, 0.0, 2.2)
    ahead = view_geometry(lum, ObserverPosition(0.0, 0.0, 1.2, view_azimuth_deg=0.0))
    assert ahead.vertical_deg == pytest.approx(math.degrees(math.atan2(1.0, 2.0)))
    assert ahead.horizontal_deg == pytest.approx(0.0)
    assert ahead.in_field_of_view

    behind = view_geometry(lum, ObserverPosition(0.0, 0.0, 1.2, view_azimuth_deg=180.0))
    assert behind.horizontal_deg == pytest.approx(180.0)
    assert not behind.in_field_of_view


def test_solid_angle_directly_overhead():
    g = view_geometry(Point3D(0.0, 0.0, 3.2), ObserverPosition(0.0, 0.0, 1.2))
    assert solid_angle(0.09, g) == pytest.approx(0.09 * 2.0 / 8.0)


def test_background_luminance_area_weighted(office):
    # floor/ceiling 80 m² each, walls 36 m x 3 m
    rho = (0.7 * 80 + 0.2 * 80 + 0.5 * 108) / 268
    assert background_luminance(office, 500.0) == pytest.approx(500.0 * rho / math.pi)
    assert background_luminance(office, 0.0) == 0.0


def test_source_overhead_adds_no_vertical_illuminance():
    lum = PositionedLuminaire(position=Point3D(0.0, 0.0, 3.0), lumens=1000.0)
    assert vertical_illuminance_at_eye([lum], ObserverPosition(0.0, 0.0, 1.2)) == 0.0


def test_ugr_single_source_by_hand():
    lum = PositionedLuminaire(position=Point3D(3.0, 0.0, 3.2), lumens=1000.0)
    obs = ObserverPosition(0.0, 0.0, 1.2)
    d = math.sqrt(13.0)
    cos_g = 2.0 / d
    intensity = 1000.0 / (4.0 * math.pi) * cos_g**3
    L = intensity / (0.09 * cos_g)
    omega = 0.09 * 2.0 / d**3
    expected = 8.0 * math.log10(0.25 * L * L * omega / 10.0)
    assert unified_glare_rating([lum], obs, 10.0) == pytest.approx(expected)


def test_dgr_single_source_by_hand():
    lum = PositionedLuminaire(position=Point3D(3.0, 0.0, 3.2), lumens=1000.0)
    obs = ObserverPosition(0.0, 0.0, 1.2)
    d = math.sqrt(13.0)
    L = 1000.0 / (0.09 * math.pi)
    omega = 0.09 * 2.0 / d**3
    factor = 0.5 * L**1.6 * omega**0.8 / (1.0 * (10.0 + 0.07 * 5.0) ** 0.85)
    expected = 10.0 * math.log10(0.5 * factor)
    assert discomfort_glare_rating([lum], obs, 10.0, 5.0) == pytest.approx(expected)


def test_nothing_in_view_is_undefined():
    lum = PositionedLuminaire(position=Point3D(-3.0, 0.0, 3.2), lumens=1000.0)
    obs = ObserverPosition(0.0, 0.0, 1.2, view_azimuth_deg=0.0)
    assert unified_glare_rating([lum], obs, 10.0) is UNDEFINED
    assert discomfort_glare_rating([lum], obs, 10.0, 0.0) is UNDEFINED
    assert visual_comfort_probability(UNDEFINED) is UNDEFINED


def test_zero_background_makes_ugr_undefined():
    lum = PositionedLuminaire(position=Point3D(3.0, 0.0, 3.2), lumens=1000.0)
    assert unified_glare_rating([lum], ObserverPosition(0.0, 0.0, 1.2), 0.0) is UNDEFINED


@pytest.mark.parametrize("dgr", [-50.0, 0.0, 10.0, 25.0, 60.0, 200.0])
def test_vcp_stays_in_range(dgr):
    assert 0.0 <= visual_comfort_probability(dgr) <= 100.0


def test_vcp_formula():
    assert visual_comfort_probability(10.0) == pytest.approx(100 - 42 + 8.83 - 0.689)


def test_ugr_class_steps():
    assert ugr_class(9.0) == 10
    assert ugr_class(18.2) == 19
    assert ugr_class(31.0) == 28
    assert ugr_class(UNDEFINED) is None


def test_evaluate_glare_in_office(office):
    layout = LuminaireLayout(rows=3, columns=3, mounting_height=2.2, lumens=5000.0)
    lums = layout.place(office)
    obs = ObserverPosition(0.5, 4.0, 1.2, view_azimuth_deg=0.0)
    res = evaluate_glare(office, lums, obs, 400.0)
    assert not is_undefined(res.ugr)
    assert not is_undefined(res.dgr)
    assert 0.0 <= res.vcp <= 100.0
    assert res.contributions
    assert all(c.horizontal_deg <= 90.0 and c.vertical_deg > 0.0 for c in res.contributions)


def test_turning_around_changes_the_view(office):
    layout = LuminaireLayout(rows=1, columns=1, mounting_height=2.2, lumens=5000.0)
    lums = layout.place(office)
    facing = evaluate_glare(office, lums, ObserverPosition(1.0, 4.0, 1.2, 0.0), 300.0)
    away = evaluate_glare(office, lums, ObserverPosition(1.0, 4.0, 1.2, 180.0), 300.0)
    assert not is_undefined(facing.ugr)
    assert away.ugr is UNDEFINED
    assert away.complies_with(19.0)


def test_room_analysis_covers_observer_grid(office):
    layout = LuminaireLayout(rows=2, columns=2, mounting_height=2.2, lumens=3000.0)
    analysis = analyze_room_glare(office, layout.place(office), 300.0, observer_spacing=2.0)
    assert analysis.positions_analyzed == 12
    assert len(analysis.results) == 48
    assert not is_undefined(analysis.max_ugr)
    assert analysis.min_ugr <= analysis.max_ugr
