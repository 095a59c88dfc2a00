"""Tests for the workplane illuminance grid."""

import pytest

from luxgrid.calculation.illuminance import (
    calculate_grid_illuminance,
    compute_grid,
    grid_point_counts,
    reflection_factor,
)
from luxgrid.core.errors import CalculationCancelled, InputValidationError
from luxgrid.core.types import Point3D
from luxgrid.metrics.core import UNDEFINED
from luxgrid.models.luminaire import LuminaireLayout, PositionedLuminaire
from luxgrid.models.room import Reflectances, RoomGeometry
from luxgrid.parser.ies_parser import parse_ies_text


def _ies(candela: float, multiplier: float = 1.0) -> str:
    return f"""IESNA:LM-63-2002
TILT=NONE
1 1000 {multiplier} 1 1 1 2 0 0 0
1 1 0
0
0
{candela}
"""


@pytest.fixture
def office():
    return RoomGeometry(10.0, 8.0, 3.0, 0.8, Reflectances(0.7, 0.5, 0.2))


@pytest.fixture
def layout():
    return LuminaireLayout(rows=3, columns=3, mounting_height=2.2, lumens=5000.0)


def test_reflection_factor():
    assert reflection_factor(Reflectances(0.7, 0.5, 0.2)) == pytest.approx(1.52)
    assert reflection_factor(Reflectances(0.0, 0.0, 0.0)) == 1.0


def test_office_grid_shape_and_bounds(office, layout):
    grid = compute_grid(office, layout, 0.5)
    assert grid.metadata.nx == 21
    assert grid.metadata.ny == 17
    assert grid.point_count == 357
    assert len(grid.values) == 17
    assert all(len(row) == 21 for row in grid.values)

    flat = [v for row in grid.values for v in row]
    assert grid.minimum == min(flat)
    assert grid.maximum == max(flat)
    assert grid.total == sum(flat)
    assert all(isinstance(v, int) for v in flat)
    assert all(grid.minimum <= v <= grid.maximum for v in flat)
    assert grid.minimum > 0
    assert 0.0 < grid.uniformity < 1.0


def test_grid_is_symmetric_for_centred_layout(office, layout):
    grid = compute_grid(office, layout, 0.5)
    nx, ny = grid.metadata.nx, grid.metadata.ny
    for j in range(ny):
        for i in range(nx):
            assert abs(grid.values[j][i] - grid.values[ny - 1 - j][nx - 1 - i]) <= 1


def test_point_counts_do_not_lose_the_last_point():
    room = RoomGeometry(10.0, 8.0, 3.0, 0.8)
    assert grid_point_counts(room, 0.1) == (101, 81)


def test_single_luminaire_below_fallback():
    room = RoomGeometry(2.0, 2.0, 3.0, 0.8)
    layout = LuminaireLayout(rows=1, columns=1, mounting_height=2.0, lumens=1000.0)
    grid = compute_grid(room, layout, 1.0)
    # I = 1000 / 4π at nadir, d = 2 m, factor 1.52
    assert grid.values[1][1] == 30


def test_photometric_dataset_replaces_fallback():
    room = RoomGeometry(2.0, 2.0, 3.0, 0.8)
    ds = parse_ies_text(_ies(1000))
    layout = LuminaireLayout(rows=1, columns=1, mounting_height=2.0, lumens=1000.0, photometry=ds)
    grid = compute_grid(room, layout, 1.0)
    assert grid.values[1][1] == 380


def test_candela_multiplier_scales_grid():
    room = RoomGeometry(2.0, 2.0, 3.0, 0.8)
    ds = parse_ies_text(_ies(1000, multiplier=2.0))
    layout = LuminaireLayout(rows=1, columns=1, mounting_height=2.0, lumens=1000.0, photometry=ds)
    grid = compute_grid(room, layout, 1.0)
    assert grid.values[1][1] == 760


def test_zero_candela_gives_zero_grid_and_undefined_uniformity(office):
    ds = parse_ies_text(_ies(0))
    layout = LuminaireLayout(rows=2, columns=2, mounting_height=2.0, lumens=1000.0, photometry=ds)
    grid = compute_grid(office, layout, 1.0)
    assert grid.maximum == 0
    assert grid.average == 0.0
    assert grid.uniformity is UNDEFINED


def test_no_luminaires_gives_zero_grid(office):
    grid = calculate_grid_illuminance(office, [], 2.0)
    assert grid.total == 0
    assert grid.uniformity is UNDEFINED


def test_luminaire_below_workplane_contributes_nothing(office):
    low = PositionedLuminaire(position=Point3D(5.0, 4.0, 0.5), lumens=5000.0)
    grid = calculate_grid_illuminance(office, [low], 1.0)
    assert grid.maximum == 0


@pytest.mark.parametrize("spacing", [0.0, -0.5, float("inf"), float("nan")])
def test_invalid_spacing_rejected(office, layout, spacing):
    with pytest.raises(InputValidationError):
        compute_grid(office, layout, spacing)


def test_single_point_axis_sits_at_centre():
    room = RoomGeometry(0.4, 0.4, 3.0, 0.8)
    layout = LuminaireLayout(rows=1, columns=1, mounting_height=2.0, lumens=1000.0)
    grid = compute_grid(room, layout, 1.0)
    assert grid.point_count == 1
    assert grid.point(0, 0) == Point3D(0.2, 0.2, 0.8)
    assert grid.values[0][0] == 30


def test_threaded_rows_match_serial(office, layout):
    serial = compute_grid(office, layout, 0.5)
    threaded = compute_grid(office, layout, 0.5, workers=4)
    assert threaded.values == serial.values
    assert threaded.total == serial.total


def test_cancel_before_first_row(office, layout):
    with pytest.raises(CalculationCancelled) as ei:
        compute_grid(office, layout, 0.5, cancel_check=lambda: True)
    assert ei.value.rows_done == 0
    assert ei.value.rows_total == 17


def test_cancel_part_way(office, layout):
    calls = {"n": 0}

    def stop_after_five():
        calls["n"] += 1
        return calls["n"] > 5

    with pytest.raises(CalculationCancelled) as ei:
        compute_grid(office, layout, 0.5, cancel_check=stop_after_five)
    assert ei.value.rows_done == 5


def test_as_array_is_read_only(office, layout):
    arr = compute_grid(office, layout, 1.0).as_array()
    with pytest.raises(ValueError):
        arr[0, 0] = 1.0


def test_pitch_follows_the_actual_point_layout(office):
    grid = compute_grid(office, LuminaireLayout(1, 1, 2.0, 1000.0), 0.75)
    assert (grid.metadata.nx, grid.metadata.ny) == (14, 11)
    px, py = grid.metadata.pitch
    assert px == pytest.approx(10.0 / 13)
    assert py == pytest.approx(0.8)
