import math

import pytest

from luxgrid.core.errors import InputValidationError
from luxgrid.core.types import Point3D
from luxgrid.models.luminaire import (
    DistributionType,
    LuminaireLayout,
    LuminaireType,
)
from luxgrid.models.room import RoomGeometry


@pytest.fixture
def office():
    return RoomGeometry(10.0, 8.0, 3.0, 0.8)


def test_positions_are_cell_centres(office):
    layout = LuminaireLayout(rows=2, columns=4, mounting_height=2.0, lumens=3000.0)
    assert layout.position(office, 0, 0) == Point3D(1.25, 2.0, 2.8)
    assert layout.position(office, 1, 3) == Point3D(8.75, 6.0, 2.8)
    placed = layout.place(office)
    assert len(placed) == layout.count == 8
    assert {(p.row, p.column) for p in placed} == {(r, c) for r in range(2) for c in range(4)}


def test_type_resolves_profile_once():
    layout = LuminaireLayout(1, 1, 2.0, 1000.0, luminaire_type="Downlight")
    assert layout.luminaire_type is LuminaireType.DOWNLIGHT
    assert layout.cosine_exponent == 4.0
    assert layout.effective_distribution is DistributionType.DIRECT


def test_untagged_layout_uses_exponent_three():
    layout = LuminaireLayout(1, 1, 2.0, 1000.0)
    assert layout.cosine_exponent == 3.0
    assert layout.effective_distribution is DistributionType.DIRECT


def test_unknown_type_falls_back_to_default():
    layout = LuminaireLayout(1, 1, 2.0, 1000.0, luminaire_type="chandelier")
    assert layout.luminaire_type is LuminaireType.DEFAULT
    assert layout.cosine_exponent == 2.5


def test_explicit_distribution_overrides_type():
    layout = LuminaireLayout(1, 1, 2.0, 1000.0, distribution="semi_indirect", luminaire_type="pendant")
    assert layout.effective_distribution is DistributionType.SEMI_INDIRECT
    assert LuminaireLayout(1, 1, 2.0, 1000.0, luminaire_type="cove").effective_distribution is DistributionType.INDIRECT


def test_luminous_area():
    assert LuminaireLayout(1, 1, 2.0, 1000.0).luminous_area == pytest.approx(0.09)
    round_one = LuminaireLayout(1, 1, 2.0, 1000.0, luminous_diameter=0.2)
    assert round_one.luminous_area == pytest.approx(math.pi * 0.01)


@pytest.mark.parametrize(
    "kwargs",
    [
        dict(rows=0, columns=1, mounting_height=2.0, lumens=1000.0),
        dict(rows=1, columns=1, mounting_height=0.0, lumens=1000.0),
        dict(rows=1, columns=1, mounting_height=2.0, lumens=0.0),
        dict(rows=1, columns=1, mounting_height=float("inf"), lumens=1000.0),
        dict(rows=1, columns=1, mounting_height=2.0, lumens=float("nan")),
        dict(rows=1, columns=1, mounting_height=2.0, lumens=1000.0, luminous_width=0.0),
        dict(rows=1, columns=1, mounting_height=2.0, lumens=1000.0, distribution="sideways"),
    ],
)
def test_invalid_layouts_rejected(kwargs):
    with pytest.raises(InputValidationError):
        LuminaireLayout(**kwargs)
