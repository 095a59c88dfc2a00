import json

import pytest

from luxgrid.core.errors import InputValidationError
from luxgrid.io.request import load_ies_file, load_request, parse_reflectances, request_from_dict
from luxgrid.parser.ies_parser import ParseError
from luxgrid.session import CalculationType


IES_TEXT = """IESNA:LM-63-2002
[MANUFAC] Request Test
TILT=NONE
1 3000 1 3 1 1 2 0.6 0.6 0
1 1 36
0 45 90
0
900 600 0
"""


def _base():
    return {
        "room": {"length": 10, "width": 8, "height": 3},
        "workplane": {"height": 0.8},
        "reflectances": {"ceiling": 70, "walls": 50, "floor": 20},
        "luminaires": {"rows": 3, "columns": 3, "flux": 5000, "mounting_height": 2.2},
        "calculation": {"type": "uniformity", "grid_spacing": 0.5, "space_type": "office"},
    }


def test_request_from_dict_metres():
    req = request_from_dict(_base())
    assert req.room.length == 10.0
    assert req.room.workplane_height == 0.8
    assert req.room.reflectances.ceiling == pytest.approx(0.7)
    assert req.layout.count == 9
    assert req.calculation_type is CalculationType.UNIFORMITY
    assert req.grid_spacing == 0.5
    assert req.observer is None


def test_feet_are_normalized_to_metres():
    data = _base()
    data["room"] = {"length": 30, "width": 20, "height": 10, "unit": "ft"}
    data["workplane"] = {"height": 2.5}
    data["luminaires"]["mounting_height"] = [7, "ft"]
    req = request_from_dict(data)
    assert req.room.length == pytest.approx(9.144)
    assert req.room.workplane_height == pytest.approx(0.762)
    assert req.layout.mounting_height == pytest.approx(7 * 0.3048)


def test_suspension_measured_from_ceiling():
    data = _base()
    del data["luminaires"]["mounting_height"]
    data["luminaires"]["suspension"] = 0.5
    req = request_from_dict(data)
    assert req.layout.mounting_height == pytest.approx(3.0 - 0.5 - 0.8)


def test_fractional_and_percentage_reflectances():
    frac = parse_reflectances({"ceiling": 0.8, "walls": 0.5, "floor": 0.2})
    pct = parse_reflectances({"ceiling": 80, "walls": 50, "floor": 20})
    assert (frac.ceiling, frac.wall, frac.floor) == pytest.approx((pct.ceiling, pct.wall, pct.floor))
    partial = parse_reflectances({"ceiling": 80})
    assert partial.ceiling == pytest.approx(0.8)
    assert partial.wall == 0.5


def test_observer_section():
    data = _base()
    data["observer"] = {"x": 1.0, "y": 4.0, "eye_height": 1.2, "view_azimuth": 90}
    req = request_from_dict(data)
    assert req.observer.x == 1.0
    assert req.observer.view_azimuth_deg == 90.0


def test_missing_section_rejected():
    data = _base()
    del data["luminaires"]
    with pytest.raises(InputValidationError):
        request_from_dict(data)


def test_negative_length_rejected():
    data = _base()
    data["room"]["width"] = -8
    with pytest.raises(InputValidationError):
        request_from_dict(data)


def test_load_request_resolves_ies_next_to_file(tmp_path):
    (tmp_path / "fixture.ies").write_text(IES_TEXT, encoding="utf-8")
    data = _base()
    data["luminaires"]["ies"] = "fixture.ies"
    path = tmp_path / "request.json"
    path.write_text(json.dumps(data), encoding="utf-8")

    req = load_request(path)
    assert req.layout.photometry is not None
    assert req.layout.photometry.keyword("MANUFAC") == "Request Test"


def test_load_ies_file_reports_filename(tmp_path):
    bad = tmp_path / "bad.ies"
    bad.write_text("IESNA:LM-63-2002\n[MANUFAC] x\n", encoding="utf-8")
    with pytest.raises(ParseError) as ei:
        load_ies_file(bad)
    assert ei.value.filename == str(bad)


@pytest.mark.parametrize(
    "section,key,value",
    [
        ("luminaires", "rows", "three"),
        ("luminaires", "rows", 2.5),
        ("luminaires", "flux", "bright"),
        ("reflectances", "ceiling", "high"),
        ("calculation", "light_loss_factor", None),
    ],
)
def test_non_numeric_fields_are_rejected_by_name(section, key, value):
    data = _base()
    data[section][key] = value
    with pytest.raises(InputValidationError, match=f"{section}.{key}"):
        request_from_dict(data)
