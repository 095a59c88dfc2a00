import pytest

from luxgrid.calculation.glare import ObserverPosition
from luxgrid.core.errors import CalculationCancelled, InputValidationError
from luxgrid.metrics.core import Surface, is_undefined
from luxgrid.metrics.summary import build_metrics_summary
from luxgrid.calculation.illuminance import compute_grid
from luxgrid.models.luminaire import LuminaireLayout
from luxgrid.models.room import Reflectances, RoomGeometry
from luxgrid.session import CalculationRequest, CalculationSession, CalculationType


@pytest.fixture
def request_():
    room = RoomGeometry(10.0, 8.0, 3.0, 0.8, Reflectances(0.7, 0.5, 0.2))
    layout = LuminaireLayout(3, 3, 2.2, 5000.0)
    return CalculationRequest(room=room, layout=layout, grid_spacing=0.5)


def test_summary_without_observer_has_undefined_glare(request_):
    grid = compute_grid(request_.room, request_.layout, 0.5)
    s = build_metrics_summary(grid, request_.room, request_.layout)
    assert s.average == pytest.approx(grid.average)
    assert s.minimum == grid.minimum
    assert is_undefined(s.dgr) and is_undefined(s.ugr) and is_undefined(s.vcp)
    assert 0.1 <= s.cu <= 0.95
    assert s.rcr == pytest.approx(2.475)
    d = s.to_dict()
    assert d["ugr"] is None
    assert d["surface"] == "workplane"


def test_summary_with_observer_and_surface(request_):
    grid = compute_grid(request_.room, request_.layout, 0.5)
    obs = ObserverPosition(0.5, 4.0, 1.2)
    s = build_metrics_summary(grid, request_.room, request_.layout, surface="ceiling", observer=obs)
    assert not is_undefined(s.ugr)
    assert 0.0 <= s.vcp <= 100.0
    assert s.surface is Surface.CEILING
    assert s.luminance_avg == pytest.approx(grid.average * 0.7 / 3.141592653589793)


def test_session_remembers_type_and_result(request_):
    session = CalculationSession()
    res = session.run(request_, "uniformity")
    assert session.calculation_type is CalculationType.UNIFORMITY
    assert session.last_result is res
    assert res.grid is not None and res.summary is not None
    assert res.standards is not None and res.standards["status"] in ("PASS", "FAIL")


def test_lumen_types_skip_the_grid(request_):
    session = CalculationSession()
    avg = session.run(request_, CalculationType.AVERAGE)
    assert avg.grid is None
    assert avg.lumen_method is not None
    coef = session.run(request_, "coefficient")
    assert coef.lumen_method.cu != avg.lumen_method.cu
    assert session.last_result is coef


def test_failed_run_keeps_previous_result(request_):
    session = CalculationSession()
    first = session.run(request_)
    with pytest.raises(InputValidationError):
        session.run(request_, "nonsense")
    assert session.last_result is first


def test_cancel_stops_a_running_grid(request_, monkeypatch):
    session = CalculationSession()
    real_is_set = session._cancel.is_set

    def poll():
        session.cancel()
        return real_is_set()

    monkeypatch.setattr(session._cancel, "is_set", poll)
    with pytest.raises(CalculationCancelled):
        session.run(request_)
    assert session.last_result is None


def test_result_to_dict(request_):
    res = CalculationSession().run(request_, "point-by-point")
    d = res.to_dict()
    assert d["calculation_type"] == "point-by-point"
    assert d["grid"]["nx"] == 21
    assert len(d["grid"]["values"]) == 17
    assert "summary" in d
