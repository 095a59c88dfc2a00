"""
Calculation session.

A session holds the selected calculation type and the most recent result in
place of application-wide state. It is not shared between threads; a
running grid calculation can be stopped from another thread with
:meth:`CalculationSession.cancel`.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional

from luxgrid.calculation.glare import ObserverPosition
from luxgrid.calculation.illuminance import IlluminanceGrid, compute_grid
from luxgrid.calculation.lumen_method import (
    DEFAULT_LIGHT_LOSS_FACTOR,
    LumenMethodResult,
    average_illuminance,
    room_index_method,
)
from luxgrid.core.errors import InputValidationError
from luxgrid.metrics.core import Surface, compute_uniformity
from luxgrid.metrics.standards.uniformity import evaluate_space
from luxgrid.metrics.summary import MetricsSummary, build_metrics_summary
from luxgrid.models.luminaire import LuminaireLayout
from luxgrid.models.room import RoomGeometry


logger = logging.getLogger(__name__)


class CalculationType(str, Enum):
    POINT_BY_POINT = "point-by-point"
    AVERAGE = "average"
    COEFFICIENT = "coefficient"
    UNIFORMITY = "uniformity"
    LUMINANCE = "luminance"

    @classmethod
    def parse(cls, value: "str | CalculationType") -> "CalculationType":
        if isinstance(value, CalculationType):
            return value
        key = str(value).strip().lower().replace("_", "-")
        for member in cls:
            if member.value == key:
                return member
        raise InputValidationError(f"Unknown calculation type: {value!r}")

    @property
    def needs_grid(self) -> bool:
        return self not in (CalculationType.AVERAGE, CalculationType.COEFFICIENT)


@dataclass(frozen=True)
class CalculationRequest:
    room: RoomGeometry
    layout: LuminaireLayout
    grid_spacing: float = 0.5
    calculation_type: CalculationType = CalculationType.POINT_BY_POINT
    surface: Surface = Surface.WORKPLANE
    observer: Optional[ObserverPosition] = None
    space_type: Optional[str] = None
    task_type: Optional[str] = None
    light_loss_factor: float = DEFAULT_LIGHT_LOSS_FACTOR
    workers: int = 1

    def __post_init__(self) -> None:
        object.__setattr__(self, "calculation_type", CalculationType.parse(self.calculation_type))
        object.__setattr__(self, "surface", Surface.parse(self.surface))
        if not self.grid_spacing > 0:
            raise InputValidationError(f"Grid spacing must be > 0, got {self.grid_spacing}")


@dataclass(frozen=True)
class CalculationResult:
    calculation_type: CalculationType
    grid: Optional[IlluminanceGrid] = None
    summary: Optional[MetricsSummary] = None
    lumen_method: Optional[LumenMethodResult] = None
    standards: Optional[Dict[str, object]] = None

    def to_dict(self) -> Dict[str, object]:
        out: Dict[str, object] = {"calculation_type": self.calculation_type.value}
        if self.grid is not None:
            meta = self.grid.metadata
            out["grid"] = {
                "nx": meta.nx,
                "ny": meta.ny,
                "spacing": meta.spacing,
                "values": [list(r) for r in self.grid.values],
            }
        if self.summary is not None:
            out["summary"] = self.summary.to_dict()
        if self.lumen_method is not None:
            lm = self.lumen_method
            out["lumen_method"] = {
                "average": lm.average,
                "cu": lm.cu,
                "light_loss_factor": lm.light_loss_factor,
                "total_lumens": lm.total_lumens,
                "area": lm.area,
            }
        if self.standards is not None:
            out["standards"] = self.standards
        return out


@dataclass
class CalculationSession:
    calculation_type: CalculationType = CalculationType.POINT_BY_POINT
    last_request: Optional[CalculationRequest] = None
    last_result: Optional[CalculationResult] = None
    _cancel: threading.Event = field(default_factory=threading.Event, repr=False)

    def select(self, calculation_type: "str | CalculationType") -> CalculationType:
        self.calculation_type = CalculationType.parse(calculation_type)
        return self.calculation_type

    def cancel(self) -> None:
        self._cancel.set()

    def run(self, request: CalculationRequest, calculation_type: "str | CalculationType | None" = None) -> CalculationResult:
        """
        Run ``request`` as ``calculation_type`` (the request's own type when
        omitted) and remember it as the session's current type and result.

        A failed or cancelled run leaves the previous result in place.
        """
        ctype = CalculationType.parse(calculation_type or request.calculation_type)
        self.calculation_type = ctype
        self._cancel.clear()
        logger.info("Running %s calculation", ctype.value)

        if ctype is CalculationType.AVERAGE:
            result = CalculationResult(ctype, lumen_method=average_illuminance(request.room, request.layout, request.light_loss_factor))
        elif ctype is CalculationType.COEFFICIENT:
            result = CalculationResult(ctype, lumen_method=room_index_method(request.room, request.layout, request.light_loss_factor))
        else:
            result = self._run_grid(request, ctype)

        self.last_request = request
        self.last_result = result
        return result

    def _run_grid(self, request: CalculationRequest, ctype: CalculationType) -> CalculationResult:
        grid = compute_grid(
            request.room,
            request.layout,
            request.grid_spacing,
            workers=request.workers,
            cancel_check=self._cancel.is_set,
        )
        summary = build_metrics_summary(
            grid,
            request.room,
            request.layout,
            surface=request.surface,
            observer=request.observer,
        )
        standards = None
        if ctype is CalculationType.UNIFORMITY:
            standards = evaluate_space(
                compute_uniformity(grid.values),
                grid.values,
                grid.metadata.pitch,
                space_type=request.space_type,
                task_type=request.task_type,
            )
        return CalculationResult(ctype, grid=grid, summary=summary, standards=standards)
