from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from typing import Dict, Optional

from luxgrid.calculation.glare import ObserverPosition, evaluate_glare
from luxgrid.calculation.illuminance import IlluminanceGrid
from luxgrid.metrics.cavity import room_cavity_ratio, utilization_cu
from luxgrid.metrics.core import (
    UNDEFINED,
    MetricValue,
    Surface,
    compute_basic_metrics,
    compute_uniformity,
    luminance_statistics,
    metric_to_json,
    surface_reflectance,
)
from luxgrid.models.luminaire import LuminaireLayout
from luxgrid.models.room import RoomGeometry


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MetricsSummary:
    average: float
    minimum: float
    maximum: float
    min_to_avg: MetricValue
    min_to_max: MetricValue
    std_dev: float
    coefficient_of_variation: MetricValue
    diversity: MetricValue
    p50: float
    p90: float
    luminance_min: float
    luminance_avg: float
    luminance_max: float
    luminance_uniformity: MetricValue
    surface: Surface
    dgr: MetricValue
    ugr: MetricValue
    vcp: MetricValue
    cu: float
    rcr: float

    def to_dict(self) -> Dict[str, object]:
        out: Dict[str, object] = {}
        for f in fields(self):
            v = getattr(self, f.name)
            if isinstance(v, Surface):
                out[f.name] = v.value
            else:
                out[f.name] = metric_to_json(v)
        return out


def build_metrics_summary(
    grid: IlluminanceGrid,
    room: RoomGeometry,
    layout: LuminaireLayout,
    *,
    surface: "str | Surface | None" = None,
    observer: Optional[ObserverPosition] = None,
) -> MetricsSummary:
    """
    Flatten uniformity, luminance, glare and cavity figures for one grid run.

    Glare needs an observer; without one DGR, UGR and VCP are UNDEFINED.
    """
    uni = compute_uniformity(grid.values)
    basic = compute_basic_metrics(grid.values)
    surf = Surface.parse(surface)
    lum = luminance_statistics(uni.minimum, uni.average, uni.maximum, surface_reflectance(room.reflectances, surf), surf)

    dgr: MetricValue = UNDEFINED
    ugr: MetricValue = UNDEFINED
    vcp: MetricValue = UNDEFINED
    if observer is not None:
        glare = evaluate_glare(room, layout.place(room), observer, grid.average)
        dgr, ugr, vcp = glare.dgr, glare.ugr, glare.vcp

    rcr = room_cavity_ratio(room)
    summary = MetricsSummary(
        average=uni.average,
        minimum=uni.minimum,
        maximum=uni.maximum,
        min_to_avg=uni.min_to_avg,
        min_to_max=uni.min_to_max,
        std_dev=uni.std_dev,
        coefficient_of_variation=uni.coefficient_of_variation,
        diversity=uni.diversity,
        p50=basic.P50,
        p90=basic.P90,
        luminance_min=lum.minimum,
        luminance_avg=lum.average,
        luminance_max=lum.maximum,
        luminance_uniformity=lum.uniformity,
        surface=surf,
        dgr=dgr,
        ugr=ugr,
        vcp=vcp,
        cu=utilization_cu(rcr, room.reflectances, layout.effective_distribution),
        rcr=rcr,
    )
    logger.debug("Metrics summary: %s", summary)
    return summary
