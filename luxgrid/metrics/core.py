from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, Mapping, Optional, Sequence, Union

import numpy as np

from luxgrid.core.errors import InputValidationError


class UndefinedMetric:
    """Sentinel for a metric whose denominator was zero.

    It is returned next to otherwise valid metrics rather than raised, so a
    single undefined ratio never blocks reporting of the rest.
    """

    _instance: Optional["UndefinedMetric"] = None

    def __new__(cls) -> "UndefinedMetric":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNDEFINED"

    def __bool__(self) -> bool:
        return False

    def __reduce__(self):
        return (UndefinedMetric, ())


UNDEFINED = UndefinedMetric()

MetricValue = Union[float, UndefinedMetric]


def is_undefined(value: object) -> bool:
    return value is UNDEFINED


def safe_ratio(numerator: float, denominator: float) -> MetricValue:
    if denominator == 0 or not math.isfinite(denominator):
        return UNDEFINED
    return numerator / denominator


def metric_to_json(value: MetricValue) -> Optional[float]:
    return None if is_undefined(value) else float(value)  # type: ignore[arg-type]


@dataclass(frozen=True)
class BasicMetrics:
    E_avg: float
    E_min: float
    E_max: float
    U0: MetricValue
    U1: MetricValue
    P50: float
    P90: float

    def to_dict(self) -> Dict[str, Optional[float]]:
        return {
            "E_avg": self.E_avg,
            "E_min": self.E_min,
            "E_max": self.E_max,
            "U0": metric_to_json(self.U0),
            "U1": metric_to_json(self.U1),
            "P50": self.P50,
            "P90": self.P90,
        }


def _flatten(values: Iterable[float] | Iterable[Iterable[float]]) -> np.ndarray:
    items = list(values)
    if items and isinstance(items[0], (list, tuple, np.ndarray)):
        return np.asarray([x for row in items for x in row], dtype=float).reshape(-1)
    return np.asarray(items, dtype=float).reshape(-1)


def compute_basic_metrics(values: Iterable[float]) -> BasicMetrics:
    arr = _flatten(values)
    arr = arr[np.isfinite(arr)]
    if arr.size == 0:
        return BasicMetrics(0.0, 0.0, 0.0, UNDEFINED, UNDEFINED, 0.0, 0.0)
    e_avg = float(np.mean(arr))
    e_min = float(np.min(arr))
    e_max = float(np.max(arr))
    return BasicMetrics(
        E_avg=e_avg,
        E_min=e_min,
        E_max=e_max,
        U0=safe_ratio(e_min, e_avg),
        U1=safe_ratio(e_min, e_max),
        P50=float(np.percentile(arr, 50.0)),
        P90=float(np.percentile(arr, 90.0)),
    )


@dataclass(frozen=True)
class UniformityMetrics:
    average: float
    minimum: float
    maximum: float
    min_to_avg: MetricValue
    min_to_max: MetricValue
    std_dev: float
    coefficient_of_variation: MetricValue
    diversity: MetricValue  # max / min


def compute_uniformity(values: Iterable[float] | Iterable[Iterable[float]]) -> UniformityMetrics:
    """Uniformity ratios over every cell; population standard deviation."""
    arr = _flatten(values)
    if arr.size == 0:
        return UniformityMetrics(0.0, 0.0, 0.0, UNDEFINED, UNDEFINED, 0.0, UNDEFINED, UNDEFINED)
    avg = float(np.mean(arr))
    lo = float(np.min(arr))
    hi = float(np.max(arr))
    std = float(np.sqrt(np.mean((arr - avg) ** 2)))
    if avg <= 0.0:
        return UniformityMetrics(avg, lo, hi, UNDEFINED, UNDEFINED, std, UNDEFINED, UNDEFINED)
    return UniformityMetrics(
        average=avg,
        minimum=lo,
        maximum=hi,
        min_to_avg=lo / avg,
        min_to_max=safe_ratio(lo, hi),
        std_dev=std,
        coefficient_of_variation=std / avg,
        diversity=safe_ratio(hi, lo),
    )


# =============================================================================
# Luminance
# =============================================================================

class Surface(str, Enum):
    CEILING = "ceiling"
    WALL = "wall"
    FLOOR = "floor"
    WORKPLANE = "workplane"

    @classmethod
    def parse(cls, value: "str | Surface | None") -> "Surface":
        if isinstance(value, Surface):
            return value
        if value is None:
            return cls.WORKPLANE
        key = str(value).strip().lower()
        if key == "walls":
            key = "wall"
        for member in cls:
            if member.value == key:
                return member
        raise InputValidationError(f"Unknown surface: {value!r}")


WORKPLANE_REFLECTANCE = 0.5


def surface_reflectance(reflectances, surface: "str | Surface | None") -> float:
    """Reflectance of the observed surface; the workplane is taken as 0.5."""
    s = Surface.parse(surface)
    if s is Surface.CEILING:
        return float(reflectances.ceiling)
    if s is Surface.WALL:
        return float(reflectances.wall)
    if s is Surface.FLOOR:
        return float(reflectances.floor)
    return WORKPLANE_REFLECTANCE


def luminance_from_illuminance(illuminance: float, reflectance: float) -> float:
    """L = E·ρ/π for a Lambertian surface (cd/m²)."""
    return illuminance * reflectance / math.pi


def luminance_grid(rows: Sequence[Sequence[float]], reflectance: float) -> tuple:
    return tuple(tuple(luminance_from_illuminance(e, reflectance) for e in row) for row in rows)


@dataclass(frozen=True)
class LuminanceStats:
    minimum: float
    average: float
    maximum: float
    uniformity: MetricValue
    reflectance: float
    surface: Surface


def luminance_statistics(
    minimum: float,
    average: float,
    maximum: float,
    reflectance: float,
    surface: "str | Surface | None" = None,
) -> LuminanceStats:
    l_min = luminance_from_illuminance(minimum, reflectance)
    l_avg = luminance_from_illuminance(average, reflectance)
    l_max = luminance_from_illuminance(maximum, reflectance)
    return LuminanceStats(
        minimum=l_min,
        average=l_avg,
        maximum=l_max,
        uniformity=safe_ratio(l_min, l_avg) if l_avg > 0 else UNDEFINED,
        reflectance=reflectance,
        surface=Surface.parse(surface),
    )


def evaluate_thresholds(
    metrics: Mapping[str, MetricValue],
    thresholds: Mapping[str, float],
    upper_bounds: Iterable[str] = (),
) -> Dict[str, object]:
    """
    Check each metric against its limit.

    Limits are minimums unless the key is listed in ``upper_bounds``.
    UNDEFINED metrics always fail.
    """
    maxima = set(upper_bounds)
    checks: Dict[str, bool] = {}
    reasons = []
    for key, limit in thresholds.items():
        raw = metrics.get(key, UNDEFINED)
        if is_undefined(raw):
            checks[key] = False
            reasons.append(f"{key}=FAIL (undefined vs {float(limit):.3f})")
            continue
        v = float(raw)  # type: ignore[arg-type]
        if key in maxima:
            ok = v <= float(limit)
        else:
            ok = v >= float(limit)
        checks[key] = bool(ok)
        reasons.append(f"{key}={'PASS' if ok else 'FAIL'} ({v:.3f} vs {float(limit):.3f})")
    status = "PASS" if all(checks.values()) else "FAIL"
    return {"status": status, "checks": checks, "reasons": reasons, "thresholds": dict(thresholds)}
