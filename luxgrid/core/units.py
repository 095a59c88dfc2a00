from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple, Union

from luxgrid.core.errors import InputValidationError


FEET_TO_METERS = 0.3048

_SCALE_TO_M = {
    "m": 1.0,
    "mm": 0.001,
    "cm": 0.01,
    "ft": FEET_TO_METERS,
    "in": 0.0254,
}

_ALIASES = {
    "meter": "m",
    "meters": "m",
    "metre": "m",
    "metres": "m",
    "foot": "ft",
    "feet": "ft",
    "inch": "in",
    "inches": "in",
}

Measurement = Union[float, int, Tuple[float, str]]


def _normalize_unit(unit: str) -> str:
    u = str(unit).strip().lower()
    return _ALIASES.get(u, u)


def unit_scale_to_m(unit: str) -> float:
    u = _normalize_unit(unit)
    if u not in _SCALE_TO_M:
        raise InputValidationError(f"Unsupported length unit: {unit!r}")
    return _SCALE_TO_M[u]


@dataclass(frozen=True)
class ParsedLength:
    value_m: float
    original_value: float
    original_unit: str


def parse_length(value: float, unit: str = "m") -> ParsedLength:
    try:
        v = float(value)
    except (TypeError, ValueError):
        raise InputValidationError(f"Length must be a number, got {value!r}") from None
    return ParsedLength(
        value_m=v * unit_scale_to_m(unit),
        original_value=v,
        original_unit=_normalize_unit(unit),
    )


def to_meters(measurement: Measurement, name: str = "value") -> float:
    """Convert a bare number (metres) or a ``(value, unit)`` pair to metres.

    Non-positive and non-finite results are rejected: every linear dimension
    the engine consumes must be strictly positive and finite.
    """
    if isinstance(measurement, tuple):
        value, unit = measurement
        parsed = parse_length(value, unit)
    else:
        parsed = parse_length(measurement, "m")
    if not parsed.value_m > 0.0 or not math.isfinite(parsed.value_m):
        raise InputValidationError(f"{name} must be a finite value > 0, got {parsed.original_value} {parsed.original_unit}")
    return parsed.value_m


@dataclass(frozen=True)
class NormalizedDimensions:
    length: float
    width: float
    height: float
    workplane_height: float


def normalize_dimensions(
    length: Measurement,
    width: Measurement,
    height: Measurement,
    workplane_height: Measurement,
) -> NormalizedDimensions:
    return NormalizedDimensions(
        length=to_meters(length, "length"),
        width=to_meters(width, "width"),
        height=to_meters(height, "height"),
        workplane_height=to_meters(workplane_height, "workplane_height"),
    )
