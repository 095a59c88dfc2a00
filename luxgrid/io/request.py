"""
JSON request files.

A request describes one room, one luminaire layout and what to calculate::

    {
      "room": {"length": 10, "width": 8, "height": 3, "unit": "m"},
      "workplane": {"height": 0.8},
      "reflectances": {"ceiling": 70, "walls": 50, "floor": 20},
      "luminaires": {"rows": 3, "columns": 3, "flux": 5000,
                     "mounting_height": 2.2, "type": "panel", "ies": "panel.ies"},
      "calculation": {"type": "uniformity", "grid_spacing": 0.5},
      "observer": {"x": 1.0, "y": 4.0, "eye_height": 1.2, "view_azimuth": 0}
    }

Any length may be a bare number (in the section's ``unit``, default metres),
a ``[value, unit]`` pair or a ``{"value": v, "unit": u}`` object.
Reflectances above 1 are read as percentages.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from luxgrid.calculation.glare import ObserverPosition
from luxgrid.core.errors import InputValidationError
from luxgrid.core.units import Measurement, to_meters, unit_scale_to_m
from luxgrid.models.dataset import PhotometricDataset
from luxgrid.models.luminaire import LuminaireLayout
from luxgrid.models.room import Reflectances, RoomGeometry
from luxgrid.parser.ies_parser import parse_ies_text
from luxgrid.session import CalculationRequest


logger = logging.getLogger(__name__)


def load_ies_file(path: Path | str) -> PhotometricDataset:
    p = Path(path).expanduser()
    text = p.read_text(encoding="utf-8", errors="replace")
    logger.debug("Read %d bytes from %s", len(text), p)
    return parse_ies_text(text, filename=str(p))


def _number(raw: Any, name: str) -> float:
    if isinstance(raw, bool) or raw is None:
        raise InputValidationError(f"{name}: expected a number, got {raw!r}")
    try:
        return float(raw)
    except (TypeError, ValueError):
        raise InputValidationError(f"{name}: expected a number, got {raw!r}") from None


def _integer(raw: Any, name: str) -> int:
    v = _number(raw, name)
    if not v.is_integer():
        raise InputValidationError(f"{name}: expected a whole number, got {raw!r}")
    return int(v)


def _measurement(raw: Any, default_unit: str, name: str) -> Measurement:
    if isinstance(raw, Mapping):
        if "value" not in raw:
            raise InputValidationError(f"{name}: missing 'value'")
        return (_number(raw["value"], name), str(raw.get("unit", default_unit)))
    if isinstance(raw, (list, tuple)):
        if len(raw) != 2:
            raise InputValidationError(f"{name}: expected [value, unit], got {raw!r}")
        return (_number(raw[0], name), str(raw[1]))
    return (_number(raw, name), default_unit)


def _length(section: Mapping[str, Any], key: str, name: str) -> float:
    if key not in section:
        raise InputValidationError(f"Missing required field: {name}")
    return to_meters(_measurement(section[key], str(section.get("unit", "m")), name), name)


def _optional_length(section: Mapping[str, Any], key: str, name: str) -> Optional[float]:
    if section.get(key) is None:
        return None
    return _length(section, key, name)


def _section(data: Mapping[str, Any], key: str, required: bool = True) -> Dict[str, Any]:
    raw = data.get(key)
    if raw is None:
        if required:
            raise InputValidationError(f"Missing required section: {key}")
        return {}
    if not isinstance(raw, Mapping):
        raise InputValidationError(f"Section {key!r} must be an object")
    return dict(raw)


def parse_reflectances(raw: Mapping[str, Any]) -> Reflectances:
    if not raw:
        return Reflectances()
    given = {
        "ceiling": raw.get("ceiling"),
        "wall": raw.get("walls", raw.get("wall")),
        "floor": raw.get("floor"),
    }
    given = {k: None if v is None else _number(v, f"reflectances.{k}") for k, v in given.items()}
    percent = any(v is not None and v > 1.0 for v in given.values())
    defaults = Reflectances()
    values = {}
    for name, v in given.items():
        if v is None:
            values[name] = getattr(defaults, name)
        else:
            values[name] = v / 100.0 if percent else v
    return Reflectances(**values)


def parse_room(data: Mapping[str, Any]) -> RoomGeometry:
    room = _section(data, "room")
    workplane = _section(data, "workplane", required=False)
    if "height" in workplane:
        wp_section = dict(workplane)
        wp_section.setdefault("unit", room.get("unit", "m"))
        wp = _length(wp_section, "height", "workplane.height")
    elif "workplane_height" in room:
        wp = _length(room, "workplane_height", "room.workplane_height")
    else:
        raise InputValidationError("Missing required field: workplane.height")
    return RoomGeometry(
        length=_length(room, "length", "room.length"),
        width=_length(room, "width", "room.width"),
        height=_length(room, "height", "room.height"),
        workplane_height=wp,
        reflectances=parse_reflectances(_section(data, "reflectances", required=False)),
    )


def parse_layout(data: Mapping[str, Any], room: RoomGeometry, base_dir: Path | None = None) -> LuminaireLayout:
    lum = _section(data, "luminaires")
    for key in ("rows", "columns"):
        if key not in lum:
            raise InputValidationError(f"Missing required field: luminaires.{key}")
    flux = lum.get("flux", lum.get("lumens"))
    if flux is None:
        raise InputValidationError("Missing required field: luminaires.flux")

    mounting = _optional_length(lum, "mounting_height", "luminaires.mounting_height")
    if mounting is None:
        # Suspension is measured down from the ceiling.
        suspension = _optional_length(lum, "suspension", "luminaires.suspension") or 0.0
        mounting = room.height - suspension - room.workplane_height

    photometry = None
    if lum.get("ies"):
        ies_path = Path(str(lum["ies"])).expanduser()
        if not ies_path.is_absolute() and base_dir is not None:
            ies_path = base_dir / ies_path
        photometry = load_ies_file(ies_path)

    return LuminaireLayout(
        rows=_integer(lum["rows"], "luminaires.rows"),
        columns=_integer(lum["columns"], "luminaires.columns"),
        mounting_height=mounting,
        lumens=_number(flux, "luminaires.flux"),
        distribution=lum.get("distribution"),
        photometry=photometry,
        luminaire_type=lum.get("type"),
        luminous_width=_optional_length(lum, "width", "luminaires.width") or 0.3,
        luminous_length=_optional_length(lum, "length", "luminaires.length") or 0.3,
        luminous_diameter=_optional_length(lum, "diameter", "luminaires.diameter"),
        input_watts=_number(lum["watts"], "luminaires.watts") if lum.get("watts") is not None else None,
        beam_angle_deg=_number(lum["beam_angle"], "luminaires.beam_angle") if lum.get("beam_angle") is not None else None,
    )


def parse_observer(raw: Mapping[str, Any]) -> Optional[ObserverPosition]:
    if not raw:
        return None
    unit = str(raw.get("unit", "m"))
    section = dict(raw, unit=unit)
    for key in ("x", "y"):
        if key not in section:
            raise InputValidationError(f"Missing required field: observer.{key}")
    # Coordinates may be 0 on a wall, so they skip the positive-length check.
    scale = unit_scale_to_m(unit)
    x = _number(section["x"], "observer.x") * scale
    y = _number(section["y"], "observer.y") * scale
    return ObserverPosition(
        x=x,
        y=y,
        eye_height=_length(section, "eye_height", "observer.eye_height") if "eye_height" in section else 1.2,
        view_azimuth_deg=_number(section.get("view_azimuth", 0.0), "observer.view_azimuth"),
    )


def request_from_dict(data: Mapping[str, Any], base_dir: Path | None = None) -> CalculationRequest:
    room = parse_room(data)
    layout = parse_layout(data, room, base_dir)
    calc = _section(data, "calculation", required=False)
    spacing = calc.get("grid_spacing", 0.5)
    return CalculationRequest(
        room=room,
        layout=layout,
        grid_spacing=to_meters(_measurement(spacing, str(calc.get("unit", "m")), "calculation.grid_spacing"), "calculation.grid_spacing"),
        calculation_type=calc.get("type", "point-by-point"),
        surface=calc.get("surface", "workplane"),
        observer=parse_observer(_section(data, "observer", required=False)),
        space_type=calc.get("space_type"),
        task_type=calc.get("task_type"),
        light_loss_factor=_number(calc.get("light_loss_factor", 0.8), "calculation.light_loss_factor"),
        workers=_integer(calc.get("workers", 1), "calculation.workers"),
    )


def load_request(path: Path | str) -> CalculationRequest:
    """Read a JSON request; a relative ``ies`` path resolves against the file's folder."""
    p = Path(path).expanduser().resolve()
    data = json.loads(p.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise InputValidationError("Request file must contain a JSON object")
    return request_from_dict(data, base_dir=p.parent)
