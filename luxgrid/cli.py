from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from luxgrid.core.errors import CalculationCancelled, InputValidationError
from luxgrid.io.request import load_ies_file, load_request
from luxgrid.metrics.core import is_undefined
from luxgrid.parser.ies_parser import ParseError
from luxgrid.session import CalculationSession


_DEMO_IES_TEXT = """IESNA:LM-63-2002
[TEST] DEMO
[MANUFAC] Luxgrid Demo
[LUMCAT] DEMO-001
[LUMINAIRE] 600x600 panel
TILT=NONE
1 4000 1 5 2 1 2 0.6 0.6 0.0
1.0 1.0 36
0 22.5 45 67.5 90
0 90
1200 1100 850 450 0
1200 1050 800 400 0
"""


def _fmt(value: object, spec: str = ".2f") -> str:
    if value is None or is_undefined(value):
        return "undefined"
    return format(float(value), spec)  # type: ignore[arg-type]


def _cmd_demo(args: argparse.Namespace) -> int:
    outpath = Path(args.out).expanduser().resolve()
    outpath.parent.mkdir(parents=True, exist_ok=True)
    outpath.write_text(_DEMO_IES_TEXT, encoding="utf-8")
    print(f"Saved demo IES to: {outpath}")
    return 0


def _cmd_ies(args: argparse.Namespace) -> int:
    ies_path = Path(args.file).expanduser().resolve()
    if not ies_path.is_file():
        print(f"[ERROR] File not found: {ies_path}")
        return 2
    try:
        ds = load_ies_file(ies_path)
    except ParseError as e:
        print(f"[ERROR] {e}")
        return 3

    peak_cd, peak_h, peak_v = ds.peak()
    ph = ds.photometry
    print("Luxgrid IES")
    print(f"  File: {ies_path}")
    print(f"  Standard: {ds.standard_line or '(none)'}")
    for key in ("MANUFAC", "LUMCAT", "LUMINAIRE"):
        val = ds.keyword(key)
        if val is not None:
            print(f"  {key}: {val}")
    print(f"  Tilt: {ds.tilt.mode}")
    print(f"  Lamps: {ph.num_lamps} x {ph.lumens_per_lamp:g} lm (multiplier {ph.candela_multiplier:g})")
    print(f"  Angles: {ph.num_vertical_angles} vertical x {ph.num_horizontal_angles} horizontal")
    print(f"  Peak candela: {peak_cd * ds.intensity_scale:g} at (H,V)=({peak_h:g}°, {peak_v:g}°)")
    if ds.ballast.input_watts > 0:
        print(f"  Input watts: {ds.ballast.input_watts:g}")
    return 0


def _cmd_calc(args: argparse.Namespace) -> int:
    req_path = Path(args.request).expanduser().resolve()
    if not req_path.is_file():
        print(f"[ERROR] File not found: {req_path}")
        return 2
    try:
        request = load_request(req_path)
    except ParseError as e:
        print(f"[ERROR] {e}")
        return 3
    except (InputValidationError, json.JSONDecodeError) as e:
        print(f"[ERROR] Invalid request: {e}")
        return 4
    except OSError as e:
        print(f"[ERROR] {e}")
        return 2

    session = CalculationSession()
    try:
        result = session.run(request, args.type)
    except InputValidationError as e:
        print(f"[ERROR] {e}")
        return 4
    except CalculationCancelled as e:
        print(f"[ERROR] {e}")
        return 5

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
        return 0

    print(f"Luxgrid {result.calculation_type.value}")
    if result.grid is not None and result.summary is not None:
        s = result.summary
        meta = result.grid.metadata
        print(f"  Grid: {meta.nx} x {meta.ny} points at {meta.spacing:g} m")
        print(f"  Illuminance: avg {s.average:.1f} lx, min {s.minimum:g} lx, max {s.maximum:g} lx")
        print(f"  Uniformity: min/avg {_fmt(s.min_to_avg)}, min/max {_fmt(s.min_to_max)}, diversity {_fmt(s.diversity)}")
        print(f"  Luminance ({s.surface.value}): avg {s.luminance_avg:.1f} cd/m²")
        print(f"  RCR {s.rcr:.2f}, CU {s.cu:.2f}")
        if request.observer is not None:
            print(f"  Glare: DGR {_fmt(s.dgr, '.1f')}, UGR {_fmt(s.ugr, '.1f')}, VCP {_fmt(s.vcp, '.0f')}")
    if result.lumen_method is not None:
        lm = result.lumen_method
        print(f"  Average illuminance: {lm.rounded} lx (CU {lm.cu:.2f}, LLF {lm.light_loss_factor:.2f})")
    if result.standards is not None:
        print(f"  Standards: {result.standards['status']}")
        for part in ("uniformity", "diversity", "gradient"):
            for reason in result.standards[part]["reasons"]:  # type: ignore[index]
                print(f"    {reason}")
    return 0


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(prog="luxgrid")
    p.add_argument("-v", "--verbose", action="store_true", help="Log calculation progress")
    sub = p.add_subparsers(dest="cmd", required=True)

    demo = sub.add_parser("demo", help="Write a small demo .ies file to disk.")
    demo.add_argument("--out", default="demo.ies", help="Output .ies path")
    demo.set_defaults(func=_cmd_demo)

    ies = sub.add_parser("ies", help="Parse an IES file and print its header and peak intensity.")
    ies.add_argument("file", help="Path to .ies file")
    ies.set_defaults(func=_cmd_ies)

    calc = sub.add_parser("calc", help="Run a calculation from a JSON request file.")
    calc.add_argument("request", help="Path to request .json")
    calc.add_argument(
        "--type",
        choices=["point-by-point", "average", "coefficient", "uniformity", "luminance"],
        default=None,
        help="Override the request's calculation type",
    )
    calc.add_argument("--json", action="store_true", help="Print the result as JSON")
    calc.set_defaults(func=_cmd_calc)

    args = p.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
