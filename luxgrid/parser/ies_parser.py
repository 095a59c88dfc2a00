from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple

from luxgrid.models.angles import AngleGrid
from luxgrid.models.candela import CandelaGrid
from luxgrid.models.dataset import PhotometricDataset
from luxgrid.models.photometry import BallastInfo, PhotometryHeader
from luxgrid.models.tilt import TiltData, TiltSpec


logger = logging.getLogger(__name__)


class ParseErrorKind(str, Enum):
    MALFORMED_NUMBER = "MalformedNumber"
    UNEXPECTED_END_OF_DATA = "UnexpectedEndOfData"
    MISSING_TILT_SPECIFIER = "MissingTiltSpecifier"
    INVALID_HEADER = "InvalidHeader"
    INVALID_ANGLES = "InvalidAngles"


@dataclass
class ParseError(Exception):
    kind: ParseErrorKind
    message: str
    line_no: Optional[int] = None
    snippet: Optional[str] = None
    filename: Optional[str] = None

    def __str__(self) -> str:
        prefix = f"{self.filename}: " if self.filename else ""
        if self.line_no is None:
            return f"{prefix}{self.kind.value}: {self.message}"
        return f"{prefix}Line {self.line_no}: {self.kind.value}: {self.message}"


_NUM_RE = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")
_TILT_RE = re.compile(r"^TILT\s*=", re.IGNORECASE)

# Vertical angles outside this domain belong to Type B files we do not model.
_VERTICAL_DOMAIN = (0.0, 180.0)
_HORIZONTAL_DOMAIN = (0.0, 360.0)


def _is_number(tok: str) -> bool:
    return bool(_NUM_RE.match(tok))


def _is_comment(tok: str) -> bool:
    return tok.startswith((";", "#", "!", "//"))


class _NumericStream:
    """
    Cursor over the numeric tokens of ``lines[start:]``.

    Tokens are consumed one at a time, so an array may end mid-line and the
    next array picks up from the following token on that same line.
    """

    def __init__(self, lines: List[str], start_idx0: int):
        self._lines = lines
        self._idx0 = start_idx0
        self._tokens: List[str] = []
        self._pos = 0
        self._tok_line_no = start_idx0  # 1-indexed line of the buffered tokens

    @property
    def next_line_idx0(self) -> int:
        return self._idx0

    def _fill(self) -> bool:
        while self._pos >= len(self._tokens):
            if self._idx0 >= len(self._lines):
                return False
            raw = self._lines[self._idx0]
            self._idx0 += 1
            toks: List[str] = []
            for t in raw.split():
                # Allow trailing comments in numeric blocks.
                if _is_comment(t):
                    break
                toks.append(t)
            self._tokens = toks
            self._pos = 0
            self._tok_line_no = self._idx0
        return True

    def take(self, count: int, what: str) -> Tuple[List[float], int, int]:
        """Read ``count`` numbers; returns ``(values, start_line_no, end_line_no)``."""
        values: List[float] = []
        start_line_no: Optional[int] = None
        end_line_no = self._tok_line_no
        while len(values) < count:
            if not self._fill():
                raise ParseError(
                    ParseErrorKind.UNEXPECTED_END_OF_DATA,
                    f"Expected {count} values for {what} but found {len(values)} before end of data",
                    line_no=end_line_no or None,
                )
            tok = self._tokens[self._pos]
            line_no = self._tok_line_no
            if not _is_number(tok):
                raise ParseError(
                    ParseErrorKind.MALFORMED_NUMBER,
                    f"Expected numeric value #{len(values) + 1} of {count} for {what}, got '{tok}'",
                    line_no=line_no,
                    snippet=self._lines[line_no - 1],
                )
            values.append(float(tok))
            self._pos += 1
            if start_line_no is None:
                start_line_no = line_no
            end_line_no = line_no
        return values, start_line_no or end_line_no, end_line_no

    def take_raw_line(self) -> Tuple[str, int]:
        """Drop any buffered tokens and return the next non-blank physical line."""
        self._tokens = []
        self._pos = 0
        while self._idx0 < len(self._lines):
            raw = self._lines[self._idx0]
            self._idx0 += 1
            if raw.strip():
                return raw.strip(), self._idx0
        raise ParseError(
            ParseErrorKind.UNEXPECTED_END_OF_DATA,
            "Unexpected end of data while reading tilt geometry",
            line_no=len(self._lines) or None,
        )

    def peek_raw_tokens(self, skip_lines: int = 0) -> List[str]:
        """Tokens of the ``skip_lines``-th upcoming non-blank line, without consuming."""
        idx = self._idx0
        seen = 0
        while idx < len(self._lines):
            s = self._lines[idx].strip()
            idx += 1
            if not s:
                continue
            if seen == skip_lines:
                return s.split()
            seen += 1
        return []


def _as_int(v: float, name: str, line_no: int) -> int:
    if abs(v - round(v)) > 1e-9:
        raise ParseError(ParseErrorKind.INVALID_HEADER, f"Expected integer for {name}, got {v:g}", line_no=line_no)
    return int(round(v))


def _parse_photometry_header(values: List[float], line_no: int) -> PhotometryHeader:
    num_lamps = _as_int(values[0], "num_lamps", line_no)
    lumens_per_lamp = values[1]
    candela_multiplier = values[2]
    num_vertical_angles = _as_int(values[3], "num_vertical_angles", line_no)
    num_horizontal_angles = _as_int(values[4], "num_horizontal_angles", line_no)
    photometric_type = _as_int(values[5], "photometric_type", line_no)
    units_type = _as_int(values[6], "units_type", line_no)
    width, length, height = values[7], values[8], values[9]

    if photometric_type not in (1, 2, 3):
        raise ParseError(
            ParseErrorKind.INVALID_HEADER,
            f"Unsupported photometric_type={photometric_type} (expected 1,2,3)",
            line_no=line_no,
        )
    if units_type not in (1, 2):
        raise ParseError(
            ParseErrorKind.INVALID_HEADER,
            f"Unsupported units_type={units_type} (expected 1=feet,2=meters)",
            line_no=line_no,
        )
    if num_lamps < 0:
        raise ParseError(ParseErrorKind.INVALID_HEADER, "num_lamps must be >= 0", line_no=line_no)
    if not candela_multiplier > 0 or not math.isfinite(candela_multiplier):
        raise ParseError(ParseErrorKind.INVALID_HEADER, "candela_multiplier must be a finite value > 0", line_no=line_no)
    if num_vertical_angles <= 0 or num_horizontal_angles <= 0:
        raise ParseError(ParseErrorKind.INVALID_HEADER, "Angle counts must be > 0", line_no=line_no)

    return PhotometryHeader(
        num_lamps=num_lamps,
        lumens_per_lamp=lumens_per_lamp,
        candela_multiplier=candela_multiplier,
        num_vertical_angles=num_vertical_angles,
        num_horizontal_angles=num_horizontal_angles,
        photometric_type=photometric_type,  # type: ignore[arg-type]
        units_type=units_type,              # type: ignore[arg-type]
        width=width,
        length=length,
        height=height,
        line_no=line_no,
    )


def _parse_ballast(values: List[float], line_no: int) -> BallastInfo:
    bf, blf, watts = values
    for name, factor in (("ballast_factor", bf), ("ballast_lamp_factor", blf)):
        if not factor > 0 or not math.isfinite(factor):
            raise ParseError(
                ParseErrorKind.INVALID_HEADER,
                f"{name} must be a finite value > 0, got {factor:g}",
                line_no=line_no,
            )
    if not watts >= 0 or not math.isfinite(watts):
        raise ParseError(ParseErrorKind.INVALID_HEADER, f"input_watts must be >= 0, got {watts:g}", line_no=line_no)
    return BallastInfo(ballast_factor=bf, ballast_lamp_factor=blf, input_watts=watts, line_no=line_no)


def _is_strictly_increasing(a: List[float]) -> bool:
    return all(a[i] < a[i + 1] for i in range(len(a) - 1))


def _check_angles(values: List[float], name: str, domain: Tuple[float, float], line_no: int) -> None:
    if not _is_strictly_increasing(values):
        raise ParseError(ParseErrorKind.INVALID_ANGLES, f"{name} angles are not strictly increasing", line_no=line_no)
    lo, hi = domain
    if values[0] < lo or values[-1] > hi:
        raise ParseError(
            ParseErrorKind.INVALID_ANGLES,
            f"{name} angles must lie within [{lo:g}, {hi:g}] degrees, got {values[0]:g}..{values[-1]:g}",
            line_no=line_no,
        )


def _parse_header(lines: List[str]) -> Tuple[Optional[str], Dict[str, List[str]], List[str], int]:
    """Phase 1: standard line and keywords. Returns the index of the TILT= line."""
    standard_line: Optional[str] = None
    keywords: Dict[str, List[str]] = {}
    header_lines: List[str] = []

    i = 0
    while i < len(lines) and not lines[i].strip():
        i += 1
    if i < len(lines) and lines[i].strip().upper().startswith("IESNA"):
        standard_line = lines[i].strip()
        i += 1

    while i < len(lines):
        s = lines[i].strip()
        if _TILT_RE.match(s):
            return standard_line, keywords, header_lines, i
        if s.startswith("[") and "]" in s:
            end = s.find("]")
            key = s[1:end].strip()
            val = s[end + 1 :].strip()
            if key:
                keywords.setdefault(key, []).append(val)
                i += 1
                continue
        if s:
            header_lines.append(lines[i])
        i += 1

    raise ParseError(
        ParseErrorKind.MISSING_TILT_SPECIFIER,
        "No TILT= line found after the keyword section",
        line_no=len(lines) or None,
    )


def _parse_tilt(lines: List[str], tilt_idx0: int) -> Tuple[TiltSpec, _NumericStream]:
    """Phase 2: the TILT line and, for INCLUDE, its angle/multiplier table."""
    s = lines[tilt_idx0].strip()
    line_no = tilt_idx0 + 1
    tilt_type = s.split("=", 1)[1].strip()
    if not tilt_type:
        raise ParseError(ParseErrorKind.MISSING_TILT_SPECIFIER, f"Tilt line '{s}' has no mode", line_no=line_no)
    tilt_type_u = tilt_type.upper()
    stream = _NumericStream(lines, tilt_idx0 + 1)

    if tilt_type_u == "NONE":
        return TiltSpec(mode="NONE", line=s, line_no=line_no), stream

    if tilt_type_u == "INCLUDE":
        # Format variants:
        # 1) <lamp_to_luminaire_geometry>, n, angles, multipliers
        # 2) n, angles, multipliers (legacy compact)
        head_tokens = stream.peek_raw_tokens()
        if not head_tokens:
            raise ParseError(
                ParseErrorKind.UNEXPECTED_END_OF_DATA, "Missing TILT=INCLUDE payload", line_no=line_no
            )
        # A single numeric line can be either the geometry code or n; if the next
        # line is also a single number, the first one is the geometry code.
        assume_geometry = not _is_number(head_tokens[0])
        if not assume_geometry and len(head_tokens) == 1:
            nxt = stream.peek_raw_tokens(skip_lines=1)
            assume_geometry = len(nxt) == 1 and _is_number(nxt[0])
        geometry: Optional[str] = None
        if assume_geometry:
            geometry, _ = stream.take_raw_line()
        (n_val,), n_line, _ = stream.take(1, "tilt pair count")
        n = _as_int(n_val, "tilt pair count", n_line)
        if n <= 0:
            raise ParseError(ParseErrorKind.INVALID_HEADER, "Invalid TILT=INCLUDE count", line_no=n_line)
        angles, _, _ = stream.take(n, "tilt angles")
        factors, _, _ = stream.take(n, "tilt multipliers")
        data = TiltData(angles_deg=tuple(angles), factors=tuple(factors))
        return (
            TiltSpec(mode="INCLUDE", line=s, line_no=line_no, lamp_to_luminaire_geometry=geometry, data=data),
            stream,
        )

    # Anything else names an external tilt file. Only the reference is kept;
    # resolving it is the caller's job.
    path = tilt_type
    if tilt_type_u == "FILE" or tilt_type_u.startswith(("FILE=", "FILE ")):
        path = tilt_type[4:].lstrip(" =").strip()
    if not path:
        raise ParseError(ParseErrorKind.MISSING_TILT_SPECIFIER, f"Tilt line '{s}' names no file", line_no=line_no)
    return TiltSpec(mode="FILE", line=s, line_no=line_no, file_path=path), stream


def _parse_candela_table(
    stream: _NumericStream,
    ph: PhotometryHeader,
    angles: AngleGrid,
) -> CandelaGrid:
    """
    Candela values are provided as H rows, each containing V values.
    Values may wrap across lines; treat it as one long numeric stream of H*V values,
    then reshape into [H][V] by horizontal-major order.
    """
    H = len(angles.horizontal_deg)
    V = len(angles.vertical_deg)

    flat, start_ln, end_ln = stream.take(H * V, "candela values")

    # reshape: first V entries -> row 0 (horizontal angle 0), next V -> row 1, etc.
    values_cd = tuple(tuple(flat[i * V : (i + 1) * V]) for i in range(H))
    m = ph.candela_multiplier
    values_cd_scaled = tuple(tuple(m * x for x in row) for row in values_cd)

    all_vals = [x for row in values_cd_scaled for x in row]
    if any(math.isinf(x) for x in all_vals):
        raise ParseError(ParseErrorKind.MALFORMED_NUMBER, "Candela value overflows", line_no=start_ln)

    return CandelaGrid(
        values_cd=values_cd,
        values_cd_scaled=values_cd_scaled,
        line_span=(start_ln, end_ln),
        min_cd=min(all_vals),
        max_cd=max(all_vals),
        has_negative=any(x < 0 for x in all_vals),
    )


def parse_ies_text(text: str, filename: str | None = None) -> PhotometricDataset:
    """Parse LM-63 photometric text into a :class:`PhotometricDataset`.

    Parsing is all-or-nothing: any problem raises :class:`ParseError` and no
    partial dataset is returned.
    """
    try:
        if not text.strip():
            raise ParseError(ParseErrorKind.UNEXPECTED_END_OF_DATA, "Empty photometric text")

        lines = [ln.rstrip("\r\n") for ln in text.splitlines()]

        standard_line, keywords, header_lines, tilt_idx0 = _parse_header(lines)
        tilt, stream = _parse_tilt(lines, tilt_idx0)

        values, ph_line, _ = stream.take(10, "lamp record")
        photometry = _parse_photometry_header(values, ph_line)
        values, b_line, _ = stream.take(3, "ballast record")
        ballast = _parse_ballast(values, b_line)

        v, v_start, v_end = stream.take(photometry.num_vertical_angles, "vertical angles")
        h, h_start, h_end = stream.take(photometry.num_horizontal_angles, "horizontal angles")
        _check_angles(v, "Vertical", _VERTICAL_DOMAIN, v_start)
        _check_angles(h, "Horizontal", _HORIZONTAL_DOMAIN, h_start)
        angles = AngleGrid(
            vertical_deg=tuple(v),
            horizontal_deg=tuple(h),
            vertical_line_span=(v_start, v_end),
            horizontal_line_span=(h_start, h_end),
        )

        candela = _parse_candela_table(stream, photometry, angles)
    except ParseError as e:
        if e.filename is None and filename is not None:
            e.filename = filename
        raise

    logger.debug(
        "Parsed photometry: %d vertical x %d horizontal angles, tilt=%s, peak %.1f cd",
        len(angles.vertical_deg),
        len(angles.horizontal_deg),
        tilt.mode,
        candela.max_cd,
    )
    return PhotometricDataset(
        standard_line=standard_line,
        keywords={k: tuple(vs) for k, vs in keywords.items()},
        header_lines=tuple(header_lines),
        tilt=tilt,
        photometry=photometry,
        ballast=ballast,
        angles=angles,
        candela=candela,
    )
