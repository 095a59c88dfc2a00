from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class AngleGrid:
    vertical_deg: Tuple[float, ...]
    horizontal_deg: Tuple[float, ...]
    vertical_line_span: Tuple[int, int]    # (start_line_no, end_line_no), inclusive
    horizontal_line_span: Tuple[int, int]  # (start_line_no, end_line_no), inclusive
