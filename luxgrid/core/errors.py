from __future__ import annotations


class InputValidationError(ValueError):
    """Raised before any computation starts when an input is out of its domain."""


class CalculationCancelled(RuntimeError):
    """Raised when a caller-supplied cancel check asks a grid run to stop."""

    def __init__(self, rows_done: int, rows_total: int):
        super().__init__(f"Calculation cancelled after {rows_done} of {rows_total} rows")
        self.rows_done = rows_done
        self.rows_total = rows_total
