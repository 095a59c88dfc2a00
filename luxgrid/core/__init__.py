from luxgrid.core.errors import CalculationCancelled, InputValidationError
from luxgrid.core.units import FEET_TO_METERS, normalize_dimensions, parse_length, to_meters, unit_scale_to_m

__all__ = [
    "CalculationCancelled",
    "InputValidationError",
    "FEET_TO_METERS",
    "normalize_dimensions",
    "parse_length",
    "to_meters",
    "unit_scale_to_m",
]
