from luxgrid.photometry.interp import (
    clamp_vertical,
    intensity_at,
    intensity_table,
    normalize_horizontal,
    scaled_intensity_at,
)

__all__ = [
    "clamp_vertical",
    "intensity_at",
    "intensity_table",
    "normalize_horizontal",
    "scaled_intensity_at",
]
