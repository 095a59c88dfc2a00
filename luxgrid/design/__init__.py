from luxgrid.design.spacing import (
    evaluate_layout_spacing,
    evaluate_spacing,
    recommended_spacing,
    spacing_criterion,
)

__all__ = [
    "evaluate_layout_spacing",
    "evaluate_spacing",
    "recommended_spacing",
    "spacing_criterion",
]
