"""
Luxgrid Calculation Module

Point-by-point workplane illuminance, discomfort glare, the lumen method
and vertical-plane task quantities.
"""

from luxgrid.calculation.illuminance import (
    GridMetadata,
    IlluminanceGrid,
    calculate_grid_illuminance,
    compute_grid,
    fallback_intensity,
    luminaire_intensity,
    point_direct_illuminance,
    reflection_factor,
)

from luxgrid.calculation.glare import (
    GlareAnalysis,
    GlareResult,
    ObserverPosition,
    analyze_room_glare,
    background_luminance,
    discomfort_glare_rating,
    evaluate_glare,
    position_index,
    unified_glare_rating,
    visual_comfort_probability,
)

from luxgrid.calculation.lumen_method import (
    LumenMethodResult,
    average_illuminance,
    room_index_method,
)

from luxgrid.calculation.advanced import (
    cylindrical_illuminance,
    equivalent_spherical_illuminance,
    lighting_power_density,
    modelling_index,
    point_quantities,
    space_height_ratio,
    veiling_luminance_index,
    vertical_illuminance,
)

__all__ = [
    # Illuminance
    "GridMetadata",
    "IlluminanceGrid",
    "calculate_grid_illuminance",
    "compute_grid",
    "fallback_intensity",
    "luminaire_intensity",
    "point_direct_illuminance",
    "reflection_factor",
    # Glare
    "GlareAnalysis",
    "GlareResult",
    "ObserverPosition",
    "analyze_room_glare",
    "background_luminance",
    "discomfort_glare_rating",
    "evaluate_glare",
    "position_index",
    "unified_glare_rating",
    "visual_comfort_probability",
    # Lumen method
    "LumenMethodResult",
    "average_illuminance",
    "room_index_method",
    # Task quantities
    "cylindrical_illuminance",
    "equivalent_spherical_illuminance",
    "lighting_power_density",
    "modelling_index",
    "point_quantities",
    "space_height_ratio",
    "veiling_luminance_index",
    "vertical_illuminance",
]
