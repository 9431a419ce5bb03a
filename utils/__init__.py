"""
utils - 工具函数模块

包含:
- geometry: 几何计算工具
- integrals: 数值积分工具
"""

from .geometry import (
    Bounds,
    Ray,
    normalize,
    point_line_nearest_point,
    ray_line_nearest_point,
    transform_point,
)
from .integrals import adaptive_simpson, arc_length_integral, compute_arc_length_table

__all__ = [
    "Bounds",
    "Ray",
    "normalize",
    "point_line_nearest_point",
    "ray_line_nearest_point",
    "transform_point",
    "adaptive_simpson",
    "arc_length_integral",
    "compute_arc_length_table",
]
