"""
datasets - 测试用节点集

包含:
- shapes: 直线、圆、螺旋线、锯齿形节点
"""

from .shapes import SampleShape, all_shapes, circle, helix, line, zigzag

__all__ = [
    "SampleShape",
    "all_shapes",
    "circle",
    "helix",
    "line",
    "zigzag",
]
