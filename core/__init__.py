"""
core - 样条数据模型

包含:
- control_point: 控制点
- bspline: 单段三次B样条曲线及其求值
- enums: 参数单位、修改类型、数据通道类型
- events: 变更事件、多样条汇总与合并通知
- spline_data: 辅助数据通道
- spline: 样条聚合根与长度缓存
"""

from .bspline import BSplineCurve, calculate_curve_lengths, get_distance_to_interpolation
from .control_point import ControlPoint
from .enums import EmbeddedSplineDataType, PathIndexUnit, SplineModification
from .events import SplineChangeAggregator, SplineChangeCoalescer, SplineModificationData
from .spline import CurveCache, Spline
from .spline_data import DataPoint, SplineData, SplineDataDictionary

__all__ = [
    "BSplineCurve",
    "calculate_curve_lengths",
    "get_distance_to_interpolation",
    "ControlPoint",
    "EmbeddedSplineDataType",
    "PathIndexUnit",
    "SplineModification",
    "SplineChangeAggregator",
    "SplineChangeCoalescer",
    "SplineModificationData",
    "CurveCache",
    "Spline",
    "DataPoint",
    "SplineData",
    "SplineDataDictionary",
]
