"""
splinekit - 三次B样条曲线数据模型与算法库

由有序控制点构成的分段均匀三次B样条，支持按归一化弧长求值位置、切向、
加速度与曲率，在控制点索引 / 归一化比例 / 弧长距离之间转换参数，
以及最近点搜索。每段曲线的弧长查找表与总长度带缓存，随修改自动失效。

日志默认关闭，使用 logger.enable("splinekit") 开启。
"""

from loguru import logger

from .core import (
    BSplineCurve,
    ControlPoint,
    EmbeddedSplineDataType,
    PathIndexUnit,
    Spline,
    SplineChangeAggregator,
    SplineChangeCoalescer,
    SplineModification,
)
from .algorithm import (
    convert_index_unit,
    evaluate,
    evaluate_curvature,
    evaluate_curvature_center,
    evaluate_position,
    evaluate_tangent,
    get_bounds,
)
from .search import NearestPoint, get_nearest_point, get_nearest_point_to_ray
from .utils import Bounds, Ray

logger.disable("splinekit")

__version__ = "0.1.0"
__all__ = [
    "BSplineCurve",
    "ControlPoint",
    "EmbeddedSplineDataType",
    "PathIndexUnit",
    "Spline",
    "SplineChangeAggregator",
    "SplineChangeCoalescer",
    "SplineModification",
    "convert_index_unit",
    "evaluate",
    "evaluate_curvature",
    "evaluate_curvature_center",
    "evaluate_position",
    "evaluate_tangent",
    "get_bounds",
    "NearestPoint",
    "get_nearest_point",
    "get_nearest_point_to_ray",
    "Bounds",
    "Ray",
]
