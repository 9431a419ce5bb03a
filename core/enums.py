"""
enums - 样条相关枚举类型
"""

from enum import Enum


class PathIndexUnit(Enum):
    """
    样条插值参数的单位。

    - DISTANCE: 沿样条的弧长，与控制点坐标同单位
    - NORMALIZED: 归一化弧长比例 t ∈ [0, 1]
    - CONTROL_POINT: 曲线段索引 + 段内比例（整数部分为段索引，小数部分按距离线性）
    """

    DISTANCE = 0
    NORMALIZED = 1
    CONTROL_POINT = 2


class SplineModification(Enum):
    """样条修改类型，随变更通知一起传递。"""

    DEFAULT = 0
    CLOSED_MODIFIED = 1
    KNOT_MODIFIED = 2
    KNOT_INSERTED = 3
    KNOT_REMOVED = 4


class EmbeddedSplineDataType(Enum):
    """样条内嵌辅助数据通道的类型。"""

    INT = 0
    FLOAT = 1
    FLOAT4 = 2
    OBJECT = 3
