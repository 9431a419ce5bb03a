"""
control_point - B样条控制点

控制点只包含位置，值语义（不可变，按位置判等）。
"""

import numpy as np

from ..utils.geometry import transform_point


def as_position(value) -> np.ndarray:
    """将 ControlPoint 或类数组转换为只读的 (3,) float 数组。"""
    if isinstance(value, ControlPoint):
        return value.position
    position = np.array(value, dtype=float)
    if position.shape != (3,):
        raise ValueError(f"Expected a 3D position, got shape {position.shape}")
    position.flags.writeable = False
    return position


class ControlPoint:
    """
    B样条控制点。

    Attributes:
        position: (3,) 只读位置向量
    """

    __slots__ = ("_position",)

    def __init__(self, position=(0.0, 0.0, 0.0)):
        self._position = as_position(position)

    @property
    def position(self) -> np.ndarray:
        return self._position

    def transform(self, matrix: np.ndarray) -> "ControlPoint":
        """返回经 4x4 矩阵变换后的新控制点。"""
        return ControlPoint(transform_point(matrix, self._position))

    def mirror_around(self, pivot: "ControlPoint") -> "ControlPoint":
        """
        返回关于 pivot 镜像后的控制点 (2 * pivot - self)。

        开放样条端点处用它生成虚拟控制点。
        """
        pivot_position = as_position(pivot)
        return ControlPoint(2.0 * pivot_position - self._position)

    def __add__(self, offset) -> "ControlPoint":
        return ControlPoint(self._position + np.asarray(offset, dtype=float))

    def __sub__(self, offset) -> "ControlPoint":
        return ControlPoint(self._position - np.asarray(offset, dtype=float))

    def __eq__(self, other) -> bool:
        if not isinstance(other, ControlPoint):
            return NotImplemented
        return np.array_equal(self._position, other._position)

    def __hash__(self) -> int:
        return hash(tuple(self._position.tolist()))

    def __repr__(self) -> str:
        x, y, z = self._position.tolist()
        return f"ControlPoint({x:g}, {y:g}, {z:g})"
