"""
geometry - 几何计算工具函数

提供向量归一化、齐次矩阵变换、点/射线到线段的最近点以及轴对齐包围盒。
"""

from typing import NamedTuple

import numpy as np

EPSILON = 1e-16


def normalize(vectors: np.ndarray) -> np.ndarray:
    """
    将向量归一化为单位向量。

    零向量返回零向量（分母加 EPSILON，不产生 NaN）。

    Args:
        vectors: 单个向量 (n,) 或向量数组 (m, n)

    Returns:
        归一化后的单位向量，与输入形状相同
    """
    vectors = np.asarray(vectors, dtype=float)
    if vectors.ndim == 1:
        norm = np.linalg.norm(vectors)
        return vectors / (norm + EPSILON)
    norm = np.linalg.norm(vectors, axis=-1, keepdims=True)
    return vectors / (norm + EPSILON)


def as_matrix(matrix: np.ndarray | None) -> np.ndarray:
    """检查并返回 (4, 4) 齐次变换矩阵，None 视为单位矩阵。"""
    if matrix is None:
        return np.eye(4)
    matrix = np.asarray(matrix, dtype=float)
    if matrix.shape != (4, 4):
        raise ValueError(f"Expected a 4x4 matrix, got shape {matrix.shape}")
    return matrix


def transform_point(matrix: np.ndarray, point: np.ndarray) -> np.ndarray:
    """
    用 4x4 矩阵变换点（w=1，不做透视除法）。

    Args:
        matrix: (4, 4) 齐次变换矩阵
        point: (3,) 点或 (m, 3) 点数组

    Returns:
        变换后的点，与输入形状相同
    """
    matrix = as_matrix(matrix)
    point = np.asarray(point, dtype=float)
    return point @ matrix[:3, :3].T + matrix[:3, 3]


def point_line_nearest_point(
    point: np.ndarray, a: np.ndarray, b: np.ndarray
) -> tuple[np.ndarray, float]:
    """
    计算线段 ab 上距离 point 最近的点。

    Args:
        point: (3,) 查询点
        a: (3,) 线段起点
        b: (3,) 线段终点

    Returns:
        nearest: (3,) 线段上的最近点
        line_param: 最近点在线段上的比例 [0, 1]
    """
    ab = b - a
    length_sq = float(np.dot(ab, ab))
    if length_sq < EPSILON:
        return np.array(a, dtype=float), 0.0

    line_param = float(np.clip(np.dot(point - a, ab) / length_sq, 0.0, 1.0))
    return a + ab * line_param, line_param


def ray_line_nearest_point(
    origin: np.ndarray, direction: np.ndarray, a: np.ndarray, b: np.ndarray
) -> tuple[np.ndarray, np.ndarray, float, float]:
    """
    计算射线与线段 ab 之间距离最近的一对点。

    线段参数限制在 [0, 1]，射线参数限制为非负。

    Args:
        origin: (3,) 射线起点
        direction: (3,) 射线方向（无需单位化）
        a: (3,) 线段起点
        b: (3,) 线段终点

    Returns:
        ray_point: (3,) 射线上的最近点
        line_point: (3,) 线段上的最近点
        ray_param: 射线参数 (ray_point = origin + ray_param * direction)
        line_param: 线段参数 [0, 1]
    """
    ab = b - a
    w = origin - a

    dd = float(np.dot(direction, direction))
    if dd < EPSILON:
        # 退化射线，按点处理
        line_point, line_param = point_line_nearest_point(origin, a, b)
        return np.array(origin, dtype=float), line_point, 0.0, line_param

    ee = float(np.dot(ab, ab))
    de = float(np.dot(direction, ab))
    dw = float(np.dot(direction, w))
    ew = float(np.dot(ab, w))

    denom = dd * ee - de * de
    if ee < EPSILON:
        line_param = 0.0
    elif abs(denom) < EPSILON * max(1.0, dd * ee):
        # 平行: 取射线起点在线段上的投影
        line_param = float(np.clip(ew / ee, 0.0, 1.0))
    else:
        line_param = float(np.clip((dd * ew - de * dw) / denom, 0.0, 1.0))

    line_point = a + ab * line_param
    ray_param = max(0.0, float(np.dot(line_point - origin, direction)) / dd)
    ray_point = origin + direction * ray_param
    return ray_point, line_point, ray_param, line_param


class Ray(NamedTuple):
    """射线: origin + s * direction, s >= 0"""

    origin: np.ndarray
    direction: np.ndarray


class Bounds:
    """
    轴对齐包围盒。

    Attributes:
        min: (3,) 最小角点
        max: (3,) 最大角点
    """

    def __init__(self, center: np.ndarray | None = None, size: np.ndarray | None = None):
        center = np.zeros(3) if center is None else np.asarray(center, dtype=float)
        size = np.zeros(3) if size is None else np.asarray(size, dtype=float)
        self.min = center - size / 2
        self.max = center + size / 2

    @property
    def center(self) -> np.ndarray:
        return (self.min + self.max) / 2

    @property
    def size(self) -> np.ndarray:
        return self.max - self.min

    @property
    def extents(self) -> np.ndarray:
        return self.size / 2

    def encapsulate(self, point: np.ndarray):
        """扩展包围盒使其包含 point"""
        point = np.asarray(point, dtype=float)
        self.min = np.minimum(self.min, point)
        self.max = np.maximum(self.max, point)

    def contains(self, point: np.ndarray) -> bool:
        point = np.asarray(point, dtype=float)
        return bool(np.all(point >= self.min) and np.all(point <= self.max))

    def __eq__(self, other) -> bool:
        if not isinstance(other, Bounds):
            return NotImplemented
        return np.array_equal(self.min, other.min) and np.array_equal(self.max, other.max)

    def __repr__(self) -> str:
        return f"Bounds(min={self.min.tolist()}, max={self.max.tolist()})"


if __name__ == "__main__":
    print("=== 最近点测试 ===")

    a = np.array([0.0, 0.0, 0.0])
    b = np.array([3.0, 0.0, 0.0])

    p, s = point_line_nearest_point(np.array([1.5, 1.0, 0.0]), a, b)
    print(f"点到线段: nearest={p}, param={s:.3f}")

    ray_p, line_p, ray_s, line_s = ray_line_nearest_point(
        np.array([1.0, 5.0, 0.0]), np.array([0.0, -1.0, 0.0]), a, b
    )
    print(f"射线到线段: ray_point={ray_p}, line_point={line_p}, param={line_s:.3f}")
