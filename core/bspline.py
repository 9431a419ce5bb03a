"""
bspline - 单段三次B样条曲线及其求值工具

每段曲线由四个控制点 (p0, p1, p2, p3) 描述，p1、p2 为该段的节点，
p0、p3 为相邻的影响点（开放样条端点处为镜像生成的虚拟点）。

实现:
1. 均匀三次B样条基函数（由 scipy BSpline 给出）
2. 位置 / 切向 / 加速度 / 曲率求值
3. 距离->参数查找表的构建与查询
"""

import numpy as np
from scipy.interpolate import BSpline

from ..config import ARC_LENGTH_TOLERANCE, CURVE_DISTANCE_LUT_RESOLUTION
from ..utils.geometry import transform_point
from ..utils.integrals import compute_arc_length_table
from .control_point import as_position

DEGREE = 3

# 均匀节点向量 [0, 1, ..., 7]，四个控制点的有效区间为 [3, 4]
UNIFORM_KNOTS = np.arange(2 * (DEGREE + 1), dtype=float)

# 系数取单位阵，求值结果即四个基函数的值
_BASIS = BSpline(UNIFORM_KNOTS, np.eye(DEGREE + 1), DEGREE)

INVALID_DISTANCE = -1.0


def basis_weights(t: float | np.ndarray, nu: int = 0) -> np.ndarray:
    """
    计算局部参数 t 处四个基函数（或其 nu 阶导数）的权重。

    Args:
        t: 局部参数 [0, 1]，标量或 (m,) 数组，超出部分被裁剪
        nu: 导数阶数

    Returns:
        (4,) 或 (m, 4) 权重
    """
    t = np.clip(t, 0.0, 1.0)
    return _BASIS(UNIFORM_KNOTS[DEGREE] + t, nu=nu)


class BSplineCurve:
    """
    三次B样条曲线段，包含四个控制点。

    B样条不插值，曲线不一定经过控制点。
    """

    __slots__ = ("_points",)

    def __init__(self, p0, p1, p2, p3):
        points = np.array([as_position(p) for p in (p0, p1, p2, p3)])
        points.flags.writeable = False
        self._points = points

    @property
    def control_points(self) -> np.ndarray:
        """(4, 3) 控制点数组（只读）"""
        return self._points

    @property
    def p0(self) -> np.ndarray:
        return self._points[0]

    @property
    def p1(self) -> np.ndarray:
        return self._points[1]

    @property
    def p2(self) -> np.ndarray:
        return self._points[2]

    @property
    def p3(self) -> np.ndarray:
        return self._points[3]

    def transform(self, matrix: np.ndarray) -> "BSplineCurve":
        """返回所有控制点经 4x4 矩阵变换后的曲线段。"""
        return BSplineCurve(*transform_point(matrix, self._points))

    def invert(self) -> "BSplineCurve":
        """返回方向相反的同一段曲线 (p3, p2, p1, p0)。"""
        return BSplineCurve(*self._points[::-1])

    def __iter__(self):
        return iter(self._points)

    def __eq__(self, other) -> bool:
        if not isinstance(other, BSplineCurve):
            return NotImplemented
        return np.array_equal(self._points, other._points)

    def __hash__(self) -> int:
        return hash(tuple(self._points.ravel().tolist()))

    def __repr__(self) -> str:
        return f"BSplineCurve({self._points.tolist()})"


def evaluate_position(curve: BSplineCurve, t: float | np.ndarray) -> np.ndarray:
    """
    计算曲线段在局部参数 t 处的位置。

    Args:
        curve: 曲线段
        t: 局部参数 [0, 1]

    Returns:
        (3,) 位置，t 为数组时为 (m, 3)
    """
    return basis_weights(t) @ curve.control_points


def evaluate_tangent(curve: BSplineCurve, t: float | np.ndarray) -> np.ndarray:
    """计算曲线段在 t 处的一阶导数 dC/dt（未归一化）。"""
    return basis_weights(t, nu=1) @ curve.control_points


def evaluate_acceleration(curve: BSplineCurve, t: float | np.ndarray) -> np.ndarray:
    """计算曲线段在 t 处的二阶导数 d²C/dt²。"""
    return basis_weights(t, nu=2) @ curve.control_points


def evaluate_curvature(curve: BSplineCurve, t: float) -> float:
    """
    计算曲线段在 t 处的曲率。

        κ = ||C' × C''|| / ||C'||³

    速度为零（退化段）时返回 0。
    """
    velocity = evaluate_tangent(curve, t)
    speed = np.linalg.norm(velocity)
    if speed < 1e-12:
        return 0.0
    acceleration = evaluate_acceleration(curve, t)
    return float(np.linalg.norm(np.cross(velocity, acceleration)) / speed**3)


def calculate_curve_lengths(
    curve: BSplineCurve,
    resolution: int = CURVE_DISTANCE_LUT_RESOLUTION,
    tol: float = ARC_LENGTH_TOLERANCE,
) -> np.ndarray:
    """
    构建曲线段的距离->参数查找表。

    参数 t 在 [0, 1] 上均匀采样，每个采样点记录从段起点开始的累积弧长。

    Args:
        curve: 曲线段
        resolution: 查找表行数
        tol: 每个区间的弧长积分容差

    Returns:
        (resolution, 2) 查找表，每行为 (distance, t)，distance 单调不减
    """
    t_samples, l_samples = compute_arc_length_table(
        lambda t: evaluate_tangent(curve, t), n_samples=resolution, tol=tol
    )
    return np.column_stack([l_samples, t_samples])


def is_lut_valid(lut: np.ndarray | None) -> bool:
    """查找表是否已计算（首行距离非负）"""
    return lut is not None and len(lut) > 0 and lut[0, 0] >= 0.0


def get_distance_to_interpolation(lut: np.ndarray, distance: float) -> float:
    """
    通过查找表将段内弧长转换为局部参数 t。

    表内线性插值；distance <= 0 返回 0，超过段长返回 1。

    Args:
        lut: (n, 2) 查找表 (distance, t)
        distance: 从段起点量起的弧长

    Returns:
        局部参数 t ∈ [0, 1]
    """
    if not is_lut_valid(lut):
        raise ValueError("Distance lookup table has not been computed")

    if distance <= 0.0:
        return 0.0
    curve_length = lut[-1, 0]
    if distance >= curve_length:
        return 1.0
    return float(np.interp(distance, lut[:, 0], lut[:, 1]))


if __name__ == "__main__":
    print("=== 三次B样条曲线段测试 ===")

    curve = BSplineCurve([-3, 0, 0], [0, 0, 0], [3, 0, 0], [6, 0, 0])
    lut = calculate_curve_lengths(curve)
    print(f"起点: {evaluate_position(curve, 0.0)}")
    print(f"终点: {evaluate_position(curve, 1.0)}")
    print(f"段长: {lut[-1, 0]:.6f}")
    print(f"中点参数: {get_distance_to_interpolation(lut, 1.5):.6f}")

    bent = BSplineCurve([0, 0, 0], [1, 1, 0], [2, 0, 0], [3, 1, 0])
    print(f"曲率 (t=0.5): {evaluate_curvature(bent, 0.5):.6f}")
