"""
algorithm - 样条求值与参数转换

对任意满足 SplineLike 协议的样条提供自由函数:
1. 位置 / 切向 / 加速度 / 曲率 / 曲率中心求值
2. 样条参数 <-> (曲线段索引, 段内参数) 转换
3. PathIndexUnit 之间的参数单位转换
4. 相邻节点索引、包围盒、曲线段数、变换后长度、直线距离取点

样条参数 t ∈ [0, 1] 为归一化弧长比例。
"""

import math
from typing import Iterator, Protocol

import numpy as np
from loguru import logger

from .config import LINEAR_DISTANCE_EPSILON
from .core.bspline import BSplineCurve, calculate_curve_lengths
from .core.bspline import evaluate_acceleration as curve_acceleration
from .core.bspline import evaluate_curvature as curve_curvature
from .core.bspline import evaluate_position as curve_position
from .core.bspline import evaluate_tangent as curve_tangent
from .core.enums import PathIndexUnit
from .core.indexing import next_knot_index, previous_knot_index
from .utils.geometry import Bounds, as_matrix, normalize, transform_point

DEFAULT_TANGENT = np.array([0.0, 0.0, 1.0])


class SplineLike(Protocol):
    """算法函数需要的样条接口"""

    closed: bool

    def __len__(self) -> int: ...

    def __getitem__(self, index: int): ...

    def __iter__(self) -> Iterator: ...

    def get_curve(self, index: int) -> BSplineCurve: ...

    def get_length(self) -> float: ...

    def get_curve_length(self, index: int) -> float: ...

    def get_curve_interpolation(self, curve_index: int, curve_distance: float) -> float: ...


# ----------------------------------------------------------------------
# 参数转换
# ----------------------------------------------------------------------


def get_curve_count(spline: SplineLike) -> int:
    """曲线段数: 闭合为节点数，开放为节点数减一"""
    return max(0, len(spline) - (0 if spline.closed else 1))


def spline_to_curve_t(spline: SplineLike, t: float, use_lut: bool = True) -> tuple[int, float]:
    """
    把样条参数 t 转换为 (曲线段索引, 段内参数)。

    Args:
        spline: 样条
        t: 归一化弧长比例，超出 [0, 1] 被裁剪
        use_lut: True 时段内参数由查找表给出（弧长均匀），
            False 时为段内弧长比例

    Returns:
        curve_index: 曲线段索引
        curve_t: 段内参数 [0, 1]
    """
    count = len(spline)
    if count <= 1:
        return 0, 0.0

    t = min(max(float(t), 0.0), 1.0)
    t_length = t * spline.get_length()

    start = 0.0
    for index in range(get_curve_count(spline)):
        curve_length = spline.get_curve_length(index)
        if t_length <= start + curve_length:
            if use_lut:
                curve_t = spline.get_curve_interpolation(index, t_length - start)
            else:
                curve_t = (t_length - start) / curve_length if curve_length > 0 else 0.0
            return index, curve_t
        start += curve_length

    # 浮点累积误差
    return (count - 1 if spline.closed else count - 2), 1.0


def curve_to_spline_t(spline: SplineLike, curve: float) -> float:
    """
    把 CONTROL_POINT 单位的参数（整数部分为段索引，小数部分为段内比例）
    转换为归一化样条参数。
    """
    if len(spline) <= 1 or curve < 0.0:
        return 0.0
    if curve >= get_curve_count(spline):
        return 1.0

    curve_index = int(math.floor(curve))
    t = sum(spline.get_curve_length(i) for i in range(curve_index))
    t += spline.get_curve_length(curve_index) * (curve - curve_index)

    length = spline.get_length()
    return t / length if length > 0 else 0.0


def wrap_interpolation(t: float, closed: bool) -> float:
    """
    闭合样条的参数按周期 1 回绕（整数值保留为端点），开放样条裁剪到 [0, 1]。
    """
    if not closed:
        return min(max(t, 0.0), 1.0)
    if t % 1.0 == 0.0:
        return min(max(t, 0.0), 1.0)
    return t - math.floor(t)


def get_normalized_interpolation(spline: SplineLike, t: float, unit: PathIndexUnit) -> float:
    """把单位为 unit 的参数转换为归一化样条参数"""
    if unit == PathIndexUnit.CONTROL_POINT:
        return wrap_interpolation(curve_to_spline_t(spline, t), spline.closed)
    if unit == PathIndexUnit.DISTANCE:
        length = spline.get_length()
        return wrap_interpolation(t / length if length > 0 else 0.0, spline.closed)
    if unit == PathIndexUnit.NORMALIZED:
        return wrap_interpolation(t, spline.closed)
    raise ValueError(f"Unknown index unit: {unit!r}")


def convert_index_unit(
    spline: SplineLike, t: float, from_unit: PathIndexUnit, to_unit: PathIndexUnit
) -> float:
    """
    在 PathIndexUnit 之间转换样条参数。

    Args:
        spline: 样条（DISTANCE 与 CONTROL_POINT 转换需要其长度信息）
        t: 参数值，单位为 from_unit
        from_unit: 原单位
        to_unit: 目标单位

    Returns:
        单位为 to_unit 的参数值
    """
    if from_unit == to_unit:
        if to_unit == PathIndexUnit.NORMALIZED:
            return wrap_interpolation(t, spline.closed)
        return t

    normalized = get_normalized_interpolation(spline, t, from_unit)
    if to_unit == PathIndexUnit.NORMALIZED:
        return normalized
    if to_unit == PathIndexUnit.DISTANCE:
        return normalized * spline.get_length()
    if to_unit == PathIndexUnit.CONTROL_POINT:
        curve_index, curve_t = spline_to_curve_t(spline, normalized, use_lut=False)
        return curve_index + curve_t
    raise ValueError(f"Unknown index unit: {to_unit!r}")


# ----------------------------------------------------------------------
# 求值
# ----------------------------------------------------------------------


def _curve_at(spline: SplineLike, t: float) -> tuple[BSplineCurve, float]:
    curve_index, curve_t = spline_to_curve_t(spline, t)
    return spline.get_curve(curve_index), curve_t


def evaluate(spline: SplineLike, t: float) -> tuple[bool, np.ndarray, np.ndarray]:
    """
    计算样条在 t 处的位置与切向。

    Args:
        spline: 样条
        t: 归一化弧长比例 [0, 1]

    Returns:
        ok: 样条为空时为 False
        position: (3,) 位置，空样条为零向量
        tangent: (3,) 一阶导数（未归一化），空样条为 (0, 0, 1)
    """
    if len(spline) < 1:
        logger.warning("[Algorithm] Evaluating an empty spline")
        return False, np.zeros(3), DEFAULT_TANGENT.copy()

    curve, curve_t = _curve_at(spline, t)
    return True, curve_position(curve, curve_t), curve_tangent(curve, curve_t)


def evaluate_position(spline: SplineLike, t: float) -> np.ndarray:
    if len(spline) < 1:
        return np.zeros(3)
    return curve_position(*_curve_at(spline, t))


def evaluate_tangent(spline: SplineLike, t: float) -> np.ndarray:
    if len(spline) < 1:
        return DEFAULT_TANGENT.copy()
    return curve_tangent(*_curve_at(spline, t))


def evaluate_acceleration(spline: SplineLike, t: float) -> np.ndarray:
    if len(spline) < 1:
        return np.zeros(3)
    return curve_acceleration(*_curve_at(spline, t))


def evaluate_curvature(spline: SplineLike, t: float) -> float:
    if len(spline) < 1:
        return 0.0
    return curve_curvature(*_curve_at(spline, t))


def evaluate_curvature_center(spline: SplineLike, t: float) -> np.ndarray:
    """
    计算 t 处密切圆的圆心。

    圆位于速度与加速度张成的平面内:

        center = P + (1/κ) * normalize(v × normalize(a × v))

    曲率为零（直线段、拐点）时返回零向量。
    """
    if len(spline) < 1:
        return np.zeros(3)

    curve, curve_t = _curve_at(spline, t)
    curvature = curve_curvature(curve, curve_t)
    if curvature == 0.0:
        return np.zeros(3)

    position = curve_position(curve, curve_t)
    velocity = curve_tangent(curve, curve_t)
    acceleration = curve_acceleration(curve, curve_t)
    up = normalize(np.cross(acceleration, velocity))
    right = normalize(np.cross(velocity, up))
    return position + right / curvature


# ----------------------------------------------------------------------
# 索引、包围盒与长度
# ----------------------------------------------------------------------


def previous_index(spline: SplineLike, index: int) -> int:
    """前一个节点索引，闭合时回绕，开放时停在 0"""
    return previous_knot_index(index, len(spline), spline.closed)


def next_index(spline: SplineLike, index: int) -> int:
    """后一个节点索引，闭合时回绕，开放时停在最后一个节点"""
    return next_knot_index(index, len(spline), spline.closed)


def get_bounds(spline: SplineLike, matrix: np.ndarray | None = None) -> Bounds:
    """
    节点位置的轴对齐包围盒（不包含曲线本身的外凸部分）。

    Args:
        spline: 样条
        matrix: 可选，先对节点施加的 4x4 变换

    Returns:
        Bounds，空样条为原点处的零大小包围盒
    """
    if len(spline) == 0:
        return Bounds()

    matrix = as_matrix(matrix)
    positions = [transform_point(matrix, knot.position) for knot in spline]
    bounds = Bounds(positions[0])
    for p in positions[1:]:
        bounds.encapsulate(p)
    return bounds


def calculate_length(spline: SplineLike, matrix: np.ndarray | None = None) -> float:
    """计算所有曲线段经 matrix 变换后的总弧长（不使用样条缓存）"""
    matrix = as_matrix(matrix)
    total = 0.0
    for i in range(get_curve_count(spline)):
        lut = calculate_curve_lengths(spline.get_curve(i).transform(matrix))
        total += float(lut[-1, 0])
    return total


def get_point_at_linear_distance(
    spline: SplineLike, from_t: float, relative_distance: float
) -> tuple[np.ndarray, float]:
    """
    从 from_t 处出发，沿样条寻找与起点直线距离为 |relative_distance| 的点。

    relative_distance 为负时向后搜索。每步按剩余距离沿弧长推进，
    直到剩余距离小于 LINEAR_DISTANCE_EPSILON 或到达端点。

    Returns:
        point: (3,) 结果点
        result_t: 结果点的归一化参数
    """
    if from_t < 0:
        return evaluate_position(spline, 0.0), 0.0

    length = spline.get_length()
    current_length = from_t * length
    if current_length + relative_distance >= length:
        return evaluate_position(spline, 1.0), 1.0
    if current_length + relative_distance <= 0:
        return evaluate_position(spline, 0.0), 0.0

    start = evaluate_position(spline, from_t)
    point = start
    result_t = from_t
    forward = relative_distance >= 0
    target = abs(relative_distance)
    residual = target

    while residual > LINEAR_DISTANCE_EPSILON and (result_t < 1.0 if forward else result_t > 0.0):
        current_length += residual if forward else -residual
        result_t = min(max(current_length / length, 0.0), 1.0)
        point = evaluate_position(spline, result_t)
        residual = target - float(np.linalg.norm(point - start))

    return point, result_t


if __name__ == "__main__":
    from .core.spline import Spline

    print("=== 样条求值测试 ===")

    spline = Spline([[0, 0, 0], [3, 0, 0]])
    print(f"长度: {spline.get_length():.6f}")
    ok, position, tangent = evaluate(spline, 0.5)
    print(f"t=0.5: ok={ok}, position={position}, tangent={tangent}")

    curved = Spline([[0, 0, 0], [1, 1, 0], [2, 0, 0], [3, 1, 0]])
    print(f"曲率 (t=0.5): {evaluate_curvature(curved, 0.5):.6f}")
    print(f"曲率中心 (t=0.5): {evaluate_curvature_center(curved, 0.5)}")
    print(f"CONTROL_POINT 1.5 -> NORMALIZED: "
          f"{convert_index_unit(curved, 1.5, PathIndexUnit.CONTROL_POINT, PathIndexUnit.NORMALIZED):.6f}")
