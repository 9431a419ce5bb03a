"""
search - 样条最近点搜索

把样条按弧长均匀细分为折线，在折线上找最近的线段，
再在该线段对应的参数区间内继续细分，迭代逼近最近点。

细分段数 = clamp(sqrt(区间长度) * resolution, 6, 1024)
"""

import math
from typing import Callable, NamedTuple

import numpy as np
from loguru import logger

from .algorithm import SplineLike, evaluate_position
from .config import (
    PICK_ITERATIONS_DEFAULT,
    PICK_RESOLUTION_DEFAULT,
    SUBDIVISION_COUNT_MAX,
    SUBDIVISION_COUNT_MIN,
    NearestPointOptions,
)
from .utils.geometry import Ray, point_line_nearest_point, ray_line_nearest_point


class NearestPoint(NamedTuple):
    """
    最近点搜索结果。

    Attributes:
        point: (3,) 样条上的最近点
        t: 最近点的归一化样条参数
        distance: 查询对象到最近点的距离
    """

    point: np.ndarray
    t: float
    distance: float


class _Segment(NamedTuple):
    start: float
    length: float


# f(a, b) -> (样条上的候选点, 距离平方, 线段参数)
_SegmentMetric = Callable[[np.ndarray, np.ndarray], tuple[np.ndarray, float, float]]


def get_subdivision_count(length: float, resolution: int) -> int:
    """给定弧长与分辨率计算细分段数，限制在 [6, 1024]"""
    return int(max(SUBDIVISION_COUNT_MIN, min(SUBDIVISION_COUNT_MAX, math.sqrt(max(length, 0.0)) * resolution)))


def _search_range(
    spline: SplineLike, metric: _SegmentMetric, segment: _Segment, segments: int
) -> tuple[_Segment, NearestPoint]:
    """在参数区间 segment 内细分一次，返回最近的子区间及其上的最近点"""
    best = _Segment(-1.0, 0.0)
    best_dsqr = math.inf
    best_point = np.full(3, math.inf)
    best_t = math.inf

    t0 = segment.start
    a = evaluate_position(spline, t0)
    for i in range(1, segments):
        t1 = segment.start + segment.length * (i / (segments - 1))
        b = evaluate_position(spline, t1)
        point, dsqr, line_param = metric(a, b)

        if dsqr < best_dsqr:
            best = _Segment(t0, t1 - t0)
            best_t = best.start + best.length * line_param
            best_dsqr = dsqr
            best_point = point

        t0, a = t1, b

    return best, NearestPoint(best_point, best_t, math.sqrt(best_dsqr))


def _nearest(spline: SplineLike, metric: _SegmentMetric, resolution: int, iterations: int) -> NearestPoint:
    options = NearestPointOptions(resolution, iterations).clamped()
    if (options.resolution, options.iterations) != (resolution, iterations):
        logger.debug(
            f"[Search] Clamped resolution={resolution}, iterations={iterations} "
            f"to {options.resolution}, {options.iterations}"
        )
    if len(spline) == 0:
        logger.warning("[Search] Nearest point search on an empty spline")

    segment = _Segment(0.0, 1.0)
    result = NearestPoint(np.full(3, math.inf), 0.0, math.inf)
    for _ in range(options.iterations):
        segments = get_subdivision_count(spline.get_length() * segment.length, options.resolution)
        segment, result = _search_range(spline, metric, segment, segments)
    return result


def get_nearest_point(
    spline: SplineLike,
    point: np.ndarray,
    resolution: int = PICK_RESOLUTION_DEFAULT,
    iterations: int = PICK_ITERATIONS_DEFAULT,
) -> NearestPoint:
    """
    计算样条上距离 point 最近的点。

    Args:
        spline: 样条
        point: (3,) 查询点
        resolution: 细分分辨率，限制在 [2, 64]
        iterations: 细分迭代次数，限制在 [1, 10]；传入 0 时仍执行一轮细分

    Returns:
        NearestPoint(point, t, distance)
    """
    point = np.asarray(point, dtype=float)

    def metric(a, b):
        nearest, line_param = point_line_nearest_point(point, a, b)
        diff = nearest - point
        return nearest, float(np.dot(diff, diff)), line_param

    return _nearest(spline, metric, resolution, iterations)


def get_nearest_point_to_ray(
    spline: SplineLike,
    ray: Ray,
    resolution: int = PICK_RESOLUTION_DEFAULT,
    iterations: int = PICK_ITERATIONS_DEFAULT,
) -> NearestPoint:
    """
    计算样条上距离射线最近的点。参数限制与 get_nearest_point 相同。

    Returns:
        NearestPoint(point, t, distance)，distance 为射线到该点的距离
    """
    origin = np.asarray(ray.origin, dtype=float)
    direction = np.asarray(ray.direction, dtype=float)

    def metric(a, b):
        ray_point, line_point, _, line_param = ray_line_nearest_point(origin, direction, a, b)
        diff = line_point - ray_point
        return line_point, float(np.dot(diff, diff)), line_param

    return _nearest(spline, metric, resolution, iterations)


if __name__ == "__main__":
    from .core.spline import Spline

    print("=== 最近点搜索测试 ===")

    spline = Spline([[0, 0, 0], [3, 0, 0]])
    result = get_nearest_point(spline, [1.5, 1.0, 0.0])
    print(f"最近点: {result.point}, t={result.t:.4f}, 距离={result.distance:.4f}")

    ray = Ray(np.array([1.0, 5.0, 0.0]), np.array([0.0, -1.0, 0.0]))
    result = get_nearest_point_to_ray(spline, ray, resolution=8, iterations=4)
    print(f"射线最近点: {result.point}, t={result.t:.4f}, 距离={result.distance:.4f}")
