"""
shapes - 样条测试用节点集

每个函数返回 (knots, closed)，可直接用于 Spline(knots, closed)。
- line: 两个节点的直线，长度已知
- circle: 均匀分布在圆上的闭合节点
- helix: 螺旋线节点
- zigzag: 平面折线节点，曲率正负交替
"""

from dataclasses import dataclass

import numpy as np


@dataclass
class SampleShape:
    """带说明的节点集"""

    name: str
    knots: np.ndarray  # (N, 3)
    closed: bool = False

    def as_args(self) -> tuple[np.ndarray, bool]:
        return self.knots.copy(), self.closed


def line(length: float = 3.0) -> tuple[np.ndarray, bool]:
    """
    沿 X 轴的两节点直线。

    开放端点的镜像控制点使曲线与弦重合，弧长等于 length。
    """
    knots = np.array([[0.0, 0.0, 0.0], [length, 0.0, 0.0]])
    return knots, False


def circle(radius: float = 1.0, n_knots: int = 8) -> tuple[np.ndarray, bool]:
    """
    XY 平面内以原点为圆心、均匀分布的闭合节点。

    B样条不经过节点，所得曲线位于半径略小于 radius 的近似圆上。
    """
    if n_knots < 3:
        raise ValueError(f"A circle needs at least 3 knots, got {n_knots}")
    theta = np.linspace(0.0, 2 * np.pi, n_knots, endpoint=False)
    knots = np.column_stack([radius * np.cos(theta), radius * np.sin(theta), np.zeros(n_knots)])
    return knots, True


def helix(radius: float = 2.0, pitch: float = 1.0, turns: float = 2.0, n_knots: int = 24) -> tuple[np.ndarray, bool]:
    """沿 Z 轴上升的螺旋线节点"""
    theta = np.linspace(0.0, 2 * np.pi * turns, n_knots)
    z = pitch * theta / (2 * np.pi)
    knots = np.column_stack([radius * np.cos(theta), radius * np.sin(theta), z])
    return knots, False


def zigzag(n_knots: int = 7, width: float = 1.0, height: float = 1.0) -> tuple[np.ndarray, bool]:
    """XY 平面内的锯齿形节点"""
    x = np.arange(n_knots) * width
    y = np.where(np.arange(n_knots) % 2 == 0, 0.0, height)
    knots = np.column_stack([x, y, np.zeros(n_knots)])
    return knots, False


def all_shapes() -> list[SampleShape]:
    """返回所有默认参数的节点集"""
    return [
        SampleShape("line", *line()),
        SampleShape("circle", *circle()),
        SampleShape("helix", *helix()),
        SampleShape("zigzag", *zigzag()),
    ]


if __name__ == "__main__":
    for shape in all_shapes():
        print(f"{shape.name:8s} knots={len(shape.knots):3d} closed={shape.closed}")
