"""
integrals - 数值积分工具函数

曲线段弧长 ∫||C'(t)||dt 没有解析解，用自适应Simpson法计算，
再由分段累积得到 距离->参数 查找表。
"""

from typing import Callable

import numpy as np

MAX_RECURSION_DEPTH = 40


def simpson(f: Callable[[float], float], a: float, b: float) -> float:
    """
    Simpson法则:

        S(a,b) = (b-a)/6 * [f(a) + 4f((a+b)/2) + f(b)]
    """
    return _simpson_from_samples(a, b, f(a), f((a + b) / 2), f(b))


def _simpson_from_samples(a: float, b: float, fa: float, fm: float, fb: float) -> float:
    return (b - a) / 6 * (fa + 4 * fm + fb)


def adaptive_simpson(
    f: Callable[[float], float],
    a: float,
    b: float,
    tol: float = 1e-8,
    depth: int = MAX_RECURSION_DEPTH,
) -> float:
    """
    自适应Simpson积分法。

    用显式栈代替递归，子区间复用父区间已计算的端点与中点函数值，
    每次细分只新增两次函数求值。

    区间 [a, b] 以中点 m 分为两半，满足

        |S(a,m) + S(m,b) - S(a,b)| < tol

    时接受，否则两半各以 tol/2 继续细分。细分 depth 层后无条件接受。

    Args:
        f: 被积函数
        a: 积分下限
        b: 积分上限
        tol: 误差容差
        depth: 最大细分层数

    Returns:
        积分值
    """
    fa, fm, fb = f(a), f((a + b) / 2), f(b)
    stack = [(a, b, fa, fm, fb, _simpson_from_samples(a, b, fa, fm, fb), tol, depth)]
    total = 0.0

    while stack:
        a, b, fa, fm, fb, whole, tol, depth = stack.pop()
        m = (a + b) / 2
        f_left, f_right = f((a + m) / 2), f((m + b) / 2)
        left = _simpson_from_samples(a, m, fa, f_left, fm)
        right = _simpson_from_samples(m, b, fm, f_right, fb)

        if depth <= 0 or abs(left + right - whole) < tol:
            total += left + right
        else:
            stack.append((m, b, fm, f_right, fb, right, tol / 2, depth - 1))
            stack.append((a, m, fa, f_left, fm, left, tol / 2, depth - 1))

    return total


def arc_length_integral(
    derivative_func: Callable[[float], np.ndarray],
    a: float,
    b: float,
    tol: float = 1e-8,
) -> float:
    """
    计算参数曲线在 [a, b] 上的弧长 ∫_a^b ||C'(t)|| dt。

    Args:
        derivative_func: 曲线的导数函数，返回 (n,) 向量
        a: 参数下限
        b: 参数上限
        tol: 积分误差容差
    """
    return adaptive_simpson(lambda t: float(np.linalg.norm(derivative_func(t))), a, b, tol)


def compute_arc_length_table(
    derivative_func: Callable[[float], np.ndarray],
    n_samples: int = 30,
    tol: float = 1e-8,
) -> tuple[np.ndarray, np.ndarray]:
    """
    计算参数-弧长对应表。

    参数区间 [0, 1] 均匀分为 n_samples-1 个小区间，逐个积分后累加，
    所以弧长单调不减且首项为 0。

    Args:
        derivative_func: 曲线的导数函数
        n_samples: 采样点数，至少为 2
        tol: 每个小区间的积分误差容差

    Returns:
        t_samples: (n_samples,) 参数值
        l_samples: (n_samples,) 对应的累积弧长
    """
    if n_samples < 2:
        raise ValueError(f"n_samples must be >= 2, got {n_samples}")

    t_samples = np.linspace(0.0, 1.0, n_samples)
    pieces = [
        max(arc_length_integral(derivative_func, t0, t1, tol), 0.0)
        for t0, t1 in zip(t_samples[:-1], t_samples[1:])
    ]
    l_samples = np.concatenate([[0.0], np.cumsum(pieces)])
    return t_samples, l_samples


if __name__ == "__main__":
    print("=== 弧长表测试 ===")

    def quarter_circle(t):
        # x = cos(πt/2), y = sin(πt/2)
        return np.array([-np.pi / 2 * np.sin(np.pi * t / 2), np.pi / 2 * np.cos(np.pi * t / 2)])

    t_samples, l_samples = compute_arc_length_table(quarter_circle)
    print(f"采样点数: {len(t_samples)}")
    print(f"总弧长: {l_samples[-1]:.10f} (精确值 {np.pi / 2:.10f})")
    print(f"∫e^x dx [0, 1]: {adaptive_simpson(np.exp, 0, 1):.10f} (精确值 {np.e - 1:.10f})")
