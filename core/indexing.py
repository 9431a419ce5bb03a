"""
indexing - 节点相邻索引规则

闭合样条按节点数取模回绕，开放样条限制在 [0, count-1]。
缓存失效、求值与搜索共用这一规则。
"""


def previous_knot_index(index: int, count: int, closed: bool) -> int:
    if count <= 0:
        raise IndexError("Spline has no knots")
    return (index + count - 1) % count if closed else max(index - 1, 0)


def next_knot_index(index: int, count: int, closed: bool) -> int:
    if count <= 0:
        raise IndexError("Spline has no knots")
    return (index + 1) % count if closed else min(index + 1, count - 1)


def curve_support(index: int, count: int, closed: bool) -> list[int]:
    """
    返回控制点包含节点 index 的所有曲线段索引。

    第 i 段曲线使用节点 i-1 .. i+2，所以节点 index 影响第 index-2 .. index+1 段。
    """
    if count <= 0:
        return []
    if closed:
        return sorted({(index + offset) % count for offset in range(-2, 2)})
    return list(range(max(index - 2, 0), min(index + 1, count - 1) + 1))
