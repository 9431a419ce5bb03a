"""
events - 样条变更事件

Spline 在每次公开修改后同步通知自身的监听者。本模块提供:
1. SplineModificationData: 传给辅助数据通道的修改信息
2. SplineChangeAggregator: 显式注册的多样条变更汇总
3. SplineChangeCoalescer: 由宿主驱动的"一帧一次"合并通知
"""

from typing import Any, Callable, NamedTuple

from loguru import logger

from .enums import SplineModification

# listener(spline, knot_index, modification)
SplineListener = Callable[[Any, int, SplineModification], None]


class SplineModificationData(NamedTuple):
    """
    一次样条修改的描述。

    Attributes:
        spline: 被修改的样条
        modification: 修改类型
        knot_index: 受影响的节点索引，批量修改时为 -1
        prev_curve_length: 修改前以 knot_index 结尾的曲线段长度
        next_curve_length: 修改前以 knot_index 开始的曲线段长度
    """

    spline: Any
    modification: SplineModification
    knot_index: int
    prev_curve_length: float
    next_curve_length: float


class SplineChangeAggregator:
    """
    把多个样条的变更转发给同一组监听者。

    样条需要通过 register 显式加入，不存在全局共享状态。
    """

    def __init__(self):
        self._splines: list = []
        self._listeners: list[SplineListener] = []

    @property
    def splines(self) -> tuple:
        return tuple(self._splines)

    def register(self, spline):
        if any(s is spline for s in self._splines):
            return
        self._splines.append(spline)
        spline.subscribe(self._forward)

    def unregister(self, spline):
        for i, s in enumerate(self._splines):
            if s is spline:
                del self._splines[i]
                spline.unsubscribe(self._forward)
                return

    def subscribe(self, listener: SplineListener):
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: SplineListener):
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _forward(self, spline, knot_index: int, modification: SplineModification):
        for listener in list(self._listeners):
            listener(spline, knot_index, modification)


class SplineChangeCoalescer:
    """
    合并同一"帧"内的多次变更通知。

    宿主在每帧结束时调用 flush()，每个在此期间被修改过的样条只触发一次
    on_settled 回调。缓存的正确性不依赖于此类，样条自身总是同步失效缓存。

    Args:
        on_settled: 回调 on_settled(spline)
    """

    def __init__(self, on_settled: Callable[[Any], None]):
        self.on_settled = on_settled
        self._pending: dict[int, Any] = {}
        self._watched: list = []

    @property
    def pending(self) -> list:
        """自上次 flush 以来被修改过的样条（按首次修改顺序）"""
        return list(self._pending.values())

    def watch(self, spline):
        if any(s is spline for s in self._watched):
            return
        self._watched.append(spline)
        spline.subscribe(self._on_changed)

    def unwatch(self, spline):
        for i, s in enumerate(self._watched):
            if s is spline:
                del self._watched[i]
                spline.unsubscribe(self._on_changed)
                self._pending.pop(id(spline), None)
                return

    def _on_changed(self, spline, knot_index: int, modification: SplineModification):
        self._pending.setdefault(id(spline), spline)

    def flush(self) -> int:
        """对每个待处理样条调用一次 on_settled，返回处理数量。"""
        pending = list(self._pending.values())
        self._pending.clear()
        for spline in pending:
            self.on_settled(spline)
        if pending:
            logger.debug(f"[Coalescer] Settled {len(pending)} spline(s)")
        return len(pending)
