"""
events 模块单元测试
"""

import pytest

from splinekit.core.enums import SplineModification
from splinekit.core.events import (
    SplineChangeAggregator,
    SplineChangeCoalescer,
    SplineModificationData,
)
from splinekit.core.spline import Spline
from splinekit.core.spline_data import SplineData


class TestModificationData:
    """修改信息测试"""

    def test_lengths_captured_before_mutation(self):
        """测试通道收到修改前的相邻段长度"""
        received = []

        class RecordingData(SplineData):
            def on_spline_modified(self, event):
                received.append(event)

        spline = Spline([[0, 0, 0], [1, 0, 0], [3, 0, 0], [6, 0, 0]])
        prev_length = spline.get_curve_length(0)
        next_length = spline.get_curve_length(1)
        spline.float_data.set("probe", RecordingData())

        spline.remove_at(1)
        (event,) = received
        assert isinstance(event, SplineModificationData)
        assert event.spline is spline
        assert event.modification == SplineModification.KNOT_REMOVED
        assert event.knot_index == 1
        assert event.prev_curve_length == pytest.approx(prev_length)
        assert event.next_curve_length == pytest.approx(next_length)

    def test_batch_event_has_no_lengths(self):
        """测试批量修改不携带长度"""
        received = []

        class RecordingData(SplineData):
            def on_spline_modified(self, event):
                received.append(event)

        spline = Spline([[0, 0, 0], [1, 0, 0]])
        spline.object_data.set("probe", RecordingData())
        spline.closed = True
        (event,) = received
        assert event.knot_index == -1
        assert event.prev_curve_length == 0.0
        assert event.next_curve_length == 0.0


class TestAggregator:
    """多样条变更汇总测试"""

    def test_forwards_registered_splines(self):
        """测试转发已注册样条的变更"""
        events = []
        aggregator = SplineChangeAggregator()
        aggregator.subscribe(lambda spline, index, modification: events.append((spline, index, modification)))

        a, b, c = Spline(), Spline(), Spline()
        aggregator.register(a)
        aggregator.register(b)
        aggregator.register(a)
        assert aggregator.splines == (a, b)

        a.append([0, 0, 0])
        b.closed = True
        c.append([0, 0, 0])
        assert events == [
            (a, 0, SplineModification.KNOT_INSERTED),
            (b, -1, SplineModification.CLOSED_MODIFIED),
        ]

    def test_unregister(self):
        """测试取消注册后不再转发"""
        events = []
        aggregator = SplineChangeAggregator()
        aggregator.subscribe(lambda *args: events.append(args))
        spline = Spline()
        aggregator.register(spline)
        aggregator.unregister(spline)
        spline.append([0, 0, 0])
        assert events == []
        assert aggregator.splines == ()

    def test_unsubscribe_listener(self):
        """测试移除汇总监听者"""
        events = []

        def listener(*args):
            events.append(args)

        aggregator = SplineChangeAggregator()
        aggregator.subscribe(listener)
        aggregator.unsubscribe(listener)
        spline = Spline()
        aggregator.register(spline)
        spline.append([0, 0, 0])
        assert events == []


class TestCoalescer:
    """合并通知测试"""

    def test_flush_once_per_spline(self):
        """测试每个样条每次 flush 只回调一次"""
        settled = []
        coalescer = SplineChangeCoalescer(settled.append)
        a, b = Spline(), Spline()
        coalescer.watch(a)
        coalescer.watch(b)

        a.append([0, 0, 0])
        a.append([1, 0, 0])
        b.append([0, 0, 0])
        a.closed = True
        assert coalescer.pending == [a, b]

        assert coalescer.flush() == 2
        assert settled == [a, b]
        assert coalescer.pending == []
        assert coalescer.flush() == 0

    def test_unwatch_drops_pending(self):
        """测试取消监视后丢弃待处理项"""
        settled = []
        coalescer = SplineChangeCoalescer(settled.append)
        spline = Spline()
        coalescer.watch(spline)
        spline.append([0, 0, 0])
        coalescer.unwatch(spline)
        spline.append([1, 0, 0])
        assert coalescer.flush() == 0
        assert settled == []


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
