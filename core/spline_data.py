"""
spline_data - 样条内嵌辅助数据通道

每个样条带有四类按字符串键索引的数据通道（int / float / float4 / object）。
通道中的数据点以 PathIndexUnit 表示的位置为索引，不参与曲线计算，
但会随节点的插入与删除修复索引。
"""

import bisect
import math
from typing import Any, Callable, Generic, Iterator, NamedTuple, TypeVar

import numpy as np

from .enums import EmbeddedSplineDataType, PathIndexUnit, SplineModification
from .events import SplineModificationData

T = TypeVar("T")


class DataPoint(NamedTuple):
    """辅助数据点: 样条上的位置 index 及其值 value"""

    index: float
    value: Any


def lerp(a, b, ratio: float):
    """线性插值"""
    return a + (b - a) * ratio


def step(a, b, ratio: float):
    """阶跃插值，总是取前一个数据点的值"""
    return a


def _to_float4(value) -> np.ndarray:
    array = np.array(value, dtype=float)
    if array.shape != (4,):
        raise ValueError(f"Expected a float4 value, got shape {array.shape}")
    array.flags.writeable = False
    return array


def _identity(value):
    return value


class SplineData(Generic[T]):
    """
    一个辅助数据通道：按索引排序的数据点列表。

    Args:
        default_value: 通道为空时 evaluate 返回的值
        index_unit: 数据点索引使用的单位
        converter: 值转换函数（如 int / float）
        interpolator: evaluate 使用的插值函数 f(a, b, ratio)
    """

    def __init__(
        self,
        default_value: T | None = None,
        index_unit: PathIndexUnit = PathIndexUnit.CONTROL_POINT,
        converter: Callable[[Any], T] | None = None,
        interpolator: Callable[[T, T, float], T] | None = None,
    ):
        self._converter = converter or _identity
        self.default_value = default_value
        self.index_unit = index_unit
        self.interpolator = interpolator or lerp
        self._points: list[DataPoint] = []

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self) -> Iterator[DataPoint]:
        return iter(self._points)

    def __getitem__(self, i: int) -> DataPoint:
        return self._points[i]

    def __setitem__(self, i: int, point):
        index, value = point
        self._points[i] = DataPoint(float(index), self._converter(value))
        self._sort()

    @property
    def indices(self) -> list[float]:
        return [p.index for p in self._points]

    def add(self, index: float, value: T) -> int:
        """按索引顺序插入数据点，返回插入位置。相同索引的点排在已有点之后。"""
        index = float(index)
        position = bisect.bisect_right(self.indices, index)
        self._points.insert(position, DataPoint(index, self._converter(value)))
        return position

    def remove_at(self, i: int) -> DataPoint:
        return self._points.pop(i)

    def remove(self, index: float) -> bool:
        """删除第一个位于 index 的数据点，返回是否找到。"""
        for i, p in enumerate(self._points):
            if p.index == index:
                del self._points[i]
                return True
        return False

    def clear(self):
        self._points.clear()

    def copy(self) -> "SplineData[T]":
        data = type(self)(self.default_value, self.index_unit, self._converter, self.interpolator)
        data._points = list(self._points)
        return data

    def _sort(self):
        self._points.sort(key=lambda p: p.index)

    def evaluate(
        self,
        spline,
        t: float,
        unit: PathIndexUnit = PathIndexUnit.NORMALIZED,
        interpolator: Callable[[T, T, float], T] | None = None,
    ) -> T:
        """
        在样条位置 t 处插值数据。

        Args:
            spline: 数据所属样条
            t: 位置，单位为 unit
            unit: t 的单位
            interpolator: 可选，覆盖通道默认插值函数

        Returns:
            插值结果；通道为空时返回 default_value，越界时返回端点值
        """
        from ..algorithm import convert_index_unit

        if not self._points:
            return self.default_value

        index = convert_index_unit(spline, t, unit, self.index_unit)
        position = bisect.bisect_right(self.indices, index)
        if position == 0:
            return self._points[0].value
        if position == len(self._points):
            return self._points[-1].value

        a, b = self._points[position - 1], self._points[position]
        span = b.index - a.index
        ratio = (index - a.index) / span if span > 0 else 0.0
        return (interpolator or self.interpolator)(a.value, b.value, ratio)

    def convert_index_unit(self, spline, new_unit: PathIndexUnit):
        """把所有数据点索引转换为 new_unit 单位。"""
        from ..algorithm import convert_index_unit

        if new_unit == self.index_unit:
            return
        self._points = [
            DataPoint(convert_index_unit(spline, p.index, self.index_unit, new_unit), p.value)
            for p in self._points
        ]
        self.index_unit = new_unit
        self._sort()

    def on_spline_modified(self, event: SplineModificationData):
        """
        节点插入/删除后修复 CONTROL_POINT 单位的索引。

        DISTANCE 与 NORMALIZED 单位的数据保持不变。
        """
        if self.index_unit != PathIndexUnit.CONTROL_POINT or not self._points:
            return
        if event.knot_index < 0:
            return

        if event.modification == SplineModification.KNOT_INSERTED:
            self._repair_inserted(event.spline, event.knot_index)
        elif event.modification == SplineModification.KNOT_REMOVED:
            self._repair_removed(event)
        else:
            return

        count = len(event.spline)
        max_index = count if event.spline.closed else max(count - 1, 0)
        self._points = [
            DataPoint(min(max(p.index, 0.0), float(max_index)), p.value) for p in self._points
        ]
        self._sort()

    def _repair_inserted(self, spline, k: int):
        count = len(spline)
        # 新节点把原第 divided 段一分为二；闭合样条中包括首尾相接的一段
        if spline.closed and count >= 3:
            divided = (k - 1) % (count - 1)
            split = True
        else:
            divided = k - 1
            split = 0 < k < count - 1
        if split:
            first = spline.previous_index(k)
            len_a = spline.get_curve_length(first)
            len_b = spline.get_curve_length(k)

        repaired = []
        for p in self._points:
            curve = math.floor(p.index)
            index = p.index
            if split and curve == divided:
                d = (p.index - curve) * (len_a + len_b)
                if d <= len_a:
                    index = first + (d / len_a if len_a > 0 else 0.0)
                else:
                    index = k + ((d - len_a) / len_b if len_b > 0 else 0.0)
            elif curve >= k:
                index += 1
            repaired.append(DataPoint(index, p.value))
        self._points = repaired

    def _repair_removed(self, event: SplineModificationData):
        k = event.knot_index
        count = len(event.spline)
        old_count = count + 1
        # 原第 before 段与第 k 段合并为新的第 merged 段
        if event.spline.closed and count >= 2:
            before = (k - 1) % old_count
            merged = before if k > 0 else count - 1
            merge = True
        else:
            before = merged = k - 1
            merge = 0 < k < old_count - 1
        len_a, len_b = event.prev_curve_length, event.next_curve_length
        total = len_a + len_b

        repaired = []
        for p in self._points:
            curve = math.floor(p.index)
            index = p.index
            if merge and curve in (before, k):
                fraction = p.index - curve
                d = fraction * len_a if curve == before else len_a + fraction * len_b
                index = merged + (d / total if total > 0 else 0.0)
            elif curve >= k:
                index -= 1
            repaired.append(DataPoint(index, p.value))
        self._points = repaired

    def __repr__(self) -> str:
        return f"SplineData(unit={self.index_unit.name}, points={len(self._points)})"


# 各通道类型: (值转换, 默认值, 插值函数)
_CHANNEL_SPECS = {
    EmbeddedSplineDataType.INT: (int, 0, step),
    EmbeddedSplineDataType.FLOAT: (float, 0.0, lerp),
    EmbeddedSplineDataType.FLOAT4: (_to_float4, _to_float4((0.0, 0.0, 0.0, 0.0)), lerp),
    EmbeddedSplineDataType.OBJECT: (_identity, None, step),
}


def create_spline_data(data_type: EmbeddedSplineDataType, index_unit=PathIndexUnit.CONTROL_POINT) -> SplineData:
    """创建指定通道类型的空 SplineData。"""
    converter, default_value, interpolator = _CHANNEL_SPECS[data_type]
    return SplineData(default_value, index_unit, converter, interpolator)


class SplineDataDictionary:
    """
    一类通道的 键 -> SplineData 映射。

    不同类型的通道相互独立，同一个键可以同时存在于 float 与 object 通道中。
    """

    def __init__(self, data_type: EmbeddedSplineDataType):
        self.data_type = data_type
        self._items: dict[str, SplineData] = {}

    def try_get(self, key: str) -> SplineData | None:
        return self._items.get(key)

    def get_or_create(self, key: str) -> SplineData:
        data = self._items.get(key)
        if data is None:
            data = create_spline_data(self.data_type)
            self._items[key] = data
        return data

    def set(self, key: str, data: SplineData):
        """保存 data 的副本"""
        self._items[key] = data.copy()

    def remove(self, key: str) -> bool:
        return self._items.pop(key, None) is not None

    def remove_empty(self):
        """删除没有数据点的条目"""
        self._items = {k: v for k, v in self._items.items() if len(v) > 0}

    def keys(self) -> list[str]:
        return list(self._items.keys())

    def values(self) -> list[SplineData]:
        return list(self._items.values())

    def items(self) -> list[tuple[str, SplineData]]:
        return list(self._items.items())

    def copy(self) -> "SplineDataDictionary":
        other = SplineDataDictionary(self.data_type)
        other._items = {k: v.copy() for k, v in self._items.items()}
        return other

    def on_spline_modified(self, event: SplineModificationData):
        for data in self._items.values():
            data.on_spline_modified(event)

    def __contains__(self, key: str) -> bool:
        return key in self._items

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)
