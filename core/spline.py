"""
spline - 三次B样条聚合根

Spline 持有有序节点列表、开闭状态、每段曲线的 距离->参数 查找表缓存、
总长度缓存以及四类辅助数据通道。所有修改都经过 Spline 自身的接口，
这是缓存失效与变更通知的唯一入口。
"""

from typing import Iterable, Iterator

import numpy as np
from loguru import logger

from ..config import BATCH_MODIFICATION, CURVE_DISTANCE_LUT_RESOLUTION
from .bspline import (
    INVALID_DISTANCE,
    BSplineCurve,
    calculate_curve_lengths,
    get_distance_to_interpolation,
)
from .control_point import ControlPoint
from .enums import EmbeddedSplineDataType, SplineModification
from .events import SplineListener, SplineModificationData
from .indexing import curve_support, next_knot_index, previous_knot_index
from .spline_data import SplineDataDictionary


def curve_control_points_for_index(
    index: int, knots: list[ControlPoint], closed: bool
) -> tuple[ControlPoint, ControlPoint, ControlPoint, ControlPoint]:
    """
    计算以节点 index 为第一个真实节点的曲线段的四个控制点。

    - 只有一个节点: 四个控制点都等于该节点（零长度退化段）
    - 闭合: 索引按节点数取模
    - 开放: 越过端点的控制点由端点附近的节点镜像生成

    Args:
        index: 曲线段索引
        knots: 节点列表
        closed: 是否闭合

    Returns:
        (p0, p1, p2, p3)
    """
    n = len(knots)
    if n == 1:
        first = knots[0]
        return first, first, first, first

    if closed:
        return (
            knots[(index - 1 + n) % n],
            knots[index],
            knots[(index + 1) % n],
            knots[(index + 2) % n],
        )

    p1 = knots[index]
    if index - 1 < 0:
        p0 = knots[1].mirror_around(knots[0])
    else:
        p0 = knots[index - 1]

    last, before_last = knots[n - 1], knots[n - 2]
    if index + 1 >= n:
        p2 = before_last.mirror_around(last)
        p3 = last.mirror_around(p2)
    else:
        p2 = knots[index + 1]
        p3 = knots[index + 2] if index + 2 < n else before_last.mirror_around(last)

    return p0, p1, p2, p3


class CurveCache:
    """
    每段曲线的查找表缓存。

    按节点索引排列的定长数组，每个槽位带一个有效标志；
    总长度 length < 0 表示无效。

    Attributes:
        tables: (count, resolution, 2) 查找表 (distance, t)
        valid: (count,) 槽位是否有效
        length: 总长度缓存
    """

    def __init__(self, count: int = 0, resolution: int = CURVE_DISTANCE_LUT_RESOLUTION):
        self.resolution = resolution
        self.tables = np.full((count, resolution, 2), INVALID_DISTANCE)
        self.valid = np.zeros(count, dtype=bool)
        self.length = INVALID_DISTANCE

    def __len__(self) -> int:
        return len(self.valid)

    def resize(self, count: int):
        """增长时在尾部追加无效槽位，缩小时截断尾部"""
        current = len(self)
        if count > current:
            extra = count - current
            self.tables = np.concatenate(
                [self.tables, np.full((extra, self.resolution, 2), INVALID_DISTANCE)]
            )
            self.valid = np.concatenate([self.valid, np.zeros(extra, dtype=bool)])
        elif count < current:
            self.tables = self.tables[:count].copy()
            self.valid = self.valid[:count].copy()

    def insert(self, index: int):
        self.tables = np.insert(self.tables, index, INVALID_DISTANCE, axis=0)
        self.valid = np.insert(self.valid, index, False)

    def delete(self, index: int):
        self.tables = np.delete(self.tables, index, axis=0)
        self.valid = np.delete(self.valid, index)

    def invalidate(self, indices: Iterable[int] | None = None):
        """使指定槽位（None 表示全部）以及总长度失效"""
        if indices is None:
            self.valid[:] = False
        else:
            for i in indices:
                self.valid[i] = False
        self.length = INVALID_DISTANCE

    def store(self, index: int, table: np.ndarray):
        self.tables[index] = table
        self.valid[index] = True

    def copy(self) -> "CurveCache":
        other = CurveCache(0, self.resolution)
        other.tables = self.tables.copy()
        other.valid = self.valid.copy()
        other.length = self.length
        return other


class Spline:
    """
    由有序控制点构成的分段三次B样条。

    Args:
        knots: 可选，初始节点（ControlPoint 或 (3,) 坐标）
        closed: 是否闭合（最后一个节点连回第一个节点）
    """

    def __init__(self, knots: Iterable | None = None, closed: bool = False):
        self._knots: list[ControlPoint] = [self._as_knot(k) for k in knots] if knots is not None else []
        self._closed = bool(closed)
        self._cache = CurveCache(len(self._knots))
        self._listeners: list[SplineListener] = []
        self._last_curve_lengths = (0.0, 0.0)

        self._int_data = SplineDataDictionary(EmbeddedSplineDataType.INT)
        self._float_data = SplineDataDictionary(EmbeddedSplineDataType.FLOAT)
        self._float4_data = SplineDataDictionary(EmbeddedSplineDataType.FLOAT4)
        self._object_data = SplineDataDictionary(EmbeddedSplineDataType.OBJECT)

    @staticmethod
    def _as_knot(value) -> ControlPoint:
        return value if isinstance(value, ControlPoint) else ControlPoint(value)

    # ------------------------------------------------------------------
    # 辅助数据通道
    # ------------------------------------------------------------------

    @property
    def int_data(self) -> SplineDataDictionary:
        return self._int_data

    @property
    def float_data(self) -> SplineDataDictionary:
        return self._float_data

    @property
    def float4_data(self) -> SplineDataDictionary:
        return self._float4_data

    @property
    def object_data(self) -> SplineDataDictionary:
        return self._object_data

    def get_data_channel(self, data_type: EmbeddedSplineDataType) -> SplineDataDictionary:
        channels = {
            EmbeddedSplineDataType.INT: self._int_data,
            EmbeddedSplineDataType.FLOAT: self._float_data,
            EmbeddedSplineDataType.FLOAT4: self._float4_data,
            EmbeddedSplineDataType.OBJECT: self._object_data,
        }
        if data_type not in channels:
            raise ValueError(f"Unknown data type: {data_type!r}")
        return channels[data_type]

    def get_spline_data_keys(self, data_type: EmbeddedSplineDataType) -> list[str]:
        return self.get_data_channel(data_type).keys()

    def remove_unused_data(self):
        """删除所有没有数据点的辅助数据条目"""
        for channel in self._channels():
            channel.remove_empty()

    def _channels(self) -> tuple[SplineDataDictionary, ...]:
        return self._int_data, self._float_data, self._float4_data, self._object_data

    # ------------------------------------------------------------------
    # 变更通知
    # ------------------------------------------------------------------

    def subscribe(self, listener: SplineListener):
        """注册监听者 listener(spline, knot_index, modification)"""
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: SplineListener):
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _on_spline_changed(self):
        """每次修改后调用，子类可重写"""

    def invalidate_caches(self):
        """使全部缓存失效，不发送通知。用于 set_no_notify 之后。"""
        self._ensure_cache()
        self._cache.invalidate()

    def _ensure_cache(self):
        if len(self._cache) != len(self._knots):
            self._cache.resize(len(self._knots))

    def _set_dirty(
        self,
        modification: SplineModification,
        knot_index: int = BATCH_MODIFICATION,
        invalidate: bool = True,
    ):
        self._ensure_cache()
        if invalidate:
            if knot_index < 0:
                self._cache.invalidate()
            else:
                self._cache.invalidate(curve_support(knot_index, len(self._knots), self._closed))

        self._on_spline_changed()

        event = SplineModificationData(self, modification, knot_index, *self._last_curve_lengths)
        for channel in self._channels():
            channel.on_spline_modified(event)

        for listener in list(self._listeners):
            listener(self, knot_index, modification)

    def _cache_knot_operation_curves(self, index: int):
        """记录修改前与节点 index 相邻的两段曲线长度"""
        self._last_curve_lengths = (0.0, 0.0)
        count = len(self._knots)
        if count <= 1:
            return

        prev_length = self.get_curve_length(self.previous_index(index))
        next_length = self.get_curve_length(index) if index < count else 0.0
        self._last_curve_lengths = (prev_length, next_length)

    # ------------------------------------------------------------------
    # 节点访问与修改
    # ------------------------------------------------------------------

    def _check_index(self, index: int, upper: int):
        if isinstance(index, bool) or not isinstance(index, (int, np.integer)):
            raise TypeError(f"Knot index must be an integer, got {type(index).__name__}")
        if index < 0 or index >= upper:
            raise IndexError(f"Knot index {index} out of range [0, {upper})")

    @property
    def count(self) -> int:
        return len(self._knots)

    def __len__(self) -> int:
        return len(self._knots)

    def __iter__(self) -> Iterator[ControlPoint]:
        return iter(self._knots)

    def __getitem__(self, index: int) -> ControlPoint:
        self._check_index(index, len(self._knots))
        return self._knots[index]

    def __setitem__(self, index: int, knot):
        self.set(index, knot)

    def __contains__(self, knot) -> bool:
        return self._as_knot(knot) in self._knots

    def index(self, knot) -> int:
        """返回第一个等于 knot 的节点索引，不存在时返回 -1"""
        knot = self._as_knot(knot)
        for i, k in enumerate(self._knots):
            if k == knot:
                return i
        return -1

    @property
    def knots(self) -> tuple[ControlPoint, ...]:
        return tuple(self._knots)

    @knots.setter
    def knots(self, value: Iterable):
        self._knots = [self._as_knot(k) for k in value]
        self._cache = CurveCache(len(self._knots))
        self._last_curve_lengths = (0.0, 0.0)
        logger.debug(f"[Spline] Knots replaced ({len(self._knots)} knots)")
        self._set_dirty(SplineModification.DEFAULT)

    @property
    def closed(self) -> bool:
        return self._closed

    @closed.setter
    def closed(self, value: bool):
        value = bool(value)
        if self._closed == value:
            return
        self._closed = value
        self._last_curve_lengths = (0.0, 0.0)
        logger.debug(f"[Spline] Closed set to {value}")
        self._set_dirty(SplineModification.CLOSED_MODIFIED)

    def insert(self, index: int, knot):
        """在 index 处插入节点，后续节点索引加一。0 <= index <= count。"""
        self._check_index(index, len(self._knots) + 1)
        knot = self._as_knot(knot)

        self._ensure_cache()
        self._cache_knot_operation_curves(index)
        self._knots.insert(index, knot)
        self._cache.insert(index)
        self._set_dirty(SplineModification.KNOT_INSERTED, index)

    def append(self, knot):
        self.insert(len(self._knots), knot)

    def remove_at(self, index: int):
        """删除 index 处的节点"""
        self._check_index(index, len(self._knots))

        self._ensure_cache()
        self._cache_knot_operation_curves(index)
        del self._knots[index]
        self._cache.delete(index)
        self._set_dirty(SplineModification.KNOT_REMOVED, index)

    def remove(self, knot) -> bool:
        """删除第一个等于 knot 的节点，返回是否找到"""
        index = self.index(knot)
        if index < 0:
            return False
        self.remove_at(index)
        return True

    def clear(self):
        """删除所有节点，只发送一次批量通知"""
        self._knots.clear()
        self._cache = CurveCache(0)
        self._last_curve_lengths = (0.0, 0.0)
        logger.debug("[Spline] Cleared")
        self._set_dirty(SplineModification.KNOT_REMOVED)

    def set(self, index: int, knot):
        """替换 index 处的节点并发送 KNOT_MODIFIED 通知"""
        self._check_index(index, len(self._knots))
        knot = self._as_knot(knot)

        self._cache_knot_operation_curves(index)
        self._knots[index] = knot
        self._set_dirty(SplineModification.KNOT_MODIFIED, index)

    def set_no_notify(self, index: int, knot):
        """
        替换节点但不失效缓存、不发送通知。

        调用方需要自行保证缓存正确（例如之后调用 invalidate_caches）。
        """
        self._check_index(index, len(self._knots))
        self._knots[index] = self._as_knot(knot)

    def previous_index(self, index: int) -> int:
        return previous_knot_index(index, len(self._knots), self._closed)

    def next_index(self, index: int) -> int:
        return next_knot_index(index, len(self._knots), self._closed)

    # ------------------------------------------------------------------
    # 曲线段与长度
    # ------------------------------------------------------------------

    def get_curve_control_points(self, index: int) -> tuple[ControlPoint, ...]:
        self._check_index(index, len(self._knots))
        return curve_control_points_for_index(index, self._knots, self._closed)

    def get_curve(self, index: int) -> BSplineCurve:
        """返回以节点 index 为第一个真实节点的曲线段"""
        return BSplineCurve(*self.get_curve_control_points(index))

    def _get_curve_distance_lut(self, index: int) -> np.ndarray:
        self._check_index(index, len(self._knots))
        self._ensure_cache()
        if not self._cache.valid[index]:
            table = calculate_curve_lengths(self.get_curve(index), self._cache.resolution)
            self._cache.store(index, table)
        return self._cache.tables[index]

    def get_curve_length(self, index: int) -> float:
        """返回第 index 段曲线的弧长（缓存）"""
        lut = self._get_curve_distance_lut(index)
        return float(lut[-1, 0]) if len(lut) > 0 else 0.0

    def get_length(self) -> float:
        """返回全部曲线段长度之和（闭合时包含最后一段）"""
        self._ensure_cache()
        if self._cache.length < 0:
            curve_count = max(0, len(self._knots) if self._closed else len(self._knots) - 1)
            self._cache.length = float(sum(self.get_curve_length(i) for i in range(curve_count)))
        return self._cache.length

    def get_curve_interpolation(self, curve_index: int, curve_distance: float) -> float:
        """把第 curve_index 段内的弧长转换为该段的局部参数"""
        return get_distance_to_interpolation(self._get_curve_distance_lut(curve_index), curve_distance)

    def warmup(self):
        """预先计算所有长度缓存"""
        self.get_length()

    # ------------------------------------------------------------------
    # 批量操作
    # ------------------------------------------------------------------

    def resize(self, new_size: int):
        """
        调整节点数。增长时在尾部追加原点处的节点，缩小时从尾部删除。

        每一步都走普通的 insert / remove_at 路径，各自发送通知。
        """
        new_size = max(0, int(new_size))
        if new_size == len(self._knots):
            return

        logger.debug(f"[Spline] Resize {len(self._knots)} -> {new_size}")
        while len(self._knots) < new_size:
            self.append(ControlPoint())
        while len(self._knots) > new_size:
            self.remove_at(len(self._knots) - 1)

    def to_array(self) -> np.ndarray:
        """返回 (count, 3) 节点坐标数组"""
        if not self._knots:
            return np.zeros((0, 3))
        return np.array([k.position for k in self._knots])

    def copy(self) -> "Spline":
        """深拷贝节点、缓存与辅助数据，不复制监听者"""
        other = Spline(self._knots, self._closed)
        other._cache = self._cache.copy()
        other._int_data = self._int_data.copy()
        other._float_data = self._float_data.copy()
        other._float4_data = self._float4_data.copy()
        other._object_data = self._object_data.copy()
        return other

    def copy_from(self, other: "Spline"):
        """用 other 的节点、开闭状态与缓存替换本样条，发送一次 DEFAULT 通知"""
        if other is self:
            return

        self._closed = other.closed
        self._knots = list(other._knots)
        self._cache = other._cache.copy()
        self._last_curve_lengths = (0.0, 0.0)
        logger.debug(f"[Spline] Copied {len(self._knots)} knots")
        # 复制来的缓存与复制来的节点一致，无需失效
        self._set_dirty(SplineModification.DEFAULT, invalidate=False)

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"Spline(knots={len(self._knots)}, {state})"
