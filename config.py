"""
config - 全局常量与默认参数

集中管理样条长度表分辨率、最近点搜索的细分参数以及数值容差。
"""

from dataclasses import dataclass

# 每段曲线的 距离->参数 查找表行数
CURVE_DISTANCE_LUT_RESOLUTION = 30

# 弧长表积分容差（每个查找表区间）
ARC_LENGTH_TOLERANCE = 1e-8

# 最近点搜索: 细分段数上下限
SUBDIVISION_COUNT_MIN = 6
SUBDIVISION_COUNT_MAX = 1024

# 最近点搜索: 分辨率范围与默认值
PICK_RESOLUTION_MIN = 2
PICK_RESOLUTION_DEFAULT = 4
PICK_RESOLUTION_MAX = 64

# 最近点搜索: 迭代次数默认值与上限
PICK_ITERATIONS_DEFAULT = 2
PICK_ITERATIONS_MAX = 10

# 直线距离取点的收敛阈值
LINEAR_DISTANCE_EPSILON = 1e-3

# 批量修改时使用的节点索引
BATCH_MODIFICATION = -1


@dataclass
class NearestPointOptions:
    """最近点搜索参数"""

    resolution: int = PICK_RESOLUTION_DEFAULT  # 每单位 sqrt(长度) 的细分数
    iterations: int = PICK_ITERATIONS_DEFAULT  # 细分迭代次数

    def clamped(self) -> "NearestPointOptions":
        """返回限制在合法范围内的参数副本。迭代次数至少为 1。"""
        resolution = min(max(PICK_RESOLUTION_MIN, int(self.resolution)), PICK_RESOLUTION_MAX)
        iterations = min(max(1, int(self.iterations)), PICK_ITERATIONS_MAX)
        return NearestPointOptions(resolution, iterations)
