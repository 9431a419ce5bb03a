"""
utils 模块单元测试
"""

import numpy as np
import pytest

from splinekit.utils.geometry import (
    Bounds,
    as_matrix,
    normalize,
    point_line_nearest_point,
    ray_line_nearest_point,
    transform_point,
)
from splinekit.utils.integrals import (
    adaptive_simpson,
    arc_length_integral,
    compute_arc_length_table,
)


def translation(offset):
    matrix = np.eye(4)
    matrix[:3, 3] = offset
    return matrix


class TestGeometry:
    """几何工具函数测试"""

    def test_normalize_single_vector(self):
        """测试单向量归一化"""
        v = np.array([3.0, 4.0, 0.0])
        result = normalize(v)
        assert np.isclose(np.linalg.norm(result), 1.0)
        np.testing.assert_allclose(result, [0.6, 0.8, 0.0])

    def test_normalize_batch(self):
        """测试批量向量归一化"""
        vectors = np.array([[3.0, 4.0, 0.0], [0.0, 0.0, 5.0]])
        result = normalize(vectors)
        norms = np.linalg.norm(result, axis=1)
        np.testing.assert_allclose(norms, [1.0, 1.0])

    def test_normalize_zero_vector(self):
        """测试零向量不产生 NaN"""
        result = normalize(np.zeros(3))
        assert np.all(np.isfinite(result))
        np.testing.assert_allclose(result, 0.0)

    def test_as_matrix(self):
        """测试 None 视为单位矩阵，错误形状报错"""
        np.testing.assert_allclose(as_matrix(None), np.eye(4))
        with pytest.raises(ValueError):
            as_matrix(np.eye(3))

    def test_transform_point(self):
        """测试平移与旋转"""
        matrix = translation([1.0, 2.0, 3.0])
        np.testing.assert_allclose(transform_point(matrix, [1.0, 1.0, 1.0]), [2.0, 3.0, 4.0])

        # 绕 Z 轴 90°
        rotation = np.eye(4)
        rotation[:2, :2] = [[0.0, -1.0], [1.0, 0.0]]
        points = np.array([[1.0, 0.0, 0.0], [0.0, 1.0, 0.0]])
        np.testing.assert_allclose(
            transform_point(rotation, points), [[0.0, 1.0, 0.0], [-1.0, 0.0, 0.0]], atol=1e-12
        )


class TestNearestPoint:
    """最近点工具测试"""

    @pytest.fixture
    def segment(self):
        return np.array([0.0, 0.0, 0.0]), np.array([3.0, 0.0, 0.0])

    def test_point_line_interior(self, segment):
        """测试投影落在线段内部"""
        a, b = segment
        nearest, param = point_line_nearest_point(np.array([1.5, 1.0, 0.0]), a, b)
        np.testing.assert_allclose(nearest, [1.5, 0.0, 0.0])
        assert np.isclose(param, 0.5)

    def test_point_line_clamped(self, segment):
        """测试投影超出线段时裁剪到端点"""
        a, b = segment
        nearest, param = point_line_nearest_point(np.array([-2.0, 1.0, 0.0]), a, b)
        np.testing.assert_allclose(nearest, a)
        assert param == 0.0

        nearest, param = point_line_nearest_point(np.array([5.0, 0.0, 0.0]), a, b)
        np.testing.assert_allclose(nearest, b)
        assert param == 1.0

    def test_point_line_degenerate(self):
        """测试零长度线段"""
        a = np.array([1.0, 1.0, 1.0])
        nearest, param = point_line_nearest_point(np.zeros(3), a, a.copy())
        np.testing.assert_allclose(nearest, a)
        assert param == 0.0

    def test_ray_crossing_segment(self, segment):
        """测试射线垂直穿过线段"""
        a, b = segment
        ray_point, line_point, ray_param, line_param = ray_line_nearest_point(
            np.array([1.0, 5.0, 0.0]), np.array([0.0, -1.0, 0.0]), a, b
        )
        np.testing.assert_allclose(line_point, [1.0, 0.0, 0.0], atol=1e-12)
        np.testing.assert_allclose(ray_point, [1.0, 0.0, 0.0], atol=1e-12)
        assert np.isclose(ray_param, 5.0)
        assert np.isclose(line_param, 1.0 / 3.0)

    def test_ray_skew(self, segment):
        """测试异面射线: 距离为两直线间距"""
        a, b = segment
        ray_point, line_point, _, _ = ray_line_nearest_point(
            np.array([2.0, 5.0, 1.0]), np.array([0.0, -1.0, 0.0]), a, b
        )
        np.testing.assert_allclose(line_point, [2.0, 0.0, 0.0], atol=1e-12)
        assert np.isclose(np.linalg.norm(ray_point - line_point), 1.0)

    def test_ray_parallel(self, segment):
        """测试平行射线取起点投影"""
        a, b = segment
        ray_point, line_point, _, line_param = ray_line_nearest_point(
            np.array([1.0, 2.0, 0.0]), np.array([1.0, 0.0, 0.0]), a, b
        )
        assert np.isclose(line_param, 1.0 / 3.0)
        assert np.isclose(np.linalg.norm(ray_point - line_point), 2.0)

    def test_ray_pointing_away(self, segment):
        """测试射线背离线段时射线参数为 0"""
        a, b = segment
        ray_point, _, ray_param, _ = ray_line_nearest_point(
            np.array([1.0, 5.0, 0.0]), np.array([0.0, 1.0, 0.0]), a, b
        )
        assert ray_param == 0.0
        np.testing.assert_allclose(ray_point, [1.0, 5.0, 0.0])


class TestBounds:
    """包围盒测试"""

    def test_default_is_empty_at_origin(self):
        """测试默认包围盒"""
        bounds = Bounds()
        np.testing.assert_allclose(bounds.center, 0.0)
        np.testing.assert_allclose(bounds.size, 0.0)

    def test_encapsulate(self):
        """测试扩展包含点"""
        bounds = Bounds(np.array([0.0, 0.0, 0.0]))
        bounds.encapsulate([2.0, -1.0, 3.0])
        np.testing.assert_allclose(bounds.min, [0.0, -1.0, 0.0])
        np.testing.assert_allclose(bounds.max, [2.0, 0.0, 3.0])
        np.testing.assert_allclose(bounds.center, [1.0, -0.5, 1.5])
        np.testing.assert_allclose(bounds.extents, [1.0, 0.5, 1.5])
        assert bounds.contains([1.0, -0.5, 1.0])
        assert not bounds.contains([3.0, 0.0, 0.0])

    def test_equality(self):
        """测试判等"""
        assert Bounds([1.0, 1.0, 1.0], [2.0, 2.0, 2.0]) == Bounds([1.0, 1.0, 1.0], [2.0, 2.0, 2.0])
        assert Bounds() != Bounds(size=[1.0, 1.0, 1.0])


class TestIntegrals:
    """积分工具测试"""

    def test_adaptive_simpson_polynomial(self):
        """测试多项式积分"""
        # ∫_0^1 x² dx = 1/3
        result = adaptive_simpson(lambda x: x**2, 0, 1)
        assert np.isclose(result, 1 / 3)

    def test_adaptive_simpson_trig(self):
        """测试三角函数积分"""
        # ∫_0^π sin(x) dx = 2
        result = adaptive_simpson(np.sin, 0, np.pi)
        assert np.isclose(result, 2.0, rtol=1e-8)

    def test_arc_length_line(self):
        """测试直线弧长"""
        # C(t) = (3t, 4t, 0), C'(t) = (3, 4, 0), 长度 = 5
        result = arc_length_integral(lambda t: np.array([3.0, 4.0, 0.0]), 0, 1)
        assert np.isclose(result, 5.0)

    def test_arc_length_table_circle(self):
        """测试四分之一圆弧长表"""

        def derivative(t):
            return np.array([-np.pi / 2 * np.sin(np.pi * t / 2), np.pi / 2 * np.cos(np.pi * t / 2)])

        t_samples, l_samples = compute_arc_length_table(derivative, n_samples=30)
        assert len(t_samples) == 30
        assert l_samples[0] == 0.0
        assert np.isclose(l_samples[-1], np.pi / 2, rtol=1e-8)
        assert np.all(np.diff(l_samples) >= 0)

    def test_arc_length_table_too_few_samples(self):
        """测试采样点数不足时报错"""
        with pytest.raises(ValueError):
            compute_arc_length_table(lambda t: np.ones(3), n_samples=1)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
