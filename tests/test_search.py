"""
search 模块单元测试
"""

import numpy as np
import pytest

from splinekit.algorithm import evaluate_position
from splinekit.core.spline import Spline
from splinekit.datasets import circle, helix, line
from splinekit.search import (
    NearestPoint,
    get_nearest_point,
    get_nearest_point_to_ray,
    get_subdivision_count,
)
from splinekit.utils.geometry import Ray


class TestSubdivisionCount:
    """细分段数测试"""

    def test_clamped_range(self):
        """测试段数限制在 [6, 1024]"""
        assert get_subdivision_count(0.0, 4) == 6
        assert get_subdivision_count(1.0, 2) == 6
        assert get_subdivision_count(100.0, 4) == 40
        assert get_subdivision_count(1e9, 64) == 1024

    def test_monotonic_in_length(self):
        """测试段数随长度不减"""
        counts = [get_subdivision_count(length, 8) for length in (1, 10, 100, 1000)]
        assert counts == sorted(counts)


class TestNearestPoint:
    """点最近点测试"""

    @pytest.fixture
    def line_spline(self):
        return Spline(*line(3.0))

    def test_point_above_line(self, line_spline):
        """测试直线上方点的最近点"""
        result = get_nearest_point(line_spline, [1.5, 1.0, 0.0])
        assert isinstance(result, NearestPoint)
        np.testing.assert_allclose(result.point, [1.5, 0.0, 0.0], atol=1e-6)
        assert result.t == pytest.approx(0.5, abs=1e-6)
        assert result.distance == pytest.approx(1.0, abs=1e-6)

    def test_converges_onto_line(self, line_spline):
        """测试随迭代增加最近点落在直线上"""
        for iterations in (1, 2, 4, 8):
            result = get_nearest_point(line_spline, [1.5, 1.0, 0.0], iterations=iterations)
            assert abs(result.point[1]) < 1e-9
            assert result.distance == pytest.approx(1.0, abs=1e-6)

    def test_point_beyond_end(self, line_spline):
        """测试端点外的点最近点为端点"""
        result = get_nearest_point(line_spline, [5.0, 0.0, 0.0])
        np.testing.assert_allclose(result.point, [3.0, 0.0, 0.0], atol=1e-6)
        assert result.t == pytest.approx(1.0)
        assert result.distance == pytest.approx(2.0, abs=1e-6)

    def test_point_on_circle(self):
        """测试近似圆上的最近点"""
        spline = Spline(*circle(2.0, 16))
        target = evaluate_position(spline, 0.3)
        result = get_nearest_point(spline, target * 1.5, resolution=8, iterations=4)
        np.testing.assert_allclose(result.point, target, atol=1e-2)
        assert result.t == pytest.approx(0.3, abs=1e-3)

    def test_matches_dense_sampling(self):
        """测试与密集采样得到的最近距离一致"""
        spline = Spline(*helix(n_knots=16))
        query = np.array([0.5, 2.5, 1.3])
        dense = np.array([evaluate_position(spline, t) for t in np.linspace(0, 1, 4000)])
        expected = np.min(np.linalg.norm(dense - query, axis=1))

        result = get_nearest_point(spline, query, resolution=8, iterations=5)
        assert result.distance == pytest.approx(expected, abs=1e-3)
        assert np.linalg.norm(evaluate_position(spline, result.t) - result.point) < 1e-2

    def test_parameters_clamped(self, line_spline):
        """测试越界参数被限制而不报错"""
        result = get_nearest_point(line_spline, [1.5, 1.0, 0.0], resolution=1000, iterations=100)
        assert result.distance == pytest.approx(1.0, abs=1e-6)
        result = get_nearest_point(line_spline, [1.5, 1.0, 0.0], resolution=0, iterations=0)
        assert np.isfinite(result.distance)

    def test_zero_iterations_runs_one_pass(self, line_spline):
        """测试迭代次数为 0 时与一轮细分结果相同"""
        zero = get_nearest_point(line_spline, [1.2, 0.7, 0.0], iterations=0)
        one = get_nearest_point(line_spline, [1.2, 0.7, 0.0], iterations=1)
        np.testing.assert_allclose(zero.point, one.point)
        assert zero.t == pytest.approx(one.t)
        assert zero.distance == pytest.approx(one.distance)

    def test_empty_spline_is_finite(self):
        """测试空样条返回原点"""
        result = get_nearest_point(Spline(), [1.0, 0.0, 0.0])
        np.testing.assert_allclose(result.point, 0.0)
        assert result.distance == pytest.approx(1.0)


class TestNearestPointToRay:
    """射线最近点测试"""

    def test_ray_crossing_line(self):
        """测试射线垂直穿过直线"""
        spline = Spline(*line(3.0))
        ray = Ray(np.array([1.0, 5.0, 0.0]), np.array([0.0, -1.0, 0.0]))
        result = get_nearest_point_to_ray(spline, ray, resolution=8, iterations=4)
        np.testing.assert_allclose(result.point, [1.0, 0.0, 0.0], atol=1e-6)
        assert result.distance == pytest.approx(0.0, abs=1e-6)
        assert result.t == pytest.approx(1.0 / 3.0, abs=1e-6)

    def test_ray_above_line(self):
        """测试异面射线的距离"""
        spline = Spline(*line(3.0))
        ray = Ray(np.array([2.0, 5.0, 1.0]), np.array([0.0, -1.0, 0.0]))
        result = get_nearest_point_to_ray(spline, ray)
        assert result.distance == pytest.approx(1.0, abs=1e-6)
        np.testing.assert_allclose(result.point, [2.0, 0.0, 0.0], atol=1e-6)

    def test_ray_through_circle_center(self):
        """测试沿 Z 轴穿过圆心的射线"""
        spline = Spline(*circle(1.0, 16))
        ray = Ray(np.array([0.0, 0.0, 5.0]), np.array([0.0, 0.0, -1.0]))
        result = get_nearest_point_to_ray(spline, ray)
        assert result.distance == pytest.approx(np.linalg.norm(result.point), abs=1e-9)
        assert 0.9 < result.distance < 1.0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
