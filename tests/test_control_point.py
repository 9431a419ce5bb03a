"""
control_point 模块单元测试
"""

import numpy as np
import pytest

from splinekit.core.control_point import ControlPoint, as_position


class TestControlPoint:
    """控制点测试"""

    def test_default_is_origin(self):
        """测试默认位置为原点"""
        np.testing.assert_allclose(ControlPoint().position, [0.0, 0.0, 0.0])

    def test_position_is_read_only(self):
        """测试位置不可修改"""
        point = ControlPoint([1.0, 2.0, 3.0])
        with pytest.raises(ValueError):
            point.position[0] = 5.0

    def test_source_array_not_shared(self):
        """测试修改输入数组不影响控制点"""
        source = np.array([1.0, 2.0, 3.0])
        point = ControlPoint(source)
        source[0] = 100.0
        assert point.position[0] == 1.0

    def test_invalid_shape(self):
        """测试错误形状报错"""
        with pytest.raises(ValueError):
            ControlPoint([1.0, 2.0])
        with pytest.raises(ValueError):
            as_position(np.zeros((2, 3)))

    def test_equality_and_hash(self):
        """测试按位置判等与哈希"""
        a = ControlPoint([1.0, 2.0, 3.0])
        b = ControlPoint((1, 2, 3))
        assert a == b
        assert hash(a) == hash(b)
        assert a != ControlPoint([1.0, 2.0, 3.5])
        assert len({a, b}) == 1

    def test_mirror_around(self):
        """测试镜像: 2 * pivot - self"""
        point = ControlPoint([3.0, 0.0, 0.0])
        mirrored = point.mirror_around(ControlPoint([0.0, 0.0, 0.0]))
        assert mirrored == ControlPoint([-3.0, 0.0, 0.0])

        mirrored = point.mirror_around([1.0, 1.0, 1.0])
        assert mirrored == ControlPoint([-1.0, 2.0, 2.0])

    def test_offset_arithmetic(self):
        """测试加减偏移量返回新控制点"""
        point = ControlPoint([1.0, 1.0, 1.0])
        assert point + [1.0, 0.0, 0.0] == ControlPoint([2.0, 1.0, 1.0])
        assert point - [0.0, 1.0, 0.0] == ControlPoint([1.0, 0.0, 1.0])
        assert point == ControlPoint([1.0, 1.0, 1.0])

    def test_transform(self):
        """测试矩阵变换"""
        matrix = np.diag([2.0, 2.0, 2.0, 1.0])
        matrix[:3, 3] = [0.0, 0.0, 1.0]
        result = ControlPoint([1.0, 2.0, 3.0]).transform(matrix)
        assert result == ControlPoint([2.0, 4.0, 7.0])


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
