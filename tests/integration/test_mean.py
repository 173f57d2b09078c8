# Copyright 2023 NVIDIA Corporation
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#

import numpy as np
import pytest
from utils.comparisons import allclose, tolerance
from utils.generators import layout_variants, mk_0to1_array, mk_seq_array

import ndreduce as nr


def test_mean_axis_2d():
    a = np.array([[1.0, 2.0, 3.0], [4.0, 5.0, 6.0]])
    assert np.array_equal(nr.mean_axis(a, 0), [2.5, 3.5, 4.5])
    assert np.array_equal(nr.mean_axis(a, 1), [2.0, 5.0])
    total = nr.mean_axis(nr.mean_axis(a, 0), 0)
    assert isinstance(total, np.ndarray)
    assert total.shape == ()
    assert total == 3.5


@pytest.mark.parametrize("dtype", ("e", "f", "d", "F", "D"))
@pytest.mark.parametrize("shape", ((1,), (10,), (4, 5), (2, 3, 4)), ids=str)
def test_mean_matches_numpy(shape, dtype):
    a = mk_0to1_array(shape, dtype=dtype)
    res = nr.mean(a)
    assert res.dtype == a.dtype
    assert allclose(np.mean(a, dtype=a.dtype), res, **tolerance(dtype))
    for axis in range(a.ndim):
        res = nr.mean_axis(a, axis)
        assert allclose(
            np.mean(a, axis=axis, dtype=a.dtype), res, **tolerance(dtype)
        )


@pytest.mark.parametrize("shape", ((6,), (4, 5), (2, 3, 4)), ids=str)
def test_mean_is_sum_over_count(shape):
    a = mk_0to1_array(shape)
    assert allclose(nr.sum(a) / a.size, nr.mean(a))


@pytest.mark.parametrize("shape", ((6,), (4, 5), (2, 3, 4)), ids=str)
def test_layouts(shape):
    base = mk_0to1_array(shape)
    for axis in range(base.ndim):
        expected = np.mean(base, axis=axis)
        for name, a in layout_variants(base):
            assert allclose(expected, nr.mean_axis(a, axis)), name


def test_empty_is_none():
    assert nr.mean(np.zeros((0,))) is None
    assert nr.mean(np.zeros((3, 0))) is None
    assert nr.mean_axis(np.zeros((0, 3)), 0) is None


def test_empty_other_axis():
    res = nr.mean_axis(np.zeros((3, 0)), 0)
    assert res is not None
    assert res.shape == (0,)


class TestIntegerMean:
    def test_exact(self):
        a = mk_seq_array((3, 3))
        res = nr.mean(a)
        assert res == 5
        assert res.dtype == a.dtype

    def test_rounds_toward_zero(self):
        assert nr.mean(np.array([3, 4])) == 3
        assert nr.mean(np.array([-3, -4])) == -3
        assert nr.mean(np.array([-3, 4])) == 0

    def test_axis(self):
        a = np.array([[1, -2], [2, -3]], dtype=np.int32)
        res = nr.mean_axis(a, 0)
        assert res.dtype == np.int32
        assert np.array_equal(res, [1, -2])

    def test_axis_0d(self):
        res = nr.mean_axis(np.array([1, 2, 4], dtype=np.int16), 0)
        assert res.shape == ()
        assert res == 2


class TestMeanNegative:
    def test_count_overflow(self):
        with pytest.raises(OverflowError):
            nr.mean(np.zeros(200, dtype=np.int8))
        with pytest.raises(OverflowError):
            nr.mean_axis(np.zeros((2, 300), dtype=np.uint8), 1)

    def test_count_overflow_float16(self):
        with pytest.raises(OverflowError):
            nr.mean(np.zeros(70000, dtype=np.float16))

    def test_axis_out_bound(self):
        with pytest.raises(np.exceptions.AxisError):
            nr.mean_axis(np.ones((2, 3)), 2)

    def test_bool(self):
        with pytest.raises(TypeError):
            nr.mean(np.ones(3, dtype=bool))


if __name__ == "__main__":
    import sys

    sys.exit(pytest.main(sys.argv))
