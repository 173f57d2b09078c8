# Copyright 2022 NVIDIA Corporation
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
from utils.comparisons import allclose
from utils.generators import layout_variants

import ndreduce as nr


@pytest.mark.parametrize(
    "args",
    [
        ((100,), 1, 0),
        ((100,), 2, 0),
        ((100,), 3, 0),
        ((10, 10), 2, 0),
        ((10, 10), 2, 1),
        ((10, 10), 9, 1),
        ((5,), 4, 0),
        ((4, 5, 6), 3, 2),
        ((4, 5, 6), 1, 1),
    ],
)
def test_diff(args):
    shape, n, axis = args
    nparr = np.random.random(shape)

    res_np = np.diff(nparr, n=n, axis=axis)
    res_nr = nr.diff(nparr, n=n, axis=axis)

    assert allclose(res_np, res_nr)


def test_diff_second_order():
    a = np.array([1.0, 2.0, 5.0])
    assert np.array_equal(nr.diff(a, 1, 0), [1.0, 3.0])
    assert np.array_equal(nr.diff(a, 2, 0), [2.0])


@pytest.mark.parametrize("n", range(1, 5))
@pytest.mark.parametrize("axis", range(2))
def test_diff_composes(n, axis):
    a = np.random.random((6, 7))
    once_more = nr.diff(nr.diff(a, n - 1, axis), 1, axis)
    assert allclose(nr.diff(a, n, axis), once_more)


def test_diff_nzero():
    a = np.ones(100)
    ad = nr.diff(a, n=0)
    assert np.array_equal(a, ad)
    assert ad is not a
    assert not np.shares_memory(a, ad)


@pytest.mark.parametrize("shape", ((9,), (4, 6), (3, 4, 5)), ids=str)
def test_layouts(shape):
    base = np.random.random(shape)
    for axis in range(base.ndim):
        expected = np.diff(base, n=2, axis=axis)
        for name, a in layout_variants(base):
            assert allclose(expected, nr.diff(a, 2, axis)), name


def test_unsigned_wraps():
    u8_arr = np.array([1, 0], dtype=np.uint8)
    res = nr.diff(u8_arr)
    assert res.dtype == np.uint8
    assert np.array_equal(res, [255])


def test_input_untouched():
    a = np.random.random((5, 5))
    before = a.copy()
    res = nr.diff(a, 3, 1)
    assert np.array_equal(a, before)
    assert not np.shares_memory(a, res)


class TestDiffNegative:
    def test_too_short(self):
        with pytest.raises(ValueError):
            nr.diff(np.array([1.0, 2.0, 3.0]), 10, 0)

    @pytest.mark.parametrize("shape, n, axis", [((5,), 5, 0), ((5, 3), 3, 1)])
    def test_order_equals_length(self, shape, n, axis):
        with pytest.raises(ValueError):
            nr.diff(np.ones(shape), n, axis)

    def test_negative_order(self):
        with pytest.raises(ValueError):
            nr.diff(np.ones(5), -1)

    @pytest.mark.parametrize("n", (0, 1))
    def test_axis_out_bound(self, n):
        with pytest.raises(np.exceptions.AxisError):
            nr.diff(np.ones((2, 3)), n, 2)

    def test_0d(self):
        with pytest.raises(np.exceptions.AxisError):
            nr.diff(np.array(1.0))

    def test_bool(self):
        with pytest.raises(TypeError):
            nr.diff(np.array([True, False]))


if __name__ == "__main__":
    import sys

    sys.exit(pytest.main(sys.argv))
