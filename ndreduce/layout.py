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
"""
Layout queries and traversals over strided numpy arrays.

Everything here returns views of the input, never copies, so callers can
choose a traversal from the memory layout without assuming it.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, Iterator, Optional, Tuple

import numpy as np

from .utils import tuple_pop

if TYPE_CHECKING:
    import numpy.typing as npt

    from .types import NdIndex


def _axis_key(axis: int, key: Any) -> Tuple[Any, ...]:
    # the trailing Ellipsis keeps integer keys on 1-D arrays returning
    # 0-d views instead of scalars
    return (slice(None),) * axis + (key, Ellipsis)


def memory_order_view(
    a: npt.NDArray[Any],
) -> Optional[npt.NDArray[Any]]:
    """
    Return a 1-D view over every element of ``a`` in memory order, or None
    if the elements do not form a single dense run.

    Axes of extent one are ignored and negative strides are walked
    backwards, so transposed and reversed arrays still qualify. Broadcast
    (zero-stride) axes never do.
    """
    if a.size == 0:
        return a.reshape(0)
    view = np.squeeze(a)
    if view.ndim == 0:
        return view.reshape(1)
    flip = tuple(
        slice(None, None, -1) if stride < 0 else slice(None)
        for stride in view.strides
    )
    view = view[flip]
    order = sorted(range(view.ndim), key=lambda ax: -view.strides[ax])
    view = view.transpose(order)
    if not view.flags.c_contiguous:
        return None
    return view.reshape(-1)


def row_slice(row: npt.NDArray[Any]) -> Optional[npt.NDArray[Any]]:
    """
    Return ``row`` if it is dense in logical order, otherwise None.
    """
    assert row.ndim == 1
    if row.shape[0] <= 1 or row.strides[0] == row.itemsize:
        return row
    return None


def rows(a: npt.NDArray[Any]) -> Iterator[npt.NDArray[Any]]:
    """
    Iterate over the 1-D rows of ``a`` along its last axis, in C order.
    """
    if a.ndim == 0:
        yield a.reshape(1)
        return
    for index in np.ndindex(*a.shape[:-1]):
        yield a[index]


def min_stride_axis(a: npt.NDArray[Any]) -> int:
    """
    Return the axis with the smallest absolute stride.

    Ties go to the highest-numbered axis, which for C-ordered arrays is the
    fastest varying one.
    """
    if a.ndim == 0:
        raise ValueError("min_stride_axis: array must have ndim > 0")
    if a.ndim == 1:
        return 0
    return min(
        reversed(range(a.ndim)), key=lambda ax: abs(a.strides[ax])
    )


def lanes(
    a: npt.NDArray[Any], axis: int
) -> Iterator[Tuple[NdIndex, npt.NDArray[Any]]]:
    """
    Iterate over the 1-D lanes of ``a`` along ``axis``.

    Yields ``(index, lane)`` where ``index`` is the lane's position in the
    shape of ``a`` with ``axis`` removed.
    """
    moved = np.moveaxis(a, axis, -1)
    for index in np.ndindex(*tuple_pop(a.shape, axis)):
        yield index, moved[index]


def axis_iter(
    a: npt.NDArray[Any], axis: int
) -> Iterator[npt.NDArray[Any]]:
    """
    Iterate over the sub-views of ``a`` with ``axis`` removed, in index
    order along ``axis``. The sub-views share storage with ``a``.
    """
    for i in range(a.shape[axis]):
        yield a[_axis_key(axis, i)]


def slice_axis(
    a: npt.NDArray[Any], axis: int, slc: slice
) -> npt.NDArray[Any]:
    return a[_axis_key(axis, slc)]


def accumulate_axis_inplace(
    a: npt.NDArray[Any], axis: int, op: np.ufunc
) -> None:
    """
    Replace every sub-view along ``axis`` but the first with
    ``op(current, previous)``, where ``previous`` has already been updated.
    """
    if a.shape[axis] <= 1:
        return
    prev: Optional[npt.NDArray[Any]] = None
    for curr in axis_iter(a, axis):
        if prev is not None:
            op(curr, prev, out=curr)
        prev = curr
