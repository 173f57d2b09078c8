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
from __future__ import annotations

import sys
import traceback
import warnings
from typing import TYPE_CHECKING, Any, Tuple, TypeVar

import numpy as np
from numpy.exceptions import AxisError

if TYPE_CHECKING:
    from .types import Scalar

SUPPORTED_DTYPES = (
    np.dtype(np.bool_),
    np.dtype(np.int8),
    np.dtype(np.int16),
    np.dtype(np.int32),
    np.dtype(np.int64),
    np.dtype(np.uint8),
    np.dtype(np.uint16),
    np.dtype(np.uint32),
    np.dtype(np.uint64),
    np.dtype(np.float16),
    np.dtype(np.float32),
    np.dtype(np.float64),
    np.dtype(np.complex64),
    np.dtype(np.complex128),
)


def is_supported_type(dtype: Any) -> bool:
    # byte order does not change the element type
    return np.dtype(dtype).newbyteorder("=") in SUPPORTED_DTYPES


def find_last_user_stacklevel() -> int:
    stacklevel = 1
    # walk_stack(None) skips a version-dependent number of frames
    for frame, _ in traceback.walk_stack(sys._getframe(1)):
        if not frame.f_globals["__name__"].startswith("ndreduce"):
            break
        stacklevel += 1
    return stacklevel


def warn(msg: str, category: type = UserWarning) -> None:
    stacklevel = find_last_user_stacklevel()
    warnings.warn(msg, stacklevel=stacklevel, category=category)


T = TypeVar("T")


def tuple_pop(tup: Tuple[T, ...], index: int) -> Tuple[T, ...]:
    return tup[:index] + tup[index + 1 :]


def tuple_replace(tup: Tuple[T, ...], index: int, value: T) -> Tuple[T, ...]:
    return tup[:index] + (value,) + tup[index + 1 :]


def check_axis(axis: int, ndim: int) -> int:
    """
    Validate ``axis`` against an array of rank ``ndim``.

    Negative axes are rejected rather than counted from the end.
    """
    if isinstance(axis, (bool, np.bool_)) or not isinstance(
        axis, (int, np.integer)
    ):
        raise TypeError(
            f"axis must be an integer, got {type(axis).__name__}"
        )
    axis = int(axis)
    if axis < 0 or axis >= ndim:
        raise AxisError(
            f"axis {axis} is out of bounds for array of dimension {ndim}"
        )
    return axis


def as_element_count(count: int, dtype: np.dtype[Any]) -> Scalar:
    """
    Convert a non-negative element count to the element type ``dtype``.

    Raises ``OverflowError`` rather than wrapping or rounding to infinity
    when the count does not fit.
    """
    dtype = np.dtype(dtype).newbyteorder("=")
    if dtype.kind in "iu":
        limit = int(np.iinfo(dtype).max)
        if count > limit:
            raise OverflowError(
                f"count {count} is not representable as {dtype} "
                f"(max {limit})"
            )
    elif dtype.kind in "fc":
        limit = float(np.finfo(dtype).max)
        if count > limit:
            raise OverflowError(
                f"count {count} is not representable as {dtype} "
                f"(max {limit})"
            )
    else:
        raise TypeError(f"cannot convert a count to dtype={dtype}")
    return dtype.type(count)


def divide_by_count(value: Any, count: Scalar) -> Any:
    """
    Divide ``value`` by ``count`` with the element type's own division.

    Integer division rounds toward zero; floating and complex division are
    true division. Arrays are divided in place and returned, so 0-d results
    stay arrays.
    """
    if isinstance(value, np.ndarray):
        if value.dtype.kind in "iu":
            round_up = (np.remainder(value, count) != 0) & (value < 0)
            np.floor_divide(value, count, out=value)
            np.add(value, round_up, out=value)
        else:
            np.true_divide(value, count, out=value)
        return value
    if np.asarray(value).dtype.kind in "iu":
        # floor division rounds negative quotients down
        return value // count + ((value % count != 0) & (value < 0))
    return value / count
