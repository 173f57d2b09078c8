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

import operator
from typing import TYPE_CHECKING, Any, Optional

import numpy as np

from ._capability_utils import check_capabilities
from .array import add_boilerplate
from .config import ReductionCode, reduction_identity, reduction_ufunc
from .fold import unrolled_fold
from .layout import (
    accumulate_axis_inplace,
    axis_iter,
    lanes,
    memory_order_view,
    min_stride_axis,
    row_slice,
    rows,
    slice_axis,
)
from .utils import (
    as_element_count,
    check_axis,
    divide_by_count,
    tuple_pop,
    tuple_replace,
    warn,
)

if TYPE_CHECKING:
    import numpy.typing as npt

    from .types import DdofLike, NdShape, Scalar

__all__ = (
    "cumprod",
    "diff",
    "mean",
    "mean_axis",
    "product",
    "product_axis",
    "std",
    "std_axis",
    "sum",
    "sum_axis",
    "var",
    "var_axis",
)


# Traversal helpers


def _left_fold(row: npt.NDArray[Any], code: ReductionCode) -> Scalar:
    op = reduction_ufunc(code)
    acc = reduction_identity(code, row.dtype)()
    for x in row:
        acc = op(acc, x)
    return acc


def _reduce(
    a: npt.NDArray[Any], code: ReductionCode, fast_paths: bool = True
) -> Scalar:
    op = reduction_ufunc(code)
    identity = reduction_identity(code, a.dtype)

    if fast_paths:
        flat = memory_order_view(a)
        if flat is not None:
            return unrolled_fold(flat, identity, op)

    acc = identity()
    for row in rows(a):
        dense = row_slice(row) if fast_paths else None
        if dense is not None:
            acc = op(acc, unrolled_fold(dense, identity, op))
        else:
            acc = op(acc, _left_fold(row, code))
    return acc


def _reduce_axis(
    a: npt.NDArray[Any],
    axis: int,
    code: ReductionCode,
    fast_paths: bool = True,
) -> npt.NDArray[Any]:
    out_shape: NdShape = tuple_pop(a.shape, axis)

    # Lanes along the most tightly packed axis are (nearly) contiguous, so
    # each one can be folded on its own
    if fast_paths and axis == min_stride_axis(a):
        out = np.empty(out_shape, dtype=a.dtype)
        for index, lane in lanes(a, axis):
            out[index] = _reduce(lane, code)
        return out

    op = reduction_ufunc(code)
    out = np.full(out_shape, reduction_identity(code, a.dtype)(), a.dtype)
    for subview in axis_iter(a, axis):
        op(out, subview, out=out)
    return out


def _degrees_of_freedom(
    n_items: int, ddof: DdofLike, dtype: np.dtype[Any]
) -> Scalar:
    n = as_element_count(n_items, dtype)
    try:
        ddof = dtype.type(ddof)
    except OverflowError as e:
        raise ValueError(f"ddof={ddof!r} is out of range for {dtype}") from e
    except (TypeError, ValueError) as e:
        raise TypeError(
            f"ddof must be convertible to {dtype}, got {ddof!r}"
        ) from e
    if not (0 <= ddof <= n):
        raise ValueError(
            "`ddof` must not be less than zero or greater than the length "
            f"of the axis (ddof={ddof}, length={n_items})"
        )
    return n - ddof


def _normalize(sum_sq: Any, dof: Scalar) -> Any:
    if dof == 0:
        warn("Degrees of freedom <= 0 for slice", category=RuntimeWarning)
    with np.errstate(divide="ignore", invalid="ignore"):
        if isinstance(sum_sq, np.ndarray):
            return np.true_divide(sum_sq, dof, out=sum_sq)
        return sum_sq / dof


def _var(a: npt.NDArray[Any], ddof: DdofLike) -> Scalar:
    dof = _degrees_of_freedom(a.size, ddof, a.dtype)
    scalar_type = a.dtype.type
    mean = scalar_type(0)
    sum_sq = scalar_type(0)
    # a.flat walks the logical (C) order whatever the memory layout
    for i, x in enumerate(a.flat, start=1):
        count = scalar_type(i)
        delta = x - mean
        mean = mean + delta / count
        sum_sq = (x - mean) * delta + sum_sq
    return _normalize(sum_sq, dof)


def _var_axis(
    a: npt.NDArray[Any], axis: int, ddof: DdofLike
) -> npt.NDArray[Any]:
    dof = _degrees_of_freedom(a.shape[axis], ddof, a.dtype)
    out_shape: NdShape = tuple_pop(a.shape, axis)
    mean = np.zeros(out_shape, dtype=a.dtype)
    sum_sq = np.zeros(out_shape, dtype=a.dtype)
    scalar_type = a.dtype.type
    for i, subview in enumerate(axis_iter(a, axis), start=1):
        count = scalar_type(i)
        delta = subview - mean
        mean += delta / count
        sum_sq += (subview - mean) * delta
    return _normalize(sum_sq, dof)


# Sums, products, differences


@add_boilerplate("a")
def sum(a: npt.NDArray[Any]) -> Scalar:
    """
    Sum of all elements of an array.

    Parameters
    ----------
    a : array_like
        Elements to sum.

    Returns
    -------
    sum : scalar
        The sum, in the element type of `a`. Zero if `a` is empty.

    Raises
    ------
    TypeError
        If the element type has no addition, e.g. booleans.

    See Also
    --------
    numpy.sum

    Notes
    -----
    If the whole array occupies a single dense run of memory it is folded in
    memory order. Otherwise it is folded row by row, each dense row taking
    the same unrolled fold. The grouping of partial sums depends on the
    layout, so floating-point results may differ in the last bits between
    layouts.
    """
    check_capabilities("sum", a.dtype)
    return _reduce(a, ReductionCode.SUM)


@add_boilerplate("a")
def product(a: npt.NDArray[Any]) -> Scalar:
    """
    Product of all elements of an array.

    Parameters
    ----------
    a : array_like
        Input data.

    Returns
    -------
    product : scalar
        The product, in the element type of `a`. One if `a` is empty.

    See Also
    --------
    numpy.prod
    """
    check_capabilities("product", a.dtype)
    return _reduce(a, ReductionCode.PROD)


@add_boilerplate("a")
def sum_axis(a: npt.NDArray[Any], axis: int) -> npt.NDArray[Any]:
    """
    Sum of array elements along `axis`.

    Parameters
    ----------
    a : array_like
        Elements to sum.
    axis : int
        Axis along which the sum is taken, in ``[0, a.ndim)``.

    Returns
    -------
    sum_along_axis : ndarray
        A new array shaped like `a` with `axis` removed. A 1-D input gives a
        0-d array.

    Raises
    ------
    AxisError
        If `axis` is negative or not smaller than ``a.ndim``.

    See Also
    --------
    numpy.sum

    Notes
    -----
    When `axis` is the axis with the smallest stride every 1-D lane along
    it is summed separately. Otherwise the sub-arrays along `axis` are
    added elementwise into an accumulator.
    """
    axis = check_axis(axis, a.ndim)
    check_capabilities("sum_axis", a.dtype)
    return _reduce_axis(a, axis, ReductionCode.SUM)


@add_boilerplate("a")
def product_axis(a: npt.NDArray[Any], axis: int) -> npt.NDArray[Any]:
    """
    Product of array elements along `axis`.

    The product along an axis of length zero is one.

    Parameters
    ----------
    a : array_like
        Input data.
    axis : int
        Axis along which the product is taken, in ``[0, a.ndim)``.

    Returns
    -------
    product_along_axis : ndarray
        A new array shaped like `a` with `axis` removed.

    Raises
    ------
    AxisError
        If `axis` is out of bounds.

    See Also
    --------
    numpy.prod
    """
    axis = check_axis(axis, a.ndim)
    check_capabilities("product_axis", a.dtype)
    return _reduce_axis(a, axis, ReductionCode.PROD)


@add_boilerplate("a")
def cumprod(a: npt.NDArray[Any], axis: int) -> npt.NDArray[Any]:
    """
    Return the cumulative product of the elements along a given axis.

    For every lane along `axis`, ``out[0] = a[0]`` and
    ``out[k] = out[k - 1] * a[k]``.

    Parameters
    ----------
    a : array_like
        Input array.
    axis : int
        Axis along which the cumulative product is computed.

    Returns
    -------
    cumprod : ndarray
        A new array with the same shape and dtype as `a`.

    Raises
    ------
    AxisError
        If `axis` is out of bounds.

    See Also
    --------
    numpy.cumprod
    """
    axis = check_axis(axis, a.ndim)
    check_capabilities("cumprod", a.dtype)
    result = a.copy()
    accumulate_axis_inplace(
        result, axis, reduction_ufunc(ReductionCode.PROD)
    )
    return result


@add_boilerplate("a")
def diff(a: npt.NDArray[Any], n: int = 1, axis: int = 0) -> npt.NDArray[Any]:
    """
    Calculate the n-th forward difference along the given axis.

    The first difference is given by ``out[i] = a[i+1] - a[i]`` along
    the given axis, higher differences are calculated by applying the same
    operation repeatedly.

    Parameters
    ----------
    a : array_like
        Input array
    n : int, optional
        The number of times values are differenced. If zero, a copy of the
        input is returned.
    axis : int, optional
        The axis along which the difference is taken, default is the
        first axis.

    Returns
    -------
    diff : ndarray
        The n-th differences. The shape of the output is the same as `a`
        except along `axis` where the dimension is smaller by `n`. The
        dtype is that of `a`; unsigned integers wrap around.

    Raises
    ------
    AxisError
        If `axis` is out of bounds.
    ValueError
        If `n` is negative, or if `n` is not smaller than the length of
        `a` along `axis`.

    See Also
    --------
    numpy.diff
    """
    axis = check_axis(axis, a.ndim)
    check_capabilities("diff", a.dtype)
    n = operator.index(n)
    if n < 0:
        raise ValueError("order must be non-negative but got " + repr(n))
    if n == 0:
        return a.copy()

    length = a.shape[axis]
    if n >= length:
        raise ValueError(
            f"diff of order {n} needs at least {n + 1} elements along "
            f"axis {axis}, but the array has {length}"
        )

    current = a.copy()
    scratch = np.zeros(tuple_replace(a.shape, axis, length - 1), a.dtype)
    for _ in range(n):
        head = slice_axis(current, axis, slice(None, -1))
        tail = slice_axis(current, axis, slice(1, None))
        np.subtract(tail, head, out=scratch)

        # the result feeds the next round; the old input becomes scratch
        # space, which needs two fewer elements than it holds
        current, scratch = scratch, current
        scratch = slice_axis(scratch, axis, slice(None, -2))
    return current


# Statistics


@add_boilerplate("a")
def mean(a: npt.NDArray[Any]) -> Optional[Scalar]:
    """
    Arithmetic mean of all elements of an array.

    Parameters
    ----------
    a : array_like
        Input data.

    Returns
    -------
    mean : scalar or None
        ``sum(a) / a.size`` in the element type of `a`, or None if `a` has
        no elements. Integer means round toward zero.

    Raises
    ------
    OverflowError
        If the element count is not representable in the element type.

    See Also
    --------
    numpy.mean
    """
    check_capabilities("mean", a.dtype)
    if a.size == 0:
        return None
    count = as_element_count(a.size, a.dtype)
    return divide_by_count(_reduce(a, ReductionCode.SUM), count)


@add_boilerplate("a")
def mean_axis(a: npt.NDArray[Any], axis: int) -> Optional[npt.NDArray[Any]]:
    """
    Arithmetic mean along `axis`.

    Parameters
    ----------
    a : array_like
        Input data.
    axis : int
        Axis along which the means are computed.

    Returns
    -------
    mean_along_axis : ndarray or None
        A new array shaped like `a` with `axis` removed, or None if `a` has
        length zero along `axis`.

    Raises
    ------
    AxisError
        If `axis` is out of bounds.
    OverflowError
        If the axis length is not representable in the element type.

    See Also
    --------
    numpy.mean
    """
    axis = check_axis(axis, a.ndim)
    check_capabilities("mean_axis", a.dtype)
    length = a.shape[axis]
    if length == 0:
        return None
    count = as_element_count(length, a.dtype)
    return divide_by_count(_reduce_axis(a, axis, ReductionCode.SUM), count)


@add_boilerplate("a")
def var(a: npt.NDArray[Any], ddof: DdofLike = 0) -> Scalar:
    """
    Compute the variance of all elements of an array.

    The variance is computed in a single pass with Welford's algorithm,
    visiting the elements in C order:

    .. code-block:: none

        delta = x - mean
        mean += delta / i
        sum_sq += (x - mean) * delta

    and finally ``variance = sum_sq / (n - ddof)``.

    Parameters
    ----------
    a : array_like
        Array of floating-point numbers.
    ddof : scalar, optional
        "Delta Degrees of Freedom": the divisor used in the calculation is
        ``n - ddof``, where ``n`` is the number of elements. Use 0 for the
        population variance and 1 for the sample variance.

    Returns
    -------
    variance : scalar
        In the element type of `a`. If ``ddof == n`` the division is by zero
        and a ``RuntimeWarning`` is issued.

    Raises
    ------
    TypeError
        If `a` does not hold real floating-point numbers.
    ValueError
        If `ddof` is less than zero or greater than ``n``.

    See Also
    --------
    numpy.var
    """
    check_capabilities("var", a.dtype)
    return _var(a, ddof)


@add_boilerplate("a")
def std(a: npt.NDArray[Any], ddof: DdofLike = 0) -> Scalar:
    """
    Compute the standard deviation of all elements of an array.

    This is the square root of :func:`var` with the same `ddof`.

    See Also
    --------
    var, numpy.std
    """
    check_capabilities("std", a.dtype)
    with np.errstate(invalid="ignore"):
        return np.sqrt(_var(a, ddof))


@add_boilerplate("a")
def var_axis(
    a: npt.NDArray[Any], axis: int, ddof: DdofLike = 0
) -> npt.NDArray[Any]:
    """
    Compute the variance along `axis`.

    Runs the Welford update of :func:`var` elementwise for every position of
    the result, visiting the sub-arrays along `axis` once in index order.

    Parameters
    ----------
    a : array_like
        Array of floating-point numbers.
    axis : int
        Axis along which the variance is computed.
    ddof : scalar, optional
        "Delta Degrees of Freedom": the divisor is ``n - ddof`` where ``n``
        is the length of `axis`.

    Returns
    -------
    variance : ndarray
        A new array shaped like `a` with `axis` removed.

    Raises
    ------
    AxisError
        If `axis` is out of bounds.
    ValueError
        If `ddof` is less than zero or greater than the length of `axis`.

    See Also
    --------
    numpy.var
    """
    axis = check_axis(axis, a.ndim)
    check_capabilities("var_axis", a.dtype)
    return _var_axis(a, axis, ddof)


@add_boilerplate("a")
def std_axis(
    a: npt.NDArray[Any], axis: int, ddof: DdofLike = 0
) -> npt.NDArray[Any]:
    """
    Compute the standard deviation along `axis`.

    This is the elementwise square root of :func:`var_axis`.

    See Also
    --------
    var_axis, numpy.std
    """
    axis = check_axis(axis, a.ndim)
    check_capabilities("std_axis", a.dtype)
    variance = _var_axis(a, axis, ddof)
    with np.errstate(invalid="ignore"):
        return np.sqrt(variance, out=variance)
