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

from typing import TYPE_CHECKING, Any, Callable

import numpy as np

from .config import UNROLL_WIDTH

if TYPE_CHECKING:
    import numpy.typing as npt

    from .types import Scalar


def unrolled_fold(
    xs: npt.NDArray[Any],
    init: Callable[[], Scalar],
    op: np.ufunc,
    width: int = UNROLL_WIDTH,
) -> Scalar:
    """
    Fold a dense 1-D run of elements with the binary ufunc ``op``.

    Parameters
    ----------
    xs : ndarray
        One-dimensional input, ideally a contiguous view.
    init : callable
        Producer of the identity element of ``op`` in the element type.
    op : ufunc
        Associative binary operation, e.g. ``numpy.add``.
    width : int, optional
        Number of independent partial accumulators. Defaults to
        ``UNROLL_WIDTH`` (8).

    Returns
    -------
    result : scalar
        The fold of ``xs``; ``init()`` if ``xs`` is empty.

    Notes
    -----
    Elements are accumulated into ``width`` interleaved partial results that
    are combined at the end, so the grouping differs from a strict left fold.
    Floating-point results are therefore equal to those of a left fold only
    up to rounding; bit-exact agreement is not guaranteed.
    """
    if xs.ndim != 1:
        raise ValueError(f"expected a 1-D array, got ndim={xs.ndim}")
    if width < 1:
        raise ValueError(f"width must be positive, got {width}")

    acc = init()
    n_blocks = xs.shape[0] // width
    if n_blocks > 0:
        partial = np.full(width, init(), dtype=xs.dtype)
        for block in xs[: n_blocks * width].reshape(n_blocks, width):
            op(partial, block, out=partial)
        half = width // 2
        for i in range(half):
            acc = op(acc, op(partial[i], partial[i + half]))
        if width % 2:
            acc = op(acc, partial[-1])

    for x in xs[n_blocks * width :]:
        acc = op(acc, x)
    return acc
