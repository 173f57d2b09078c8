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

from enum import IntEnum, IntFlag, unique
from typing import TYPE_CHECKING, Any, Callable

import numpy as np

if TYPE_CHECKING:
    from .types import Scalar


# Number of partial accumulators kept by the unrolled fold
UNROLL_WIDTH = 8


# Match these to the element-type operations each reduction relies on
class Capability(IntFlag):
    ZERO = 1 << 0
    ONE = 1 << 1
    ADD = 1 << 2
    SUB = 1 << 3
    MUL = 1 << 4
    DIV = 1 << 5
    ORDER = 1 << 6
    SQRT = 1 << 7
    FROM_COUNT = 1 << 8

    ARITHMETIC = ZERO | ONE | ADD | SUB | MUL | DIV | FROM_COUNT
    FLOAT = ARITHMETIC | ORDER | SQRT


# Capabilities provided by each numpy dtype kind
KIND_CAPABILITIES: dict[str, Capability] = {
    "b": Capability(0),
    "i": Capability.ARITHMETIC | Capability.ORDER,
    "u": Capability.ARITHMETIC | Capability.ORDER,
    "f": Capability.FLOAT,
    "c": Capability.ARITHMETIC,
}


# Capabilities required by each public operation
OPERATION_REQUIREMENTS: dict[str, Capability] = {
    "sum": Capability.ZERO | Capability.ADD,
    "sum_axis": Capability.ZERO | Capability.ADD,
    "product": Capability.ONE | Capability.MUL,
    "product_axis": Capability.ONE | Capability.MUL,
    "cumprod": Capability.ONE | Capability.MUL,
    "mean": Capability.ZERO
    | Capability.ADD
    | Capability.DIV
    | Capability.FROM_COUNT,
    "mean_axis": Capability.ZERO
    | Capability.ADD
    | Capability.DIV
    | Capability.FROM_COUNT,
    "diff": Capability.ZERO | Capability.SUB,
    "var": Capability.FLOAT,
    "std": Capability.FLOAT,
    "var_axis": Capability.FLOAT,
    "std_axis": Capability.FLOAT,
}


@unique
class ReductionCode(IntEnum):
    SUM = 1
    PROD = 2


_REDUCTION_UFUNCS: dict[ReductionCode, np.ufunc] = {
    ReductionCode.SUM: np.add,
    ReductionCode.PROD: np.multiply,
}

_REDUCTION_IDENTITIES: dict[ReductionCode, int] = {
    ReductionCode.SUM: 0,
    ReductionCode.PROD: 1,
}


def reduction_ufunc(code: ReductionCode) -> np.ufunc:
    return _REDUCTION_UFUNCS[code]


def reduction_identity(
    code: ReductionCode, dtype: np.dtype[Any]
) -> Callable[[], Scalar]:
    """
    Return a producer of the identity element of ``code`` in ``dtype``.
    """
    value = _REDUCTION_IDENTITIES[code]
    scalar_type = np.dtype(dtype).type

    def identity() -> Scalar:
        return scalar_type(value)

    return identity
