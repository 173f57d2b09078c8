# Copyright 2022-2023 NVIDIA Corporation
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

from typing import Any

import numpy as np

from .config import KIND_CAPABILITIES, OPERATION_REQUIREMENTS, Capability
from .utils import is_supported_type

_SINGLE_CAPABILITIES = (
    Capability.ZERO,
    Capability.ONE,
    Capability.ADD,
    Capability.SUB,
    Capability.MUL,
    Capability.DIV,
    Capability.ORDER,
    Capability.SQRT,
    Capability.FROM_COUNT,
)


def provided_capabilities(dtype: Any) -> Capability:
    return KIND_CAPABILITIES.get(np.dtype(dtype).kind, Capability(0))


def missing_capabilities(op_name: str, dtype: Any) -> list[str]:
    required = OPERATION_REQUIREMENTS[op_name]
    provided = provided_capabilities(dtype)
    return [
        cap.name or str(int(cap))
        for cap in _SINGLE_CAPABILITIES
        if (cap & required) and not (cap & provided)
    ]


def check_capabilities(op_name: str, dtype: Any) -> None:
    """
    Raise a TypeError if the element type ``dtype`` lacks any of the
    operations ``op_name`` needs, e.g. ``var`` on integers (no square root)
    or ``sum`` on booleans (no addition).
    """
    assert op_name in OPERATION_REQUIREMENTS

    if not is_supported_type(dtype):
        raise TypeError(f"ndreduce does not support dtype={np.dtype(dtype)}")

    missing = missing_capabilities(op_name, dtype)
    if missing:
        raise TypeError(
            f"{op_name} is not supported for dtype={np.dtype(dtype)}: "
            f"missing {', '.join(missing)}"
        )
