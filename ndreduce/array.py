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

from functools import wraps
from inspect import signature
from typing import TYPE_CHECKING, Any, Callable, TypeVar

import numpy as np
from typing_extensions import ParamSpec

if TYPE_CHECKING:
    import numpy.typing as npt

R = TypeVar("R")
P = ParamSpec("P")


def add_boilerplate(
    *array_params: str,
) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """
    Adds required boilerplate to the wrapped module-level function.

    Every time the wrapped function is called, this wrapper will convert all
    specified array-like parameters to numpy ndarrays. Existing ndarrays are
    never copied, so views keep their strides.
    """
    keys = set(array_params)
    assert len(keys) == len(array_params)

    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        assert not hasattr(
            func, "__wrapped__"
        ), "this decorator must be the innermost"

        # For each parameter specified by name, also consider the case where
        # it's passed as a positional parameter.
        params = signature(func).parameters
        extra = keys - set(params)
        assert len(extra) == 0, f"unknown parameter(s): {extra}"
        indices = {idx for idx, param in enumerate(params) if param in keys}

        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> R:
            args = tuple(
                convert_to_ndarray(arg)
                if idx in indices and arg is not None
                else arg
                for (idx, arg) in enumerate(args)
            )
            for k, v in kwargs.items():
                if v is not None and k in keys:
                    kwargs[k] = convert_to_ndarray(v)

            return func(*args, **kwargs)

        return wrapper

    return decorator


def convert_to_ndarray(obj: Any) -> npt.NDArray[Any]:
    # If this is already a base-class ndarray then we're done
    if type(obj) is np.ndarray:
        return obj
    # Subclasses such as np.matrix come back as base-class views with the
    # same strides
    return np.asarray(obj)
