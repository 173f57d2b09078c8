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
ndreduce
========

Layout-aware reductions and moments over strided n-dimensional NumPy
arrays: sums, products, means, Welford variances and standard deviations,
cumulative products and forward differences.

:meta private:
"""
from __future__ import annotations

from ndreduce.fold import unrolled_fold
from ndreduce.module import *

__version__ = "0.1.0"
