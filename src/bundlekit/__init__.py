# Copyright 2026 Google LLC
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
# SPDX-License-Identifier: Apache-2.0

"""Build orchestration for JavaScript/TypeScript monorepos.

bundlekit compiles every public workspace package into CommonJS and ES
module bundles, audits the bundles' import edges against the declared
dependencies, emits ``.d.ts`` declarations and derives the manifest that
should be published alongside the built output.
"""

__version__ = '0.1.0'

__all__ = [
    '__version__',
]
