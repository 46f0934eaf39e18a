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

"""Protocol-based backends for bundlekit.

The JavaScript toolchain is reached only through the Protocol
interfaces defined in the subpackages, so the build can be tested with
fakes and the bundler swapped without touching the orchestrator.

- :class:`ModuleCompiler`: compile and emit bundles (default:
  :class:`RollupCompiler`).
- :class:`DeclarationEmitter`: emit ``.d.ts`` files (default:
  :class:`TscEmitter`).
"""

from bundlekit.backends._run import CommandResult, run_command
from bundlekit.backends.bundler import ModuleCompiler, RollupCompiler
from bundlekit.backends.declarations import DeclarationEmitter, TscEmitter

__all__ = [
    'CommandResult',
    'DeclarationEmitter',
    'ModuleCompiler',
    'RollupCompiler',
    'TscEmitter',
    'run_command',
]
