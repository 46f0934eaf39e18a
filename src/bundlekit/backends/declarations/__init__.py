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

"""Declaration emitter protocol for bundlekit.

The :class:`DeclarationEmitter` protocol is the type-checker seam.
Implementations:

- :class:`~bundlekit.backends.declarations.tsc.TscEmitter`: the
  TypeScript compiler CLI.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable

from bundlekit.backends.declarations.tsc import TscEmitter as TscEmitter
from bundlekit.declarations import DeclarationReport, TypeScriptConfig

__all__ = [
    'DeclarationEmitter',
    'TscEmitter',
]


@runtime_checkable
class DeclarationEmitter(Protocol):
    """Protocol for emitting ``.d.ts`` files for one package."""

    async def emit_declarations(
        self,
        package: str,
        package_path: Path,
        base: TypeScriptConfig,
    ) -> DeclarationReport:
        """Type-check a package and emit its declarations.

        Type errors do not stop emission; they come back in the report.

        Args:
            package: Directory name of the package.
            package_path: Absolute path of the package directory.
            base: The shared type-checker config.

        Raises:
            ConfigurationError: If the derived configuration is rejected.
        """
        ...
