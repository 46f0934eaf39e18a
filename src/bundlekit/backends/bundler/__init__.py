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

"""Module compiler protocol for bundlekit.

The :class:`ModuleCompiler` protocol is the bundler seam: it compiles a
package's entry module into a :class:`~bundlekit.graph.ModuleGraph` and
writes that graph out in a given module format. Implementations:

- :class:`~bundlekit.backends.bundler.rollup.RollupCompiler`: rollup,
  driven through a small Node.js script.

Tests use the ``FakeCompiler`` in ``tests/_fakes``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable

from bundlekit.backends.bundler.rollup import RollupCompiler as RollupCompiler
from bundlekit.graph import ModuleGraph

__all__ = [
    'ModuleCompiler',
    'RollupCompiler',
]


@runtime_checkable
class ModuleCompiler(Protocol):
    """Protocol for compiling and emitting one package's bundle.

    Both methods are async; implementations run the bundler in a worker
    thread so the event loop is never blocked.
    """

    async def compile(self, package: str, package_path: Path, entry: str) -> ModuleGraph:
        """Compile a package's entry module.

        Args:
            package: Directory name of the package, for error reporting.
            package_path: Absolute path of the package directory.
            entry: Entry module, relative to ``package_path``.

        Raises:
            BuildFailure: On syntax errors or unresolvable relative imports.
            ConfigurationError: If the bundler itself cannot be run.
        """
        ...

    async def emit(self, graph: ModuleGraph, fmt: str, destination: Path) -> None:
        """Write ``graph`` as a ``fmt`` bundle to ``destination``.

        Args:
            graph: A graph returned by :meth:`compile` on this compiler.
            fmt: Output module format (``cjs``, ``es``, ...).
            destination: Output file path; source maps go next to it.

        Raises:
            BuildFailure: If writing the bundle fails.
        """
        ...
