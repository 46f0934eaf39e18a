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

"""rollup bundler backend.

The :class:`RollupCompiler` implements the
:class:`~bundlekit.backends.bundler.ModuleCompiler` protocol by running
``rollup_driver.cjs`` (shipped next to this module) with ``node``. The
driver resolves rollup and its plugins from the workspace's
``node_modules`` and applies a fixed transform chain:

- ``@rollup/plugin-node-resolve``: ``.js .jsx .ts .tsx``, browser field,
  main fields ``module, main, browser``.
- ``@rollup/plugin-commonjs`` for files under ``node_modules``.
- ``@rollup/plugin-babel``: TypeScript and React presets, bundled helpers.
- ``rollup-plugin-postcss``: CSS inlined into the bundle.
- ``@rollup/plugin-json``.
- strip-shebang: drops a leading ``#!`` line.

Every specifier that is not relative or absolute stays external, so
the chunks' imports are the package's install-time dependencies.

``compile`` runs rollup without writing to collect the chunk graph.
``emit`` runs it again with an output file; rollup has no way to hand
a live bundle object across processes.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any

from bundlekit.backends._run import CommandResult, ToolNotFoundError, run_command
from bundlekit.config import DEFAULT_GLOBALS
from bundlekit.errors import E, BuildFailure, ConfigurationError
from bundlekit.graph import INLINED_SPECIFIERS, Chunk, ModuleGraph
from bundlekit.logging import get_logger

log = get_logger('bundlekit.backends.bundler.rollup')

DRIVER_SCRIPT = Path(__file__).with_name('rollup_driver.cjs')

EXTENSIONS: tuple[str, ...] = ('.js', '.jsx', '.ts', '.tsx')


class RollupCompiler:
    """Module compiler backed by rollup.

    Args:
        workspace_root: Workspace root; rollup resolves from its
            ``node_modules`` and runs with it as working directory.
        node: Node.js executable.
        packages_dir: Packages subdirectory, for the babel include glob.
        sourcemap: Whether to write source maps.
        globals: Global names of externals for ``iife``/``umd`` output.
        property_read_side_effects: Tree-shaker property-read assumption.
    """

    def __init__(
        self,
        workspace_root: Path,
        *,
        node: str = 'node',
        packages_dir: str = 'packages',
        sourcemap: bool = True,
        globals: dict[str, str] | None = None,
        property_read_side_effects: bool = False,
    ) -> None:
        """Initialize with the workspace root and bundler options."""
        self._root = workspace_root
        self._node = node
        self._packages_dir = packages_dir
        self._sourcemap = sourcemap
        self._globals = dict(DEFAULT_GLOBALS if globals is None else globals)
        self._property_read_side_effects = property_read_side_effects

    def _request(self, input_path: Path) -> dict[str, Any]:  # noqa: ANN401
        return {
            'cwd': str(self._root),
            'input': str(input_path),
            'packagesRoot': self._packages_dir,
            'extensions': list(EXTENSIONS),
            'inlined': sorted(INLINED_SPECIFIERS),
            'propertyReadSideEffects': self._property_read_side_effects,
            'output': None,
        }

    async def _run_driver(self, package: str, request: dict[str, Any]) -> list[dict[str, Any]]:  # noqa: ANN401
        cmd = [self._node, str(DRIVER_SCRIPT)]
        try:
            result: CommandResult = await asyncio.to_thread(
                run_command,
                cmd,
                cwd=self._root,
                stdin=json.dumps(request),
            )
        except ToolNotFoundError as exc:
            raise ConfigurationError(
                code=E.TOOL_NOT_FOUND,
                message=f'Cannot run {exc.executable}',
                hint="Install Node.js or set 'node' in bundlekit.toml.",
            ) from exc

        for line in result.stderr.splitlines():
            if line.strip():
                log.warning('rollup_warning', package=package, message=line.strip())

        try:
            response = json.loads(result.stdout)
        except json.JSONDecodeError as exc:
            raise BuildFailure(
                package,
                f'rollup driver exited {result.return_code} without a result: {result.stderr.strip()[:500]}',
            ) from exc

        if not result.ok or not response.get('ok'):
            message = response.get('message') or f'rollup driver exited {result.return_code}'
            if response.get('kind') == 'tool':
                raise ConfigurationError(
                    code=E.TOOL_NOT_FOUND,
                    message=f'Cannot load rollup from {self._root}: {message}',
                    hint='Install rollup and its plugins in the workspace root.',
                )
            raise BuildFailure(package, _describe(response, message))
        return response.get('chunks', [])

    async def compile(self, package: str, package_path: Path, entry: str) -> ModuleGraph:
        """Compile ``entry`` and return its chunk graph."""
        input_path = package_path / entry
        if not input_path.is_file():
            raise BuildFailure(
                package,
                f'entry point {entry} does not exist',
                hint='Point "main" in package.json at the source entry module.',
                code=E.BUILD_NO_ENTRY,
            )
        request = self._request(input_path)
        log.info('compile', package=package, entry=entry)
        raw_chunks = await self._run_driver(package, request)
        chunks = tuple(
            Chunk(
                file_name=c.get('fileName', ''),
                is_entry=bool(c.get('isEntry')),
                imports=tuple(c.get('imports', ())),
                dynamic_imports=tuple(c.get('dynamicImports', ())),
            )
            for c in raw_chunks
        )
        return ModuleGraph(package=package, entry=entry, chunks=chunks, handle=request)

    async def emit(self, graph: ModuleGraph, fmt: str, destination: Path) -> None:
        """Write the graph's bundle in ``fmt`` to ``destination``."""
        if not isinstance(graph.handle, dict):
            raise BuildFailure(graph.package, 'module graph was not compiled by rollup')
        request = {
            **graph.handle,
            'output': {
                'file': str(destination),
                'format': fmt,
                'sourcemap': self._sourcemap,
                'freeze': False,
                'globals': self._globals,
            },
        }
        log.debug('emit', package=graph.package, format=fmt, file=str(destination))
        await self._run_driver(graph.package, request)


def _describe(response: dict[str, Any], message: str) -> str:  # noqa: ANN401
    """Prefix the rollup error with its file and position, when known."""
    where = response.get('id') or ''
    loc = response.get('loc') or {}
    if where and loc.get('line') is not None:
        where = f'{where}:{loc["line"]}:{loc.get("column", 0)}'
    return f'{where}: {message}' if where else message


__all__ = [
    'DRIVER_SCRIPT',
    'EXTENSIONS',
    'RollupCompiler',
]
