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

"""TypeScript compiler backend.

The :class:`TscEmitter` implements the
:class:`~bundlekit.backends.declarations.DeclarationEmitter` protocol by
writing the derived per-package config next to the shared one and
running::

    tsc -p tsconfig.bundlekit-<dir>.json --pretty false

The temporary config is removed afterwards whatever the outcome.

tsc exit statuses:

- ``0``: no diagnostics.
- ``1`` / ``2``: diagnostics were reported; with ``noEmitOnError``
  forced off, declarations were still emitted.
- anything else: tsc itself failed.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

from bundlekit.backends._io import write_json
from bundlekit.backends._run import ToolNotFoundError, run_command
from bundlekit.declarations import (
    DeclarationReport,
    TypeScriptConfig,
    derive_package_config,
    is_config_diagnostic,
    parse_diagnostics,
)
from bundlekit.errors import E, BuildFailure, ConfigurationError
from bundlekit.logging import get_logger

log = get_logger('bundlekit.backends.declarations.tsc')

# Exit statuses after which declarations were emitted.
_EMITTED_STATUSES: frozenset[int] = frozenset({0, 1, 2})


class TscEmitter:
    """Declaration emitter backed by the ``tsc`` CLI.

    Args:
        workspace_root: Workspace root; tsc runs with it as working
            directory.
        tsc: TypeScript compiler executable, absolute or relative to the
            workspace root.
    """

    def __init__(self, workspace_root: Path, *, tsc: str = 'node_modules/.bin/tsc') -> None:
        """Initialize with the workspace root and tsc executable."""
        self._root = workspace_root
        candidate = workspace_root / tsc
        self._tsc = str(candidate) if candidate.exists() else tsc

    async def emit_declarations(
        self,
        package: str,
        package_path: Path,
        base: TypeScriptConfig,
    ) -> DeclarationReport:
        """Emit declarations for one package and collect its diagnostics."""
        derived = derive_package_config(base, package_path)
        config_path = base.path.parent / f'tsconfig.bundlekit-{package}.json'
        await write_json(config_path, derived)

        cmd = [self._tsc, '-p', str(config_path), '--pretty', 'false']
        log.info('emit_declarations', package=package)
        try:
            result = await asyncio.to_thread(run_command, cmd, cwd=self._root)
        except ToolNotFoundError as exc:
            raise ConfigurationError(
                code=E.TOOL_NOT_FOUND,
                message=f'Cannot run {exc.executable}',
                hint="Install typescript in the workspace root or set 'tsc' in bundlekit.toml.",
            ) from exc
        finally:
            config_path.unlink(missing_ok=True)

        diagnostics = parse_diagnostics(result.stdout + '\n' + result.stderr)
        fatal = [d for d in diagnostics if is_config_diagnostic(d, (config_path, base.path))]
        if fatal:
            raise ConfigurationError(
                code=E.TSCONFIG_INVALID,
                message='\n'.join(d.format() for d in fatal),
                hint=f'The shared config at {base.path} is not usable for declaration output.',
            )
        if result.return_code not in _EMITTED_STATUSES:
            raise BuildFailure(
                package,
                f'tsc exited {result.return_code}: {result.stderr.strip()[:500]}',
            )

        for diagnostic in diagnostics:
            log.warning('tsc_diagnostic', package=package, diagnostic=diagnostic.format())
        return DeclarationReport(package=package, diagnostics=tuple(diagnostics))


__all__ = [
    'TscEmitter',
]
