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

"""Type-declaration configuration and diagnostics.

The shared ``tsconfig.json`` is loaded once per run. For each package a
derived config is produced that:

- includes only ``<packages_dir>/<dir>``,
- excludes stories, specs, tests and the usual environment directories,
- emits declarations only, into the output root,
- keeps emitting when there are type errors.

tsc reports diagnostics as ``--pretty false`` lines::

    packages/ui/src/a.ts(12,5): error TS2322: Type 'string' is not ...
    error TS5023: Unknown compiler option 'declarationdir'.

Type errors are reported and never stop the build. Diagnostics about
the configuration itself are fatal.
"""

from __future__ import annotations

import copy
import os
import posixpath
import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import json5

from bundlekit.errors import E, ConfigurationError
from bundlekit.logging import get_logger

logger = get_logger(__name__)

DECLARATION_EXCLUDES: tuple[str, ...] = (
    '**/*.stories.ts',
    '**/*.stories.tsx',
    '**/*.spec.ts',
    '**/*.test.ts',
    '**/*.spec.tsx',
    '**/*.test.tsx',
    '__tests__',
    # TypeScript's own default excludes.
    'node_modules',
    'bower_components',
    'jspm_packages',
    'tmp',
)

# TS5xxx are compiler-option errors; the others are config-file errors
# that tsc reports without a file position.
_CONFIG_DIAGNOSTIC_CODES: frozenset[int] = frozenset({6046, 6053, 18001, 18002, 18003})

_DIAGNOSTIC_RE = re.compile(
    r'^(?:(?P<file>.+?)\((?P<line>\d+),(?P<column>\d+)\): )?'
    r'(?P<category>error|warning|message) TS(?P<code>\d+): (?P<message>.*)$'
)


def forced_compiler_options(output_dir: str) -> dict[str, Any]:  # noqa: ANN401
    """Compiler options applied over whatever the shared config says."""
    return {
        'declarationDir': output_dir,
        'noEmit': False,
        'noEmitOnError': False,
        'declaration': True,
        'emitDeclarationOnly': True,
        'strict': False,
    }


@dataclass(frozen=True)
class TypeScriptConfig:
    """The shared type-checker configuration, with forced options applied.

    Attributes:
        path: Absolute path of the shared ``tsconfig.json``.
        data: Parsed config with forced compiler options applied.
    """

    path: Path
    data: dict[str, Any] = field(default_factory=dict)  # noqa: ANN401

    @property
    def compiler_options(self) -> dict[str, Any]:  # noqa: ANN401
        """The ``compilerOptions`` table."""
        return self.data.get('compilerOptions', {})


def parse_base_config(text: str, path: Path, output_dir: str) -> TypeScriptConfig:
    """Parse shared tsconfig text and force declaration-only options.

    Raises:
        ConfigurationError: If the text is not a JSON object, or its
            ``compilerOptions`` is not one.
    """
    try:
        data = json5.loads(text)
    except ValueError as exc:
        raise ConfigurationError(
            code=E.TSCONFIG_INVALID,
            message=f'Failed to parse {path}: {exc}',
            hint='tsconfig.json may contain comments and trailing commas but must otherwise be JSON.',
        ) from exc
    if not isinstance(data, dict):
        raise ConfigurationError(code=E.TSCONFIG_INVALID, message=f'{path} is not a JSON object')

    options = data.get('compilerOptions', {})
    if not isinstance(options, dict):
        raise ConfigurationError(
            code=E.TSCONFIG_INVALID,
            message=f'"compilerOptions" in {path} must be an object',
        )
    data['compilerOptions'] = {**options, **forced_compiler_options(output_dir)}
    return TypeScriptConfig(path=path, data=data)


def load_base_config(root: Path, tsconfig: str, output_dir: str) -> TypeScriptConfig:
    """Read and parse the shared tsconfig from the workspace root.

    Raises:
        ConfigurationError: If the file is missing, unreadable or malformed.
    """
    path = (root / tsconfig).resolve()
    try:
        text = path.read_text(encoding='utf-8')
    except OSError as exc:
        raise ConfigurationError(
            code=E.TSCONFIG_INVALID,
            message=f'Failed to read {path}: {exc}',
            hint="Set 'tsconfig' in bundlekit.toml if the shared config lives elsewhere.",
        ) from exc
    config = parse_base_config(text, path, output_dir)
    logger.debug('loaded_tsconfig', path=str(path))
    return config


def derive_package_config(
    base: TypeScriptConfig,
    package_path: Path,
) -> dict[str, Any]:  # noqa: ANN401
    """Build the per-package tsconfig data.

    The result is meant to be written next to the shared config, so
    ``include`` is relative to the shared config's directory.
    """
    data = copy.deepcopy(base.data)
    rel = os.path.relpath(package_path, base.path.parent)
    data['include'] = [rel.replace(os.sep, posixpath.sep)]
    data['exclude'] = list(DECLARATION_EXCLUDES)
    # An explicit file list would pull in sources from other packages.
    data.pop('files', None)
    data.pop('references', None)
    return data


@dataclass(frozen=True)
class Diagnostic:
    """One tsc diagnostic.

    Attributes:
        code: Numeric ``TSxxxx`` code.
        message: Diagnostic text, continuation lines joined by newlines.
        category: ``error``, ``warning`` or ``message``.
        file: Source file, or ``None`` for global diagnostics.
        line: 1-based line.
        column: 1-based column.
    """

    code: int
    message: str
    category: str = 'error'
    file: str | None = None
    line: int = 0
    column: int = 0

    def format(self) -> str:
        """Render as ``Error <file> <line>, <column>: <message>``."""
        where = f' {self.file} {self.line}, {self.column}' if self.file else ''
        return f'Error{where}: {self.message}'


def parse_diagnostics(output: str) -> list[Diagnostic]:
    """Parse ``tsc --pretty false`` output into diagnostics.

    Indented lines continue the previous diagnostic's message; other
    unrecognized lines are ignored.
    """
    diagnostics: list[Diagnostic] = []
    for raw in output.splitlines():
        if not raw.strip():
            continue
        match = _DIAGNOSTIC_RE.match(raw)
        if match:
            diagnostics.append(
                Diagnostic(
                    code=int(match['code']),
                    message=match['message'],
                    category=match['category'],
                    file=match['file'],
                    line=int(match['line'] or 0),
                    column=int(match['column'] or 0),
                )
            )
        elif raw[:1].isspace() and diagnostics:
            prev = diagnostics[-1]
            diagnostics[-1] = Diagnostic(
                code=prev.code,
                message=f'{prev.message}\n{raw.strip()}',
                category=prev.category,
                file=prev.file,
                line=prev.line,
                column=prev.column,
            )
    return diagnostics


def is_config_diagnostic(diagnostic: Diagnostic, config_paths: Iterable[Path] = ()) -> bool:
    """Whether a diagnostic means the configuration itself is unusable.

    Compiler-option codes are always fatal, as is anything reported
    against one of ``config_paths``.
    """
    if 5000 <= diagnostic.code < 6000 or diagnostic.code in _CONFIG_DIAGNOSTIC_CODES:
        return True
    if diagnostic.file:
        return Path(diagnostic.file).name in {p.name for p in config_paths}
    return False


@dataclass(frozen=True)
class DeclarationReport:
    """What happened when declarations were emitted for one package.

    Attributes:
        package: Directory name of the package.
        diagnostics: Every diagnostic, pre-emit and emit, in tsc order.
    """

    package: str
    diagnostics: tuple[Diagnostic, ...] = ()

    @property
    def clean(self) -> bool:
        """Whether tsc reported nothing."""
        return not self.diagnostics


__all__ = [
    'DECLARATION_EXCLUDES',
    'DeclarationReport',
    'Diagnostic',
    'TypeScriptConfig',
    'derive_package_config',
    'forced_compiler_options',
    'is_config_diagnostic',
    'load_base_config',
    'parse_base_config',
    'parse_diagnostics',
]
