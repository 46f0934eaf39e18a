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

"""Configuration reader for bundlekit.

Reads ``bundlekit.toml`` from the workspace root and returns a validated
:class:`BuildConfig`. A workspace without the file builds with defaults.

Validation Pipeline::

    bundlekit.toml
    ┌──────────────────┐
    │ outptu_dir = ... │  ← typo!
    └────────┬─────────┘
             │
             ▼
    ┌──────────────────┐     ┌──────────────────────────────┐
    │ 1. Unknown key   │────→│ BK-CONFIG-INVALID-KEY:       │
    │    detection     │     │ hint: "Did you mean          │
    └────────┬─────────┘     │       'output_dir'?"         │
             │               └──────────────────────────────┘
             ▼
    ┌──────────────────┐     ┌──────────────────────────────┐
    │ 2. Type check    │────→│ BK-CONFIG-INVALID-VALUE:     │
    │    each value    │     │ 'formats' must be list       │
    └────────┬─────────┘     └──────────────────────────────┘
             │
             ▼
    ┌──────────────────┐     ┌──────────────────────────────┐
    │ 3. Value check   │────→│ BK-CONFIG-INVALID-VALUE:     │
    │    (formats etc.)│     │ formats must include 'cjs'   │
    └────────┬─────────┘     └──────────────────────────────┘
             │
             ▼
    ┌──────────────────┐
    │ BuildConfig()    │  ← frozen dataclass, ready to use
    └──────────────────┘

Supported keys in ``bundlekit.toml``::

    packages_dir               = "packages"
    output_dir                 = "dist"
    exclude                    = ["eslint-config-app", "site"]
    tsconfig                   = "tsconfig.json"
    formats                    = ["cjs", "es"]
    sourcemap                  = true
    declarations               = true
    fail_fast                  = false
    clean                      = true
    property_read_side_effects = false
    node                       = "node"
    tsc                        = "node_modules/.bin/tsc"
    globals                    = { react = "React" }
"""

from __future__ import annotations

import difflib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import tomlkit
import tomlkit.exceptions

from bundlekit.errors import E, ConfigurationError
from bundlekit.logging import get_logger

logger = get_logger(__name__)

CONFIG_FILENAME = 'bundlekit.toml'

# Module formats rollup can write. ``cjs`` feeds ``main`` and ``es``
# feeds ``module`` in the publish manifest, so both are mandatory.
ALLOWED_FORMATS: frozenset[str] = frozenset({'amd', 'cjs', 'es', 'iife', 'system', 'umd'})
REQUIRED_FORMATS: tuple[str, ...] = ('cjs', 'es')

DEFAULT_GLOBALS: dict[str, str] = {
    'react': 'React',
    'react-native': 'ReactNative',
}

_TYPE_MAP: dict[str, type | tuple[type, ...]] = {
    'packages_dir': str,
    'output_dir': str,
    'exclude': list,
    'tsconfig': str,
    'formats': list,
    'sourcemap': bool,
    'declarations': bool,
    'fail_fast': bool,
    'clean': bool,
    'property_read_side_effects': bool,
    'node': str,
    'tsc': str,
    'globals': dict,
}

VALID_KEYS: frozenset[str] = frozenset(_TYPE_MAP)


@dataclass(frozen=True)
class BuildConfig:
    """Validated configuration for a bundlekit run.

    Attributes:
        packages_dir: Subdirectory of the workspace root holding one
            directory per candidate package.
        output_dir: Output root, relative to the workspace root. Bundles
            land in ``<output_dir>/<package dir>/``.
        exclude: Package directory names that are never built (tooling
            and meta packages).
        tsconfig: Shared TypeScript config, relative to the workspace root.
        formats: Output formats written for every package.
        sourcemap: Whether bundles get source maps.
        declarations: Whether ``.d.ts`` files are emitted.
        fail_fast: Abort the run at the first failing package instead
            of moving on to the next one.
        clean: Delete the output root before building.
        property_read_side_effects: Whether the tree-shaker treats
            property reads on plain objects as side effects.
        node: Node.js executable used to run the bundler driver.
        tsc: TypeScript compiler executable.
        globals: Global variable names for externals in non-module formats.
        config_path: Path of the loaded ``bundlekit.toml``, if any.
    """

    packages_dir: str = 'packages'
    output_dir: str = 'dist'
    exclude: list[str] = field(default_factory=list)
    tsconfig: str = 'tsconfig.json'
    formats: list[str] = field(default_factory=lambda: list(REQUIRED_FORMATS))
    sourcemap: bool = True
    declarations: bool = True
    fail_fast: bool = False
    clean: bool = True
    property_read_side_effects: bool = False
    node: str = 'node'
    tsc: str = 'node_modules/.bin/tsc'
    globals: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_GLOBALS))
    config_path: Path | None = None


def _validate_value_type(key: str, value: Any) -> None:  # noqa: ANN401 - dynamic config values
    """Raise if a config value has the wrong type."""
    expected = _TYPE_MAP[key]
    if not isinstance(value, expected):
        type_name = expected.__name__ if isinstance(expected, type) else str(expected)
        raise ConfigurationError(
            code=E.CONFIG_INVALID_VALUE,
            message=f"'{key}' must be {type_name}, got {type(value).__name__}",
            hint=f'Check the value of {key} in {CONFIG_FILENAME}.',
        )


def _validate_string_list(key: str, items: list[object]) -> list[str]:
    """Raise if any item in a list is not a string."""
    for item in items:
        if not isinstance(item, str):
            raise ConfigurationError(
                code=E.CONFIG_INVALID_VALUE,
                message=f"'{key}' items must be strings, got {type(item).__name__}: {item!r}",
                hint=f'Each {key} entry should be a string in {CONFIG_FILENAME}.',
            )
    return [str(item) for item in items]


def _validate_formats(formats: list[str]) -> list[str]:
    """Raise if formats has unknown entries or lacks a required one."""
    unknown = sorted(set(formats) - ALLOWED_FORMATS)
    if unknown:
        raise ConfigurationError(
            code=E.CONFIG_INVALID_VALUE,
            message=f'Unknown output formats {unknown}; allowed: {sorted(ALLOWED_FORMATS)}',
        )
    for required in REQUIRED_FORMATS:
        if required not in formats:
            raise ConfigurationError(
                code=E.CONFIG_INVALID_VALUE,
                message=f"formats must include '{required}'",
                hint='The publish manifest points main at the cjs bundle and module at the es bundle.',
            )
    # De-duplicate while keeping the declared order.
    return list(dict.fromkeys(formats))


def _validate_globals(raw: dict[str, Any]) -> dict[str, str]:  # noqa: ANN401 - dynamic config
    result: dict[str, str] = {}
    for module_id, global_name in raw.items():
        if not isinstance(global_name, str):
            raise ConfigurationError(
                code=E.CONFIG_INVALID_VALUE,
                message=f"globals.{module_id} must be a string, got {type(global_name).__name__}",
            )
        result[str(module_id)] = global_name
    return result


def parse_config(raw: dict[str, Any], *, config_path: Path | None = None) -> BuildConfig:  # noqa: ANN401
    """Validate a raw mapping of settings and build a :class:`BuildConfig`.

    Args:
        raw: Top-level keys as read from ``bundlekit.toml``.
        config_path: Where the settings came from, for the result.

    Raises:
        ConfigurationError: On unknown keys, wrong types or bad values.
    """
    for key in raw:
        if key not in VALID_KEYS:
            suggestion = difflib.get_close_matches(key, VALID_KEYS, n=1, cutoff=0.6)
            hint = f"Did you mean '{suggestion[0]}'?" if suggestion else f'Valid keys: {sorted(VALID_KEYS)}'
            raise ConfigurationError(
                code=E.CONFIG_INVALID_KEY,
                message=f"Unknown key '{key}' in {CONFIG_FILENAME}",
                hint=hint,
            )

    for key, value in raw.items():
        _validate_value_type(key, value)

    kwargs: dict[str, Any] = dict(raw)  # noqa: ANN401
    if 'exclude' in kwargs:
        kwargs['exclude'] = _validate_string_list('exclude', kwargs['exclude'])
    if 'formats' in kwargs:
        kwargs['formats'] = _validate_formats(_validate_string_list('formats', kwargs['formats']))
    if 'globals' in kwargs:
        kwargs['globals'] = _validate_globals(dict(kwargs['globals']))

    return BuildConfig(**kwargs, config_path=config_path)


def load_config(workspace_root: Path) -> BuildConfig:
    """Load and validate ``bundlekit.toml`` from the workspace root.

    Args:
        workspace_root: Directory that may contain ``bundlekit.toml``.

    Returns:
        A validated :class:`BuildConfig`; defaults if the file is absent.

    Raises:
        ConfigurationError: If the file is unreadable or invalid.
    """
    config_path = workspace_root / CONFIG_FILENAME

    if not config_path.is_file():
        logger.debug('no_bundlekit_config', path=str(config_path))
        return BuildConfig()

    try:
        text = config_path.read_text(encoding='utf-8')
    except OSError as exc:
        raise ConfigurationError(
            code=E.CONFIG_PARSE_ERROR,
            message=f'Failed to read {config_path}: {exc}',
        ) from exc

    try:
        doc = tomlkit.parse(text)
    except tomlkit.exceptions.TOMLKitError as exc:
        raise ConfigurationError(
            code=E.CONFIG_PARSE_ERROR,
            message=f'Failed to parse {config_path}: {exc}',
        ) from exc

    # unwrap() turns tomlkit containers into plain builtins.
    cfg = parse_config(doc.unwrap(), config_path=config_path)
    logger.debug('loaded_bundlekit_config', path=str(config_path), exclude=cfg.exclude, formats=cfg.formats)
    return cfg


__all__ = [
    'ALLOWED_FORMATS',
    'CONFIG_FILENAME',
    'DEFAULT_GLOBALS',
    'REQUIRED_FORMATS',
    'VALID_KEYS',
    'BuildConfig',
    'load_config',
    'parse_config',
]
