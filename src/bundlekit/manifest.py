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

"""``package.json`` models.

:class:`PackageManifest` is the immutable view of a package's manifest as
read from disk. :class:`PublishManifest` is the derived copy that
accompanies built output. Fields bundlekit does not interpret are kept
in ``extra`` so the derived copy round-trips them untouched.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any

from bundlekit.errors import E, BundleKitError

MANIFEST_FILENAME = 'package.json'

# Keys modelled as attributes; everything else lands in ``extra``.
_KNOWN_KEYS = (
    'name',
    'version',
    'private',
    'main',
    'module',
    'typings',
    'dependencies',
    'peerDependencies',
    'files',
)


def _frozen(mapping: Mapping[str, str] | None) -> Mapping[str, str]:
    return MappingProxyType(dict(mapping or {}))


def _str_mapping(data: dict[str, Any], key: str, path: Path | None) -> dict[str, str]:  # noqa: ANN401
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise BundleKitError(
            code=E.WORKSPACE_PARSE_ERROR,
            message=f'"{key}" in {path or MANIFEST_FILENAME} must be an object, got {type(value).__name__}',
        )
    return {str(k): str(v) for k, v in value.items()}


def parse_json_object(text: str, path: Path) -> dict[str, Any]:  # noqa: ANN401 - JSON values are untyped
    """Parse JSON text that must hold an object at the top level.

    Raises:
        BundleKitError: If the text is not valid JSON or not an object.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise BundleKitError(
            code=E.WORKSPACE_PARSE_ERROR,
            message=f'Failed to parse {path}: {exc}',
            hint=f'Check that {path} contains valid JSON.',
        ) from exc
    if not isinstance(data, dict):
        raise BundleKitError(
            code=E.WORKSPACE_PARSE_ERROR,
            message=f'{path} is not a JSON object',
            hint=f'Expected a JSON object at the top level of {path}.',
        )
    return data


@dataclass(frozen=True)
class PackageManifest:
    """A package's ``package.json`` as loaded from disk.

    Attributes:
        name: Package name, unique within the workspace.
        version: Version string (``"0.0.0"`` when absent).
        private: ``True`` only when the manifest says ``"private": true``.
        main: CommonJS entry point, relative to the package directory.
        module: ES module entry point.
        typings: Type declaration entry point.
        dependencies: Runtime dependencies, name to version requirement.
        peer_dependencies: Peer dependencies, name to version requirement.
        files: Globs included when the package is published.
        extra: Every other top-level key, in manifest order.
        path: File the manifest was read from, if any.
    """

    name: str
    version: str = '0.0.0'
    private: bool = False
    main: str | None = None
    module: str | None = None
    typings: str | None = None
    dependencies: Mapping[str, str] = field(default_factory=dict)
    peer_dependencies: Mapping[str, str] = field(default_factory=dict)
    files: tuple[str, ...] = ()
    extra: Mapping[str, Any] = field(default_factory=dict)  # noqa: ANN401
    path: Path | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        """Freeze the mapping fields so a loaded manifest cannot drift."""
        object.__setattr__(self, 'dependencies', _frozen(self.dependencies))
        object.__setattr__(self, 'peer_dependencies', _frozen(self.peer_dependencies))
        object.__setattr__(self, 'extra', MappingProxyType(dict(self.extra)))
        object.__setattr__(self, 'files', tuple(self.files))

    @property
    def is_public(self) -> bool:
        """Whether the package may be built and published."""
        return not self.private

    def declares(self, name: str) -> bool:
        """Whether ``name`` is one of the package's dependencies or peerDependencies."""
        return name in self.dependencies or name in self.peer_dependencies

    @classmethod
    def from_dict(cls, data: dict[str, Any], *, path: Path | None = None) -> PackageManifest:  # noqa: ANN401
        """Build a manifest from decoded ``package.json`` data.

        Raises:
            BundleKitError: If a modelled field has the wrong shape.
        """
        name = data.get('name', '')
        if not isinstance(name, str) or not name:
            raise BundleKitError(
                code=E.WORKSPACE_PARSE_ERROR,
                message=f'{path or MANIFEST_FILENAME} has no "name"',
                hint='Every workspace package needs a unique "name".',
            )
        files = data.get('files') or []
        if not isinstance(files, list):
            raise BundleKitError(
                code=E.WORKSPACE_PARSE_ERROR,
                message=f'"files" in {path or MANIFEST_FILENAME} must be an array',
            )

        def _opt(key: str) -> str | None:
            value = data.get(key)
            return str(value) if value is not None else None

        return cls(
            name=name,
            version=str(data.get('version', '0.0.0')),
            private=data.get('private') is True,
            main=_opt('main'),
            module=_opt('module'),
            typings=_opt('typings'),
            dependencies=_str_mapping(data, 'dependencies', path),
            peer_dependencies=_str_mapping(data, 'peerDependencies', path),
            files=tuple(str(f) for f in files),
            extra={k: v for k, v in data.items() if k not in _KNOWN_KEYS},
            path=path,
        )

    @classmethod
    def from_json(cls, text: str, path: Path) -> PackageManifest:
        """Parse ``package.json`` text read from ``path``."""
        return cls.from_dict(parse_json_object(text, path), path=path)


@dataclass(frozen=True)
class PublishManifest:
    """The manifest that accompanies a package's built output.

    Same shape as :class:`PackageManifest`, with entry points pointing
    into the output directory and resolved imports merged into
    ``dependencies``.
    """

    name: str
    version: str
    main: str
    module: str
    typings: str
    dependencies: Mapping[str, str]
    peer_dependencies: Mapping[str, str]
    files: tuple[str, ...]
    private: bool = False
    extra: Mapping[str, Any] = field(default_factory=dict)  # noqa: ANN401

    def __post_init__(self) -> None:
        """Freeze the mapping fields."""
        object.__setattr__(self, 'dependencies', _frozen(self.dependencies))
        object.__setattr__(self, 'peer_dependencies', _frozen(self.peer_dependencies))
        object.__setattr__(self, 'extra', MappingProxyType(dict(self.extra)))

    def to_dict(self) -> dict[str, Any]:  # noqa: ANN401
        """Return ``package.json`` data, known keys first then the rest."""
        data: dict[str, Any] = {  # noqa: ANN401
            'name': self.name,
            'version': self.version,
        }
        if self.private:
            data['private'] = True
        data['main'] = self.main
        data['module'] = self.module
        data['typings'] = self.typings
        data['files'] = list(self.files)
        data['dependencies'] = dict(self.dependencies)
        if self.peer_dependencies:
            data['peerDependencies'] = dict(self.peer_dependencies)
        for key, value in self.extra.items():
            data.setdefault(key, value)
        return data

    def to_json(self) -> str:
        """Serialize with the npm convention of two-space indent and a trailing newline."""
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False) + '\n'


__all__ = [
    'MANIFEST_FILENAME',
    'PackageManifest',
    'PublishManifest',
    'parse_json_object',
]
