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

"""Tests for the workspace registry."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from bundlekit.errors import E, BundleKitError, FileAccessError
from bundlekit.workspace import load_registry
from tests._fakes import make_registry, pkg

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _write_root(root: Path, dependencies: dict[str, str] | None = None) -> None:
    """Write the workspace root package.json."""
    data = {'name': 'workspace', 'private': True, 'dependencies': dependencies or {}}
    (root / 'package.json').write_text(json.dumps(data))


def _write_package(root: Path, directory: str, **fields: object) -> Path:
    """Write packages/<directory>/package.json and return the directory."""
    pkg_dir = root / 'packages' / directory
    pkg_dir.mkdir(parents=True, exist_ok=True)
    (pkg_dir / 'package.json').write_text(json.dumps(fields))
    return pkg_dir


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


class TestLoadRegistry:
    """load_registry() indexes packages by name and directory."""

    @pytest.mark.asyncio
    async def test_indexes_by_name_and_directory(self, tmp_path: Path) -> None:
        """Both lookups point at the same package."""
        _write_root(tmp_path)
        _write_package(tmp_path, 'core', name='@ws/core', version='1.2.0')
        _write_package(tmp_path, 'ui', name='@ws/ui', version='0.3.0')
        registry = await load_registry(tmp_path)
        assert sorted(registry.by_name) == ['@ws/core', '@ws/ui']
        assert sorted(registry.by_directory) == ['core', 'ui']
        assert registry.by_name['@ws/core'] is registry.by_directory['core']
        assert registry.get('@ws/core') is not None
        assert registry.in_directory('ui') is not None

    @pytest.mark.asyncio
    async def test_directory_without_manifest_is_absent(self, tmp_path: Path) -> None:
        """Scaffolding directories are skipped silently."""
        _write_root(tmp_path)
        _write_package(tmp_path, 'core', name='@ws/core')
        (tmp_path / 'packages' / 'scratch').mkdir()
        (tmp_path / 'packages' / 'README.md').write_text('not a package')
        registry = await load_registry(tmp_path)
        assert list(registry.by_directory) == ['core']

    @pytest.mark.asyncio
    async def test_unnamed_package_is_skipped(self, tmp_path: Path) -> None:
        """A manifest without a name is skipped; the others still load."""
        _write_root(tmp_path)
        _write_package(tmp_path, 'core', name='@ws/core')
        _write_package(tmp_path, 'draft', version='0.0.1')
        _write_package(tmp_path, 'empty', name='')
        _write_package(tmp_path, 'ui', name='@ws/ui')
        registry = await load_registry(tmp_path)
        assert sorted(registry.by_directory) == ['core', 'ui']
        assert registry.in_directory('draft') is None

    @pytest.mark.asyncio
    async def test_malformed_package_manifest_still_fails(self, tmp_path: Path) -> None:
        """A package.json that is not JSON still stops the load."""
        _write_root(tmp_path)
        _write_package(tmp_path, 'core', name='@ws/core')
        (tmp_path / 'packages' / 'core' / 'package.json').write_text('{ nope')
        with pytest.raises(BundleKitError) as exc_info:
            await load_registry(tmp_path)
        assert exc_info.value.code is E.WORKSPACE_PARSE_ERROR

    @pytest.mark.asyncio
    async def test_excluded_directories_are_absent(self, tmp_path: Path) -> None:
        """Excluded directory names are never loaded."""
        _write_root(tmp_path)
        _write_package(tmp_path, 'core', name='@ws/core')
        _write_package(tmp_path, 'eslint-config', name='eslint-config-ws')
        registry = await load_registry(tmp_path, exclude=['eslint-config'])
        assert list(registry.by_directory) == ['core']
        assert registry.get('eslint-config-ws') is None

    @pytest.mark.asyncio
    async def test_root_dependencies(self, tmp_path: Path) -> None:
        """Root dependencies are exposed with their versions."""
        _write_root(tmp_path, {'lodash': '^4.17.0'})
        (tmp_path / 'packages').mkdir()
        registry = await load_registry(tmp_path)
        assert dict(registry.root_dependencies) == {'lodash': '^4.17.0'}
        assert registry.root_dependency_names == frozenset({'lodash'})

    @pytest.mark.asyncio
    async def test_custom_packages_dir(self, tmp_path: Path) -> None:
        """The packages directory is configurable."""
        _write_root(tmp_path)
        lib = tmp_path / 'libs' / 'core'
        lib.mkdir(parents=True)
        (lib / 'package.json').write_text('{"name": "core"}')
        registry = await load_registry(tmp_path, 'libs')
        assert list(registry.by_name) == ['core']


class TestLoadRegistryErrors:
    """Failure modes of load_registry()."""

    @pytest.mark.asyncio
    async def test_missing_root_manifest(self, tmp_path: Path) -> None:
        """An unreadable root package.json is a FileAccessError."""
        (tmp_path / 'packages').mkdir()
        with pytest.raises(FileAccessError):
            await load_registry(tmp_path)

    @pytest.mark.asyncio
    async def test_malformed_root_manifest(self, tmp_path: Path) -> None:
        """A root package.json that is not JSON is a FileAccessError."""
        (tmp_path / 'package.json').write_text('{ nope')
        (tmp_path / 'packages').mkdir()
        with pytest.raises(FileAccessError) as exc_info:
            await load_registry(tmp_path)
        assert exc_info.value.code is E.WORKSPACE_ROOT_MANIFEST

    @pytest.mark.asyncio
    async def test_missing_packages_dir(self, tmp_path: Path) -> None:
        """A missing packages directory is reported."""
        _write_root(tmp_path)
        with pytest.raises(BundleKitError) as exc_info:
            await load_registry(tmp_path)
        assert exc_info.value.code is E.WORKSPACE_NOT_FOUND

    @pytest.mark.asyncio
    async def test_duplicate_names(self, tmp_path: Path) -> None:
        """Two directories may not declare the same package name."""
        _write_root(tmp_path)
        _write_package(tmp_path, 'a', name='dup')
        _write_package(tmp_path, 'b', name='dup')
        with pytest.raises(BundleKitError) as exc_info:
            await load_registry(tmp_path)
        assert exc_info.value.code is E.WORKSPACE_DUPLICATE_PACKAGE


class TestRegistryReadOnly:
    """The registry cannot be mutated once built."""

    def test_lookups_are_read_only(self) -> None:
        """Assigning into the lookups fails."""
        registry = make_registry(pkg('core', '@ws/core'))
        with pytest.raises(TypeError):
            registry.by_name['x'] = registry.by_name['@ws/core']  # type: ignore[index]
        with pytest.raises(TypeError):
            registry.root_dependencies['x'] = '1'  # type: ignore[index]
