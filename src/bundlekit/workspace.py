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

"""Workspace registry.

Loads every package manifest under the packages directory once, at
startup, and indexes it by package name and by directory name.

Workspace structure::

    monorepo/
    ├── package.json          # root manifest, hoisted dependencies
    ├── tsconfig.json         # shared type-checker config
    ├── bundlekit.toml        # optional
    └── packages/
        ├── core/
        │   └── package.json
        ├── ui/
        │   └── package.json
        ├── eslint-config/    # excluded by name in bundlekit.toml
        ├── scratch/          # no package.json, silently absent
        └── draft/            # package.json without "name", skipped

The registry is read-only once loaded. Builds consult it for the
private flag and current version of local packages and for the root
manifest's dependencies.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType

from bundlekit.backends._io import read_file as _read_file
from bundlekit.errors import E, BundleKitError, FileAccessError
from bundlekit.logging import get_logger
from bundlekit.manifest import MANIFEST_FILENAME, PackageManifest, parse_json_object

logger = get_logger(__name__)


@dataclass(frozen=True)
class WorkspacePackage:
    """A package directory with a manifest.

    Attributes:
        directory: Directory name under the packages directory.
        path: Absolute path to the package directory.
        manifest: The parsed ``package.json``.
    """

    directory: str
    path: Path
    manifest: PackageManifest

    @property
    def name(self) -> str:
        """The package name from the manifest."""
        return self.manifest.name

    @property
    def is_public(self) -> bool:
        """Whether the package may be built."""
        return self.manifest.is_public


@dataclass(frozen=True)
class WorkspaceRegistry:
    """Name and directory lookups over every workspace package.

    Every entry in ``by_name`` corresponds to exactly one entry in
    ``by_directory``. A directory without a manifest is in neither.

    Attributes:
        root: Workspace root directory.
        by_name: Package name to package.
        by_directory: Directory name to package, in directory order.
        root_dependencies: ``dependencies`` of the root ``package.json``.
    """

    root: Path
    by_name: Mapping[str, WorkspacePackage] = field(default_factory=dict)
    by_directory: Mapping[str, WorkspacePackage] = field(default_factory=dict)
    root_dependencies: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Freeze the lookups; no build may mutate the registry."""
        object.__setattr__(self, 'by_name', MappingProxyType(dict(self.by_name)))
        object.__setattr__(self, 'by_directory', MappingProxyType(dict(self.by_directory)))
        object.__setattr__(self, 'root_dependencies', MappingProxyType(dict(self.root_dependencies)))

    @classmethod
    def from_packages(
        cls,
        root: Path,
        packages: Iterable[WorkspacePackage],
        root_dependencies: Mapping[str, str] | None = None,
    ) -> WorkspaceRegistry:
        """Index ``packages`` by name and directory.

        Raises:
            BundleKitError: If two directories declare the same name.
        """
        by_name: dict[str, WorkspacePackage] = {}
        by_directory: dict[str, WorkspacePackage] = {}
        for pkg in packages:
            existing = by_name.get(pkg.name)
            if existing is not None:
                raise BundleKitError(
                    code=E.WORKSPACE_DUPLICATE_PACKAGE,
                    message=f"Duplicate package name '{pkg.name}' in {existing.directory}/ and {pkg.directory}/",
                    hint='Each package in the workspace must have a unique name.',
                )
            by_name[pkg.name] = pkg
            by_directory[pkg.directory] = pkg
        return cls(
            root=root,
            by_name=by_name,
            by_directory=by_directory,
            root_dependencies=root_dependencies or {},
        )

    @property
    def root_dependency_names(self) -> frozenset[str]:
        """Names declared in the root manifest's ``dependencies``."""
        return frozenset(self.root_dependencies)

    def get(self, name: str) -> WorkspacePackage | None:
        """Look a package up by name."""
        return self.by_name.get(name)

    def in_directory(self, directory: str) -> WorkspacePackage | None:
        """Look a package up by directory name."""
        return self.by_directory.get(directory)


async def _read_root_dependencies(root: Path) -> dict[str, str]:
    path = root / MANIFEST_FILENAME
    try:
        text = await _read_file(path)
        data = parse_json_object(text, path)
    except BundleKitError as exc:
        raise FileAccessError(
            message=exc.message,
            hint='bundlekit must be run from a workspace root with a valid package.json.',
        ) from exc
    deps = data.get('dependencies') or {}
    if not isinstance(deps, dict):
        raise FileAccessError(message=f'"dependencies" in {path} must be an object')
    return {str(k): str(v) for k, v in deps.items()}


async def load_registry(
    root: Path,
    packages_dir: str = 'packages',
    exclude: Iterable[str] = (),
) -> WorkspaceRegistry:
    """Load the workspace registry.

    Enumerates the immediate subdirectories of ``root / packages_dir``,
    skipping names in ``exclude`` and directories without a
    ``package.json``. A manifest without a ``"name"`` is logged and
    skipped; the rest of the workspace still loads.

    Args:
        root: Workspace root containing the root ``package.json``.
        packages_dir: Subdirectory holding the packages.
        exclude: Directory names that are not build targets.

    Returns:
        The loaded :class:`WorkspaceRegistry`.

    Raises:
        FileAccessError: If the root ``package.json`` is unreadable or
            not a JSON object.
        BundleKitError: If the packages directory is missing, a package
            manifest is malformed, or two packages share a name.
    """
    root_dependencies = await _read_root_dependencies(root)

    packages_root = root / packages_dir
    if not packages_root.is_dir():
        raise BundleKitError(
            code=E.WORKSPACE_NOT_FOUND,
            message=f'Packages directory {packages_root} does not exist',
            hint="Set 'packages_dir' in bundlekit.toml.",
        )

    excluded = frozenset(exclude)
    packages: list[WorkspacePackage] = []
    for child in sorted(packages_root.iterdir()):
        if not child.is_dir():
            continue
        if child.name in excluded:
            logger.debug('skipped_excluded_directory', directory=child.name)
            continue
        manifest_path = child / MANIFEST_FILENAME
        if not manifest_path.is_file():
            logger.debug('skipped_directory_without_manifest', directory=child.name)
            continue
        data = parse_json_object(await _read_file(manifest_path), manifest_path)
        name = data.get('name')
        if not isinstance(name, str) or not name:
            logger.warning('skipped_unnamed_package', directory=child.name, path=str(manifest_path))
            continue
        manifest = PackageManifest.from_dict(data, path=manifest_path)
        packages.append(WorkspacePackage(directory=child.name, path=child, manifest=manifest))

    registry = WorkspaceRegistry.from_packages(root, packages, root_dependencies)
    logger.info(
        'discovered_packages',
        count=len(registry.by_name),
        private=sum(1 for p in registry.by_name.values() if not p.is_public),
    )
    return registry


__all__ = [
    'WorkspacePackage',
    'WorkspaceRegistry',
    'load_registry',
]
