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

"""Publish metadata builder.

Derives the ``package.json`` that ships with a package's built output.
Paths are relative to the package directory once the output has been
copied into it::

    packages/ui/package.json          publish manifest
    ──────────────────────────        ─────────────────────────────────
    "main": "src/index.tsx"     →     "main": "dist/ui.cjs.js"
                                      "module": "dist/ui.es.js"
                                      "typings": "dist/src/index.d.ts"
    "dependencies": {"a": "^1"} →     "dependencies": {"a": "^1", "@ws/core": "1.2.0"}
    "files": ["README.md"]      →     "files": ["README.md", "/dist"]
"""

from __future__ import annotations

import posixpath
from collections.abc import Mapping
from dataclasses import dataclass

from bundlekit.errors import E, BuildFailure
from bundlekit.manifest import PackageManifest, PublishManifest

# Source suffixes replaced by ``.d.ts`` in the typings path.
_SOURCE_SUFFIXES: tuple[str, ...] = ('.tsx', '.ts', '.jsx', '.js')


@dataclass(frozen=True)
class OutputLayout:
    """Where a package's build output goes.

    Attributes:
        output_dir: Output directory name (``dist``).
        directory: The package's directory name.
        formats: Module formats written.
    """

    output_dir: str
    directory: str
    formats: tuple[str, ...] = ('cjs', 'es')

    def bundle_name(self, fmt: str) -> str:
        """File name of the bundle in ``fmt``, e.g. ``ui.cjs.js``."""
        return f'{self.directory}.{fmt}.js'

    def bundle_path(self, fmt: str) -> str:
        """Workspace-relative path the bundle is written to."""
        return posixpath.join(self.output_dir, self.directory, self.bundle_name(fmt))

    def published_path(self, fmt: str) -> str:
        """Package-relative path of the bundle after publishing."""
        return posixpath.join(self.output_dir, self.bundle_name(fmt))


def typings_path(output_dir: str, entry: str) -> str:
    """Declaration entry path for the given source entry point."""
    entry = posixpath.normpath(entry.replace('\\', '/'))
    for suffix in _SOURCE_SUFFIXES:
        if entry.endswith(suffix):
            entry = entry[: -len(suffix)]
            break
    return posixpath.join(output_dir, f'{entry}.d.ts')


def build_publish_manifest(
    manifest: PackageManifest,
    resolved_imports: Mapping[str, str],
    layout: OutputLayout,
) -> PublishManifest:
    """Derive the publish manifest for a built package.

    Pure: the input manifest is not modified and no I/O happens.

    Args:
        manifest: The package's own manifest.
        resolved_imports: Versions to merge into ``dependencies``.
        layout: Where the build output was written.

    Raises:
        BuildFailure: If the manifest has no ``main`` to derive
            ``typings`` from.
    """
    if not manifest.main:
        raise BuildFailure(layout.directory, 'package.json has no "main" entry point', code=E.BUILD_NO_ENTRY)

    files = list(dict.fromkeys([*manifest.files, f'/{layout.output_dir}']))
    return PublishManifest(
        name=manifest.name,
        version=manifest.version,
        private=manifest.private,
        main=layout.published_path('cjs'),
        module=layout.published_path('es'),
        typings=typings_path(layout.output_dir, manifest.main),
        dependencies={**manifest.dependencies, **resolved_imports},
        peer_dependencies=manifest.peer_dependencies,
        files=tuple(files),
        extra=manifest.extra,
    )


__all__ = [
    'OutputLayout',
    'build_publish_manifest',
    'typings_path',
]
