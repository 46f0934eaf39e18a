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

"""Tests for publish manifest derivation."""

from __future__ import annotations

import pytest
from bundlekit.errors import E, BuildFailure
from bundlekit.manifest import PackageManifest
from bundlekit.publish import OutputLayout, build_publish_manifest, typings_path


class TestOutputLayout:
    """Bundle file naming."""

    def test_paths(self) -> None:
        """Bundles are named after the directory and format."""
        layout = OutputLayout('dist', 'ui')
        assert layout.bundle_name('cjs') == 'ui.cjs.js'
        assert layout.bundle_path('es') == 'dist/ui/ui.es.js'
        assert layout.published_path('cjs') == 'dist/ui.cjs.js'


class TestTypingsPath:
    """Declaration entry path."""

    @pytest.mark.parametrize(
        ('entry', 'expected'),
        [
            ('src/index.tsx', 'dist/src/index.d.ts'),
            ('src/index.ts', 'dist/src/index.d.ts'),
            ('./lib/main.js', 'dist/lib/main.d.ts'),
            ('index', 'dist/index.d.ts'),
        ],
    )
    def test_suffix_replaced(self, entry: str, expected: str) -> None:
        """The source suffix becomes .d.ts."""
        assert typings_path('dist', entry) == expected


class TestBuildPublishManifest:
    """Tests for build_publish_manifest()."""

    def _manifest(self, **kwargs: object) -> PackageManifest:
        defaults: dict[str, object] = {
            'name': '@ws/ui',
            'version': '0.3.0',
            'main': 'src/index.tsx',
            'dependencies': {'react-dom': '^17.0.0'},
            'files': ('README.md',),
            'extra': {'license': 'MIT'},
        }
        defaults.update(kwargs)
        return PackageManifest(**defaults)  # type: ignore[arg-type]

    def test_derived_fields(self) -> None:
        """Entry points, typings, files and dependencies are rewritten."""
        pm = build_publish_manifest(self._manifest(), {'@ws/core': '1.2.0'}, OutputLayout('dist', 'ui'))
        assert pm.main == 'dist/ui.cjs.js'
        assert pm.module == 'dist/ui.es.js'
        assert pm.typings == 'dist/src/index.d.ts'
        assert pm.files == ('README.md', '/dist')
        assert dict(pm.dependencies) == {'react-dom': '^17.0.0', '@ws/core': '1.2.0'}
        assert pm.to_dict()['license'] == 'MIT'

    def test_source_manifest_untouched(self) -> None:
        """The package's own manifest is not modified."""
        manifest = self._manifest()
        build_publish_manifest(manifest, {'@ws/core': '1.2.0'}, OutputLayout('dist', 'ui'))
        assert manifest.main == 'src/index.tsx'
        assert dict(manifest.dependencies) == {'react-dom': '^17.0.0'}

    def test_idempotent(self) -> None:
        """Deriving twice from the same inputs gives the same manifest."""
        manifest = self._manifest(files=('README.md', '/dist'))
        layout = OutputLayout('dist', 'ui')
        first = build_publish_manifest(manifest, {}, layout)
        assert first == build_publish_manifest(manifest, {}, layout)
        assert first.files == ('README.md', '/dist')

    def test_no_main(self) -> None:
        """Without a main entry there are no typings to point at."""
        with pytest.raises(BuildFailure) as exc_info:
            build_publish_manifest(self._manifest(main=None), {}, OutputLayout('dist', 'ui'))
        assert exc_info.value.code is E.BUILD_NO_ENTRY
