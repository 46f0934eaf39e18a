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

"""Tests for bundlekit.graph module."""

from __future__ import annotations

import pytest
from bundlekit.graph import Chunk, ModuleGraph, is_external, package_name, split_specifier


class TestSplitSpecifier:
    """Specifiers decompose into package name and inner module."""

    @pytest.mark.parametrize(
        ('specifier', 'expected'),
        [
            ('react', ('react', '')),
            ('lodash/fp/map', ('lodash', 'fp/map')),
            ('@ws/core', ('@ws/core', '')),
            ('@ws/core/dist/theme.css', ('@ws/core', 'dist/theme.css')),
            ('@scope', ('@scope', '')),
        ],
    )
    def test_split(self, specifier: str, expected: tuple[str, str]) -> None:
        """Scoped names take two segments, others one."""
        assert split_specifier(specifier) == expected
        assert package_name(specifier) == expected[0]


class TestIsExternal:
    """Only relative and absolute specifiers are bundled."""

    def test_bare_specifiers_are_external(self) -> None:
        """Package imports stay imports."""
        assert is_external('react')
        assert is_external('@ws/core/inner')

    def test_relative_and_absolute_are_bundled(self) -> None:
        """First-party sources are inlined."""
        assert not is_external('./util')
        assert not is_external('../shared/x')
        assert not is_external('/abs/path.ts')

    def test_async_helpers_are_inlined(self) -> None:
        """The async-to-promises helpers are bundled despite being bare."""
        assert not is_external('babel-plugin-transform-async-to-promises/helpers')


class TestModuleGraph:
    """Tests for ModuleGraph edge collection."""

    def test_imported_packages_deduplicated(self) -> None:
        """Static and dynamic edges across chunks collapse per package."""
        graph = ModuleGraph(
            package='ui',
            entry='src/index.ts',
            chunks=(
                Chunk('ui.js', True, ('react', 'lodash/map', 'lodash/get'), ('@ws/core/lazy',)),
                Chunk('lazy.js', False, ('react', '@ws/core'), ()),
            ),
        )
        assert graph.imported_packages() == ['react', 'lodash', '@ws/core']

    def test_chunk_references_are_not_dependencies(self) -> None:
        """Imports of sibling chunks are part of the bundle."""
        graph = ModuleGraph(
            package='ui',
            entry='src/index.ts',
            chunks=(
                Chunk('ui.js', True, ('chunk-1.js',), ('./chunk-2.js',)),
                Chunk('chunk-1.js'),
                Chunk('chunk-2.js'),
            ),
        )
        assert graph.imported_packages() == []
