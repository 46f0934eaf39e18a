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

"""Module graph produced by bundling one package.

A :class:`ModuleGraph` is a list of :class:`Chunk` objects, each with the
static and dynamic import specifiers left in its code. Because every
non-relative import is kept external, those specifiers are exactly the
packages the bundle needs at install time.

Specifier decomposition::

    "react"                    → package "react"
    "lodash/fp/map"            → package "lodash"       (inner module "fp/map")
    "@ws/core"                 → package "@ws/core"
    "@ws/core/dist/theme.css"  → package "@ws/core"     (inner module "dist/theme.css")
    "./util"                   → not external, inlined into the bundle
"""

from __future__ import annotations

import posixpath
from collections.abc import Iterator
from dataclasses import dataclass, field

# Imported by transpiled async code; must be bundled even though it is
# a bare specifier.
INLINED_SPECIFIERS: frozenset[str] = frozenset({
    'babel-plugin-transform-async-to-promises/helpers',
})


def is_external(specifier: str) -> bool:
    """Whether the bundler leaves ``specifier`` as an import.

    Everything that is neither relative nor absolute is external, apart
    from :data:`INLINED_SPECIFIERS`.
    """
    if specifier in INLINED_SPECIFIERS:
        return False
    return not specifier.startswith('.') and not posixpath.isabs(specifier)


def split_specifier(specifier: str) -> tuple[str, str]:
    """Split an import specifier into package name and inner module path.

    Scoped packages (``@scope/name``) take two path segments, all other
    packages take one.

    Returns:
        ``(package_name, inner)`` where ``inner`` is ``''`` for a bare
        package import.
    """
    parts = specifier.split('/')
    width = 2 if parts[0].startswith('@') and len(parts) > 1 else 1
    return '/'.join(parts[:width]), '/'.join(parts[width:])


def package_name(specifier: str) -> str:
    """Return the package-name portion of an import specifier."""
    return split_specifier(specifier)[0]


@dataclass(frozen=True)
class Chunk:
    """One compiled code unit.

    Attributes:
        file_name: Output file name the bundler assigned to the chunk.
        is_entry: Whether the chunk holds the package entry module.
        imports: Static import specifiers, in bundler order.
        dynamic_imports: ``import()`` specifiers, in bundler order.
    """

    file_name: str
    is_entry: bool = False
    imports: tuple[str, ...] = ()
    dynamic_imports: tuple[str, ...] = ()

    def edges(self) -> Iterator[str]:
        """Yield static then dynamic import specifiers."""
        yield from self.imports
        yield from self.dynamic_imports


@dataclass(frozen=True)
class ModuleGraph:
    """The bundled form of one package's entry module.

    Attributes:
        package: Directory name of the package that was compiled.
        entry: Entry module path the graph was compiled from.
        chunks: Compiled chunks. Assets are not represented.
        handle: Backend-specific state needed to emit the graph again.
    """

    package: str
    entry: str
    chunks: tuple[Chunk, ...] = ()
    handle: object = field(default=None, compare=False, repr=False)

    def external_specifiers(self) -> Iterator[str]:
        """Yield every external import edge across all chunks.

        References between chunks of this graph are skipped; they are
        part of the bundle, not dependencies.
        """
        own_files = {chunk.file_name for chunk in self.chunks}
        for chunk in self.chunks:
            for specifier in chunk.edges():
                if specifier in own_files:
                    continue
                if is_external(specifier):
                    yield specifier

    def imported_packages(self) -> list[str]:
        """Package names imported by the graph, de-duplicated, first-seen order."""
        return list(dict.fromkeys(package_name(s) for s in self.external_specifiers()))


__all__ = [
    'INLINED_SPECIFIERS',
    'Chunk',
    'ModuleGraph',
    'is_external',
    'package_name',
    'split_specifier',
]
