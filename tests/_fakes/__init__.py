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

"""Shared test fakes for bundlekit.

Provides fake implementations of the ModuleCompiler and
DeclarationEmitter protocols, and helpers that build a workspace
registry in memory, so test modules don't repeat the boilerplate.

Usage::

    from tests._fakes import FakeCompiler, FakeEmitter, make_registry, pkg

    registry = make_registry(pkg('core', '@ws/core', version='1.2.0'))
    compiler = FakeCompiler(imports={'ui': ['@ws/core', 'lodash']})
"""

from tests._fakes._compiler import FakeCompiler as FakeCompiler
from tests._fakes._emitter import FakeEmitter as FakeEmitter
from tests._fakes._workspace import graph as graph, make_registry as make_registry, pkg as pkg

__all__ = [
    'FakeCompiler',
    'FakeEmitter',
    'graph',
    'make_registry',
    'pkg',
]
