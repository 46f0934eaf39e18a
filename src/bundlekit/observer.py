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

"""Build stages and the observer interface.

The orchestrator reports every package's progress through a
:class:`BuildObserver`; :mod:`bundlekit.ui` renders it::

    observer.py  ← BuildStage, BuildObserver, NullBuildObserver
      ↑              ↑
      │              │
    ui.py        orchestrator.py

Stage progression per package::

    ⏳ waiting → 🔨 compiling → 🔍 auditing → 💾 writing
    → 📝 declaring → 📦 deriving → ✅ built / ❌ failed

    ⏭️  skipped: private, excluded or manifest-less, never started
"""

from __future__ import annotations

from collections.abc import Sequence
from contextlib import AbstractContextManager
from enum import Enum
from types import TracebackType


class BuildStage(str, Enum):
    """Build stage for a single package, in pipeline order."""

    WAITING = 'waiting'
    COMPILING = 'compiling'
    AUDITING = 'auditing'
    WRITING = 'writing'
    DECLARING = 'declaring'
    DERIVING = 'deriving'
    BUILT = 'built'
    FAILED = 'failed'
    SKIPPED = 'skipped'


TERMINAL_STAGES: frozenset[BuildStage] = frozenset({
    BuildStage.BUILT,
    BuildStage.FAILED,
    BuildStage.SKIPPED,
})


class BuildObserver(AbstractContextManager['BuildObserver']):
    """Receives build progress updates. Every hook defaults to a no-op."""

    def init_packages(self, packages: Sequence[tuple[str, str]]) -> None:
        """Register the packages selected for the run.

        Args:
            packages: ``(directory, name)`` pairs in build order.
        """

    def on_stage(self, directory: str, stage: BuildStage) -> None:
        """Notify that a package has entered a new stage."""

    def on_error(self, directory: str, error: str) -> None:
        """Notify that a package has failed."""

    def on_complete(self) -> None:
        """Notify that the run is over."""

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Clean up UI resources."""


class NullBuildObserver(BuildObserver):
    """Observer that ignores everything. The orchestrator's default."""

    def __enter__(self) -> NullBuildObserver:
        """Enter context manager."""
        return self


__all__ = [
    'TERMINAL_STAGES',
    'BuildObserver',
    'BuildStage',
    'NullBuildObserver',
]
