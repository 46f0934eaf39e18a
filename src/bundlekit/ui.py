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

"""Build progress reporting.

:class:`LogProgressUI` turns observer callbacks into structured log
lines, one per stage transition, with the elapsed time of the package.
:func:`print_summary` renders the end-of-run table with rich::

    ┏━━━━━━━━━━━┳━━━━━━━━━━━━━━━━━━━━━━━┳━━━━━━━━━┳━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━┓
    ┃ Directory ┃ Package               ┃ Status  ┃ Detail                         ┃
    ┡━━━━━━━━━━━╇━━━━━━━━━━━━━━━━━━━━━━━╇━━━━━━━━━╇━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━┩
    │ core      │ @ws/core              │ built   │ dist/core.cjs.js               │
    │ ui        │ @ws/ui                │ failed  │ BK-DEPS-MISSING: ui is missing │
    │ internal  │ @ws/internal-utils    │ skipped │                                │
    └───────────┴───────────────────────┴─────────┴────────────────────────────────┘
"""

from __future__ import annotations

import time
from collections.abc import Sequence
from dataclasses import dataclass, field
from types import TracebackType

from rich.console import Console
from rich.markup import escape as rich_escape
from rich.table import Table

from bundlekit.logging import get_logger
from bundlekit.observer import TERMINAL_STAGES, BuildObserver, BuildStage
from bundlekit.orchestrator import BuildResult

logger = get_logger(__name__)


@dataclass
class _PackageRow:
    """Progress of one package."""

    directory: str
    name: str
    stage: BuildStage = BuildStage.WAITING
    start_time: float | None = None
    end_time: float | None = None

    @property
    def elapsed(self) -> float | None:
        """Elapsed time in seconds, or None if not started."""
        if self.start_time is None:
            return None
        end = self.end_time if self.end_time is not None else time.monotonic()
        return end - self.start_time

    @property
    def elapsed_str(self) -> str:
        """Formatted elapsed time string."""
        elapsed = self.elapsed
        if elapsed is None:
            return '-'
        if elapsed < 60:
            return f'{elapsed:.1f}s'
        minutes = int(elapsed // 60)
        return f'{minutes}m{elapsed % 60:.0f}s'


@dataclass
class LogProgressUI(BuildObserver):
    """Observer that logs each stage transition."""

    _packages: dict[str, _PackageRow] = field(default_factory=dict)

    def __enter__(self) -> LogProgressUI:
        """Enter context manager."""
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Exit context manager."""

    def init_packages(self, packages: Sequence[tuple[str, str]]) -> None:
        """Register packages."""
        for directory, name in packages:
            self._packages[directory] = _PackageRow(directory=directory, name=name)
        logger.info('build_started', packages=[directory for directory, _ in packages])

    def on_stage(self, directory: str, stage: BuildStage) -> None:
        """Log the stage transition."""
        row = self._packages.setdefault(directory, _PackageRow(directory=directory, name=directory))
        row.stage = stage
        if stage not in {BuildStage.WAITING, BuildStage.SKIPPED} and row.start_time is None:
            row.start_time = time.monotonic()
        if stage in TERMINAL_STAGES:
            row.end_time = time.monotonic()
        logger.info('stage_change', directory=directory, stage=stage.value, elapsed=row.elapsed_str)

    def on_error(self, directory: str, error: str) -> None:
        """Log the failure."""
        row = self._packages.get(directory)
        if row is not None:
            row.stage = BuildStage.FAILED
            row.end_time = time.monotonic()
        logger.error('package_error', directory=directory, error=error)

    def on_complete(self) -> None:
        """Log the per-stage totals."""
        counts = {stage: 0 for stage in TERMINAL_STAGES}
        for row in self._packages.values():
            if row.stage in counts:
                counts[row.stage] += 1
        logger.info(
            'build_ui_complete',
            built=counts[BuildStage.BUILT],
            failed=counts[BuildStage.FAILED],
            skipped=counts[BuildStage.SKIPPED],
            total=len(self._packages),
        )


def print_summary(result: BuildResult, *, console: Console | None = None) -> None:
    """Render the end-of-run table of built, failed and skipped packages."""
    console = console or Console()

    def _name(directory: str) -> str:
        return result.package_names.get(directory, '')

    table = Table(title='bundlekit build', show_lines=False)
    table.add_column('Directory', style='bold')
    table.add_column('Package')
    table.add_column('Status')
    table.add_column('Detail', overflow='fold')

    for directory in result.built:
        manifest = result.publish_manifests.get(directory)
        table.add_row(directory, _name(directory), '[green]built[/green]', manifest.main if manifest else '')
    for failure in result.failed:
        table.add_row(
            failure.directory,
            _name(failure.directory),
            '[red]failed[/red]',
            rich_escape(f'{failure.code.value}: {failure.message}'),
        )
    for directory in result.skipped:
        table.add_row(directory, _name(directory), '[dim]skipped[/dim]', '')

    console.print(table)
    console.print(f'{len(result.built)} built, {len(result.failed)} failed, {len(result.skipped)} skipped')


__all__ = [
    'LogProgressUI',
    'print_summary',
]
