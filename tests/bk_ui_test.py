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

"""Tests for progress reporting and the build summary."""

from __future__ import annotations

import io

from bundlekit.errors import E, PackageFailure
from bundlekit.manifest import PublishManifest
from bundlekit.observer import BuildStage
from bundlekit.orchestrator import BuildResult
from bundlekit.ui import LogProgressUI, print_summary
from rich.console import Console


class TestLogProgressUI:
    """Tests for LogProgressUI."""

    def test_tracks_stages(self) -> None:
        """Rows follow the observer callbacks."""
        ui = LogProgressUI()
        with ui:
            ui.init_packages([('core', '@ws/core'), ('ui', '@ws/ui')])
            ui.on_stage('core', BuildStage.COMPILING)
            ui.on_stage('core', BuildStage.BUILT)
            ui.on_stage('ui', BuildStage.COMPILING)
            ui.on_error('ui', 'ui is missing dependencies: left-pad')
            ui.on_complete()
        assert ui._packages['core'].stage is BuildStage.BUILT
        assert ui._packages['core'].elapsed is not None
        assert ui._packages['ui'].stage is BuildStage.FAILED

    def test_unknown_directory(self) -> None:
        """Skipped directories that were never registered get a row."""
        ui = LogProgressUI()
        ui.on_stage('nope', BuildStage.SKIPPED)
        assert ui._packages['nope'].elapsed_str == '-'


class TestPrintSummary:
    """Tests for print_summary()."""

    def test_renders_every_outcome(self) -> None:
        """Built, failed and skipped packages all appear."""
        result = BuildResult(
            built=('core',),
            failed=(PackageFailure('ui', E.DEPS_MISSING, 'ui is missing dependencies: [left-pad]'),),
            skipped=('tooling',),
            publish_manifests={
                'core': PublishManifest(
                    name='@ws/core',
                    version='1.2.0',
                    main='dist/core.cjs.js',
                    module='dist/core.es.js',
                    typings='dist/src/index.d.ts',
                    dependencies={},
                    peer_dependencies={},
                    files=('/dist',),
                ),
            },
            package_names={'core': '@ws/core', 'ui': '@ws/ui', 'tooling': '@ws/tooling'},
        )
        out = io.StringIO()
        print_summary(result, console=Console(file=out, width=200))
        text = out.getvalue()
        assert 'dist/core.cjs.js' in text
        assert 'BK-DEPS-MISSING' in text
        assert '[left-pad]' in text
        assert '@ws/tooling' in text
        assert '1 built, 1 failed, 1 skipped' in text
