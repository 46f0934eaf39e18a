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

"""Tests for bundlekit.config module."""

from __future__ import annotations

from pathlib import Path

import pytest
from bundlekit.config import CONFIG_FILENAME, DEFAULT_GLOBALS, BuildConfig, load_config, parse_config
from bundlekit.errors import E, ConfigurationError


class TestDefaults:
    """A workspace without bundlekit.toml builds with defaults."""

    def test_missing_file_gives_defaults(self, tmp_path: Path) -> None:
        """load_config returns BuildConfig() when the file is absent."""
        assert load_config(tmp_path) == BuildConfig()

    def test_default_values(self) -> None:
        """Defaults match the conventional monorepo layout."""
        cfg = BuildConfig()
        assert cfg.packages_dir == 'packages'
        assert cfg.output_dir == 'dist'
        assert cfg.formats == ['cjs', 'es']
        assert cfg.sourcemap is True
        assert cfg.fail_fast is False
        assert cfg.property_read_side_effects is False
        assert cfg.globals == DEFAULT_GLOBALS


class TestParseConfig:
    """Tests for parse_config()."""

    def test_unknown_key_suggests_fix(self) -> None:
        """A typo gets a did-you-mean hint."""
        with pytest.raises(ConfigurationError) as exc_info:
            parse_config({'outptu_dir': 'build'})
        assert exc_info.value.code is E.CONFIG_INVALID_KEY
        assert "'output_dir'" in exc_info.value.hint

    def test_wrong_type(self) -> None:
        """A string where a list is expected is rejected."""
        with pytest.raises(ConfigurationError) as exc_info:
            parse_config({'exclude': 'site'})
        assert exc_info.value.code is E.CONFIG_INVALID_VALUE

    def test_non_string_list_item(self) -> None:
        """exclude entries must be strings."""
        with pytest.raises(ConfigurationError):
            parse_config({'exclude': ['site', 3]})

    def test_formats_must_include_cjs_and_es(self) -> None:
        """Both publish entry formats are mandatory."""
        with pytest.raises(ConfigurationError, match="must include 'es'"):
            parse_config({'formats': ['cjs', 'umd']})

    def test_unknown_format(self) -> None:
        """Formats rollup cannot write are rejected."""
        with pytest.raises(ConfigurationError, match='Unknown output formats'):
            parse_config({'formats': ['cjs', 'es', 'esm']})

    def test_formats_deduplicated(self) -> None:
        """Repeated formats are written once."""
        cfg = parse_config({'formats': ['es', 'cjs', 'es', 'umd']})
        assert cfg.formats == ['es', 'cjs', 'umd']

    def test_globals_values_must_be_strings(self) -> None:
        """globals maps module ids to global names."""
        with pytest.raises(ConfigurationError):
            parse_config({'globals': {'react': 1}})


class TestLoadConfig:
    """Tests for load_config() reading bundlekit.toml."""

    def test_reads_values(self, tmp_path: Path) -> None:
        """Values in bundlekit.toml override the defaults."""
        (tmp_path / CONFIG_FILENAME).write_text(
            'packages_dir = "libs"\n'
            'exclude = ["eslint-config", "site"]\n'
            'fail_fast = true\n'
            '\n'
            '[globals]\n'
            'react = "React"\n'
        )
        cfg = load_config(tmp_path)
        assert cfg.packages_dir == 'libs'
        assert cfg.exclude == ['eslint-config', 'site']
        assert cfg.fail_fast is True
        assert cfg.globals == {'react': 'React'}
        assert cfg.config_path == tmp_path / CONFIG_FILENAME

    def test_invalid_toml(self, tmp_path: Path) -> None:
        """Unparseable TOML is a configuration error."""
        (tmp_path / CONFIG_FILENAME).write_text('exclude = [\n')
        with pytest.raises(ConfigurationError) as exc_info:
            load_config(tmp_path)
        assert exc_info.value.code is E.CONFIG_PARSE_ERROR
