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

"""Tests for bundlekit.errors module."""

from __future__ import annotations

import dataclasses
import io

import pytest
from bundlekit.errors import (
    ERRORS,
    BuildFailure,
    BundleKitError,
    ConfigurationError,
    DiagnosticsOnly,
    E,
    ErrorCode,
    ErrorInfo,
    FileAccessError,
    MissingDependenciesError,
    PackageBuildError,
    PackageFailure,
    PrivateDependencyError,
    explain,
    render_error,
    render_warning,
)


class TestErrorCode:
    """Tests for ErrorCode enum."""

    def test_all_codes_have_bk_prefix(self) -> None:
        """Every error code must start with 'BK-'."""
        for code in ErrorCode:
            assert code.value.startswith('BK-'), f'{code.name} does not start with BK-'

    def test_no_duplicate_values(self) -> None:
        """Error code values must be unique."""
        values = [c.value for c in ErrorCode]
        assert len(values) == len(set(values))

    def test_e_alias(self) -> None:
        """E should be an alias for ErrorCode."""
        assert E is ErrorCode

    def test_catalog_keys_match_entries(self) -> None:
        """Every catalog entry describes its own code."""
        for code, info in ERRORS.items():
            assert info.code is code

    def test_catalog_covers_every_code(self) -> None:
        """The catalog has one entry per code."""
        assert set(ERRORS) == set(ErrorCode)


class TestErrorInfo:
    """Tests for ErrorInfo dataclass."""

    def test_frozen(self) -> None:
        """ErrorInfo instances should be immutable."""
        info = ErrorInfo(code=E.BUILD_FAILED, message='test')
        with pytest.raises(dataclasses.FrozenInstanceError):
            info.__setattr__('message', 'changed')

    def test_default_hint(self) -> None:
        """Hint should default to empty string."""
        assert ErrorInfo(code=E.BUILD_FAILED, message='test').hint == ''


class TestBundleKitError:
    """Tests for BundleKitError and its subclasses."""

    def test_message_includes_code(self) -> None:
        """str() carries the code and the message."""
        err = BundleKitError(code=E.CONFIG_INVALID_KEY, message='bad key')
        assert str(err) == '[BK-CONFIG-INVALID-KEY] bad key'

    def test_properties(self) -> None:
        """code, message and hint are exposed as properties."""
        err = BundleKitError(code=E.BUILD_FAILED, message='broke', hint='fix it')
        assert err.code is E.BUILD_FAILED
        assert err.message == 'broke'
        assert err.hint == 'fix it'

    def test_configuration_error_is_bundlekit_error(self) -> None:
        """ConfigurationError is caught by the CLI's BundleKitError handler."""
        assert issubclass(ConfigurationError, BundleKitError)

    def test_file_access_error_code(self) -> None:
        """FileAccessError always uses the root-manifest code."""
        err = FileAccessError('cannot read package.json')
        assert err.code is E.WORKSPACE_ROOT_MANIFEST

    def test_build_failure_carries_package(self) -> None:
        """BuildFailure is tagged with the package and prefixes its message."""
        err = BuildFailure('ui', 'Unexpected token')
        assert isinstance(err, PackageBuildError)
        assert err.package == 'ui'
        assert err.message == 'ui: Unexpected token'
        assert err.code is E.BUILD_FAILED

    def test_build_failure_custom_code(self) -> None:
        """BuildFailure accepts a more specific code."""
        err = BuildFailure('ui', 'no main', code=E.BUILD_NO_ENTRY)
        assert err.code is E.BUILD_NO_ENTRY


class TestDependencyErrors:
    """Dependency errors name every offending package."""

    def test_private_lists_all_names_sorted(self) -> None:
        """Every private import is named once, sorted."""
        err = PrivateDependencyError('ui', ['@ws/z', '@ws/a', '@ws/z'])
        assert err.names == ['@ws/a', '@ws/z']
        assert '@ws/a, @ws/z' in err.message
        assert err.code is E.DEPS_PRIVATE

    def test_missing_lists_all_names_once(self) -> None:
        """Duplicates collapse and the list is sorted."""
        err = MissingDependenciesError('ui', ['left-pad', 'axios', 'left-pad'])
        assert err.missing == ['axios', 'left-pad']
        assert err.message == 'ui is missing dependencies: axios, left-pad'
        assert err.package == 'ui'

    def test_package_failure_from_error(self) -> None:
        """PackageFailure snapshots a package error."""
        failure = PackageFailure.from_error(MissingDependenciesError('ui', ['left-pad']))
        assert failure == PackageFailure('ui', E.DEPS_MISSING, 'ui is missing dependencies: left-pad')


class TestDiagnosticsOnly:
    """Tests for the DiagnosticsOnly warning."""

    def test_is_warning_not_error(self) -> None:
        """DiagnosticsOnly is a warning, never a BundleKitError."""
        warning = DiagnosticsOnly('ui', 3)
        assert isinstance(warning, UserWarning)
        assert not isinstance(warning, BundleKitError)
        assert warning.code is E.DECL_DIAGNOSTICS
        assert '3 type-checker diagnostic(s)' in str(warning)


class TestExplain:
    """Tests for explain()."""

    def test_known_code(self) -> None:
        """A catalogued code gets its message and hint."""
        text = explain('BK-DEPS-MISSING')
        assert text is not None
        assert text.startswith('BK-DEPS-MISSING: ')
        assert 'Hint:' in text

    @pytest.mark.parametrize('code', list(ErrorCode))
    def test_every_code_is_catalogued(self, code: ErrorCode) -> None:
        """Every code has a message and a hint."""
        text = explain(code.value)
        assert text is not None
        assert 'No detailed explanation available' not in text
        assert 'Hint:' in text

    def test_unknown_code(self) -> None:
        """Unknown codes return None."""
        assert explain('BK-NOPE') is None


class TestRender:
    """Tests for render_error() and render_warning() on a non-TTY stream."""

    def test_render_error_plain(self) -> None:
        """Plain output is rust-style with the hint."""
        out = io.StringIO()
        render_error(BundleKitError(E.BUILD_FAILED, 'ui: boom', hint='look at it'), file=out)
        text = out.getvalue()
        assert 'error[BK-BUILD-FAILED]: ui: boom' in text
        assert '= hint: look at it' in text

    def test_render_warning_plain(self) -> None:
        """Warnings render with the warning prefix."""
        out = io.StringIO()
        render_warning(DiagnosticsOnly('ui', 2), file=out)
        assert out.getvalue().startswith('warning[BK-DECL-DIAGNOSTICS]: ui: declarations emitted')
