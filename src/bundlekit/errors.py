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

"""Structured error system for bundlekit.

Every error has a unique ``BK-NAMED-KEY`` code, a human-readable message,
and an optional hint with a suggested fix.

Error taxonomy::

    ┌──────────────────────────┬───────────────┬──────────────────────────────┐
    │ Exception                │ Scope         │ Raised when                  │
    ├──────────────────────────┼───────────────┼──────────────────────────────┤
    │ ConfigurationError       │ whole run     │ bundlekit.toml or the shared │
    │                          │               │ tsconfig.json is malformed.  │
    ├──────────────────────────┼───────────────┼──────────────────────────────┤
    │ FileAccessError          │ whole run     │ The workspace root           │
    │                          │               │ package.json is unreadable.  │
    ├──────────────────────────┼───────────────┼──────────────────────────────┤
    │ BuildFailure             │ one package   │ The bundler rejected the     │
    │                          │               │ package (syntax, bad import).│
    ├──────────────────────────┼───────────────┼──────────────────────────────┤
    │ PrivateDependencyError   │ one package   │ A bundle imports a private   │
    │                          │               │ workspace package.           │
    ├──────────────────────────┼───────────────┼──────────────────────────────┤
    │ MissingDependenciesError │ one package   │ A bundle imports packages    │
    │                          │               │ that are declared nowhere.   │
    ├──────────────────────────┼───────────────┼──────────────────────────────┤
    │ DiagnosticsOnly          │ warning       │ tsc reported type errors but │
    │                          │               │ still emitted declarations.  │
    └──────────────────────────┴───────────────┴──────────────────────────────┘

Code categories::

    BK-CONFIG-*       Configuration errors
    BK-WORKSPACE-*    Workspace discovery errors
    BK-BUILD-*        Bundler errors
    BK-DEPS-*         Dependency audit errors
    BK-DECL-*         Declaration emission diagnostics

Usage::

    from bundlekit.errors import BundleKitError, E

    raise BundleKitError(
        code=E.CONFIG_INVALID_KEY,
        message="Unknown key 'outptu_dir' in bundlekit.toml",
        hint="Did you mean 'output_dir'?",
    )
"""

from __future__ import annotations

import sys
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import TextIO

from rich.console import Console
from rich.markup import escape as rich_escape


class ErrorCode(str, Enum):
    """Enumeration of all bundlekit diagnostic codes.

    Each code maps to a unique ``BK-NAMED-KEY`` identifier. Use these
    constants instead of raw strings when raising :class:`BundleKitError`.
    """

    # Configuration
    CONFIG_INVALID_KEY = 'BK-CONFIG-INVALID-KEY'
    CONFIG_INVALID_VALUE = 'BK-CONFIG-INVALID-VALUE'
    CONFIG_PARSE_ERROR = 'BK-CONFIG-PARSE-ERROR'
    TSCONFIG_INVALID = 'BK-CONFIG-TSCONFIG-INVALID'
    TOOL_NOT_FOUND = 'BK-CONFIG-TOOL-NOT-FOUND'

    # Workspace discovery
    WORKSPACE_NOT_FOUND = 'BK-WORKSPACE-NOT-FOUND'
    WORKSPACE_PARSE_ERROR = 'BK-WORKSPACE-PARSE-ERROR'
    WORKSPACE_DUPLICATE_PACKAGE = 'BK-WORKSPACE-DUPLICATE-PACKAGE'
    WORKSPACE_ROOT_MANIFEST = 'BK-WORKSPACE-ROOT-MANIFEST'

    # Bundling
    BUILD_FAILED = 'BK-BUILD-FAILED'
    BUILD_NO_ENTRY = 'BK-BUILD-NO-ENTRY'
    BUILD_CLEAN_FAILED = 'BK-BUILD-CLEAN-FAILED'

    # Dependency audit
    DEPS_PRIVATE = 'BK-DEPS-PRIVATE'
    DEPS_MISSING = 'BK-DEPS-MISSING'

    # Declarations
    DECL_DIAGNOSTICS = 'BK-DECL-DIAGNOSTICS'


# Convenience alias for shorter imports.
E = ErrorCode


@dataclass(frozen=True)
class ErrorInfo:
    """Metadata for a single error code.

    Attributes:
        code: The ``BK-NAMED-KEY`` error code.
        message: Human-readable description of what went wrong.
        hint: Optional suggestion for how to fix the error.
    """

    code: ErrorCode
    message: str
    hint: str = ''


class BundleKitError(Exception):
    """Base exception for all bundlekit errors.

    Carries structured diagnostic information (code, message, hint) that
    can be rendered as a rich terminal message or structured JSON.

    Args:
        code: The error code from :class:`ErrorCode`.
        message: Human-readable description of what went wrong.
        hint: Optional suggestion for how to fix the error.
    """

    def __init__(self, code: ErrorCode, message: str, hint: str = '') -> None:
        """Initialize with an error code, message, and optional hint."""
        self.info = ErrorInfo(code=code, message=message, hint=hint)
        super().__init__(f'[{code.value}] {message}')

    @property
    def code(self) -> ErrorCode:
        """The error code."""
        return self.info.code

    @property
    def hint(self) -> str:
        """Suggestion for fixing this error, or empty string."""
        return self.info.hint

    @property
    def message(self) -> str:
        """The human-readable message without the code prefix."""
        return self.info.message


class ConfigurationError(BundleKitError):
    """Fatal configuration problem. Ends the whole run."""


class FileAccessError(BundleKitError):
    """The workspace root manifest could not be read or parsed."""

    def __init__(self, message: str, hint: str = '') -> None:
        """Initialize with a message and optional hint."""
        super().__init__(E.WORKSPACE_ROOT_MANIFEST, message, hint)


class PackageBuildError(BundleKitError):
    """Base class for errors that abort a single package's build.

    Attributes:
        package: Directory name of the package being built.
    """

    def __init__(self, code: ErrorCode, package: str, message: str, hint: str = '') -> None:
        """Initialize with the failing package's directory name."""
        self.package = package
        super().__init__(code, message, hint)


class BuildFailure(PackageBuildError):
    """The bundler could not compile a package."""

    def __init__(self, package: str, message: str, hint: str = '', *, code: ErrorCode = E.BUILD_FAILED) -> None:
        """Initialize with the package and the bundler's message."""
        super().__init__(code, package, f'{package}: {message}', hint)


class PrivateDependencyError(PackageBuildError):
    """A publishable package imports one or more private workspace packages.

    Attributes:
        names: Sorted names of every private package imported.
    """

    def __init__(self, package: str, names: Iterable[str]) -> None:
        """Initialize with the package and every offending private import."""
        self.names = sorted(set(names))
        super().__init__(
            E.DEPS_PRIVATE,
            package,
            f'{package} references private workspace packages: {", ".join(self.names)}',
            hint='Private packages are never published; remove the import or make the package public.',
        )


class MissingDependenciesError(PackageBuildError):
    """A package's bundle imports packages that are declared nowhere.

    Attributes:
        missing: Sorted, de-duplicated names of the undeclared packages.
    """

    def __init__(self, package: str, missing: Iterable[str]) -> None:
        """Initialize with the package and every missing dependency."""
        self.missing = sorted(set(missing))
        super().__init__(
            E.DEPS_MISSING,
            package,
            f'{package} is missing dependencies: {", ".join(self.missing)}',
            hint='Declare them in the package.json of the package or of the workspace root.',
        )


class BundleKitWarning(UserWarning):
    """Base warning for all bundlekit warnings.

    Same structure as :class:`BundleKitError` but rendered instead of
    being raised.

    Args:
        code: The error code from :class:`ErrorCode`.
        message: Human-readable description of the warning.
        hint: Optional suggestion for how to address the warning.
    """

    def __init__(self, code: ErrorCode, message: str, hint: str = '') -> None:
        """Initialize with an error code, message, and optional hint."""
        self.info = ErrorInfo(code=code, message=message, hint=hint)
        super().__init__(f'[{code.value}] {message}')

    @property
    def code(self) -> ErrorCode:
        """The error code."""
        return self.info.code

    @property
    def hint(self) -> str:
        """Suggestion for addressing this warning, or empty string."""
        return self.info.hint


class DiagnosticsOnly(BundleKitWarning):
    """Type-checker diagnostics that did not stop declaration emission."""

    def __init__(self, package: str, count: int) -> None:
        """Initialize with the package and the number of diagnostics."""
        self.package = package
        self.count = count
        super().__init__(
            E.DECL_DIAGNOSTICS,
            f'{package}: declarations emitted with {count} type-checker diagnostic(s)',
            hint='Fix the reported type errors; the emitted .d.ts files may be incomplete.',
        )


@dataclass(frozen=True)
class PackageFailure:
    """Record of a package whose build was aborted.

    Attributes:
        directory: Directory name of the package.
        code: The error code that aborted the build.
        message: Human-readable failure message.
    """

    directory: str
    code: ErrorCode
    message: str

    @classmethod
    def from_error(cls, exc: PackageBuildError) -> PackageFailure:
        """Build a failure record from a package build error."""
        return cls(directory=exc.package, code=exc.code, message=exc.message)


ERRORS: dict[ErrorCode, ErrorInfo] = {
    E.CONFIG_INVALID_KEY: ErrorInfo(
        code=E.CONFIG_INVALID_KEY,
        message='bundlekit.toml contains a key bundlekit does not recognize.',
        hint='Check the spelling; the error message suggests the closest valid key.',
    ),
    E.CONFIG_INVALID_VALUE: ErrorInfo(
        code=E.CONFIG_INVALID_VALUE,
        message='A bundlekit.toml key has a value of the wrong type or an unsupported value.',
        hint='The error message names the key and the expected type.',
    ),
    E.CONFIG_PARSE_ERROR: ErrorInfo(
        code=E.CONFIG_PARSE_ERROR,
        message='bundlekit.toml could not be read or is not valid TOML.',
        hint='The error message gives the line and column of the first syntax error.',
    ),
    E.TSCONFIG_INVALID: ErrorInfo(
        code=E.TSCONFIG_INVALID,
        message='The shared tsconfig.json could not be read or parsed.',
        hint='Run `tsc -p tsconfig.json --showConfig` to see what TypeScript makes of it.',
    ),
    E.TOOL_NOT_FOUND: ErrorInfo(
        code=E.TOOL_NOT_FOUND,
        message='A required JavaScript tool (node, rollup or tsc) could not be executed.',
        hint='Run your package manager install at the workspace root.',
    ),
    E.WORKSPACE_NOT_FOUND: ErrorInfo(
        code=E.WORKSPACE_NOT_FOUND,
        message='The workspace root or its packages directory could not be found.',
        hint="Run bundlekit inside the workspace, pass --root, or set 'packages_dir' in bundlekit.toml.",
    ),
    E.WORKSPACE_PARSE_ERROR: ErrorInfo(
        code=E.WORKSPACE_PARSE_ERROR,
        message='A package.json could not be read, is not valid JSON, or has a field of the wrong type.',
        hint='The error message names the file and the offending field.',
    ),
    E.WORKSPACE_DUPLICATE_PACKAGE: ErrorInfo(
        code=E.WORKSPACE_DUPLICATE_PACKAGE,
        message='Two package directories declare the same package name.',
        hint='Each package in the workspace must have a unique "name".',
    ),
    E.WORKSPACE_ROOT_MANIFEST: ErrorInfo(
        code=E.WORKSPACE_ROOT_MANIFEST,
        message='The workspace root package.json is missing or is not a JSON object.',
        hint='bundlekit reads hoisted dependencies from the root package.json.',
    ),
    E.BUILD_FAILED: ErrorInfo(
        code=E.BUILD_FAILED,
        message='The bundler failed to compile a package (syntax error or unresolved relative import).',
        hint='The bundler message names the file and location.',
    ),
    E.BUILD_NO_ENTRY: ErrorInfo(
        code=E.BUILD_NO_ENTRY,
        message='A package has no "main" entry point, or the file it names does not exist.',
        hint='Point "main" in the package.json at the source entry module, e.g. src/index.ts.',
    ),
    E.BUILD_CLEAN_FAILED: ErrorInfo(
        code=E.BUILD_CLEAN_FAILED,
        message='The output directory could not be deleted before the build.',
        hint="Check permissions on the output directory, or set 'clean = false' in bundlekit.toml.",
    ),
    E.DEPS_PRIVATE: ErrorInfo(
        code=E.DEPS_PRIVATE,
        message='A publishable package imports a private workspace package.',
        hint='Private packages are never published, so the import would fail after install.',
    ),
    E.DEPS_MISSING: ErrorInfo(
        code=E.DEPS_MISSING,
        message='A bundle imports packages that are not declared as dependencies.',
        hint='Add them to the package.json of the package, or to the root package.json to hoist them.',
    ),
    E.DECL_DIAGNOSTICS: ErrorInfo(
        code=E.DECL_DIAGNOSTICS,
        message='tsc reported diagnostics while emitting declarations.',
        hint='Declarations are still emitted; fix the reported errors for complete typings.',
    ),
}


def explain(code: str) -> str | None:
    """Return a detailed explanation for an error code.

    Args:
        code: The error code string, e.g. ``"BK-DEPS-MISSING"``.

    Returns:
        A formatted explanation string, or ``None`` if the code is unknown.
    """
    try:
        error_code = ErrorCode(code)
    except ValueError:
        return None

    info = ERRORS.get(error_code)
    if info is None:
        return f'{code}: No detailed explanation available.'

    lines = [f'{code}: {info.message}']
    if info.hint:
        lines.append(f'  Hint: {info.hint}')
    return '\n'.join(lines)


def _render(kind: str, color: str, code: ErrorCode, message: str, hint: str, out: TextIO) -> None:
    if out.isatty():
        console = Console(file=out, highlight=False)
        msg = rich_escape(message)
        label = f'[bold {color}]{kind}[/bold {color}][bold {color}]\\[{code.value}][/bold {color}]'
        console.print(f'{label}[bold]: {msg}[/bold]')
        if hint:
            console.print('  [dim]|[/dim]')
            console.print(f'  [dim]=[/dim] [cyan]hint[/cyan]: {rich_escape(hint)}')
        console.print()
    else:
        print(f'{kind}[{code.value}]: {message}', file=out)  # noqa: T201 - CLI output
        if hint:
            print('  |', file=out)  # noqa: T201 - CLI output
            print(f'  = hint: {hint}', file=out)  # noqa: T201 - CLI output
        print(file=out)  # noqa: T201 - CLI output


def render_error(exc: BundleKitError, *, file: TextIO | None = None) -> None:
    """Render an error in Rust-compiler style with color.

    Output format::

        error[BK-DEPS-MISSING]: ui is missing dependencies: left-pad
          |
          = hint: Declare them in the package.json of the package or ...

    Args:
        exc: The error to render.
        file: Output stream (defaults to ``sys.stderr``).
    """
    _render('error', 'red', exc.code, exc.info.message, exc.hint, file or sys.stderr)


def render_warning(exc: BundleKitWarning, *, file: TextIO | None = None) -> None:
    """Render a warning in Rust-compiler style with color.

    Args:
        exc: The warning to render.
        file: Output stream (defaults to ``sys.stderr``).
    """
    _render('warning', 'yellow', exc.code, exc.info.message, exc.hint, file or sys.stderr)


__all__ = [
    'E',
    'ERRORS',
    'BuildFailure',
    'BundleKitError',
    'BundleKitWarning',
    'ConfigurationError',
    'DiagnosticsOnly',
    'ErrorCode',
    'ErrorInfo',
    'FileAccessError',
    'MissingDependenciesError',
    'PackageBuildError',
    'PackageFailure',
    'PrivateDependencyError',
    'explain',
    'render_error',
    'render_warning',
]
