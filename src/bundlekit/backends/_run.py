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

"""Subprocess abstraction for the JavaScript toolchain.

Every call to ``node`` (the rollup driver) and ``tsc`` goes through
:func:`run_command` so that invocations are logged the same way and
return the same :class:`CommandResult` shape. Backends call it through
:func:`asyncio.to_thread` and tests monkeypatch it per backend module.

A missing executable is reported as :class:`ToolNotFoundError` rather
than a bare :class:`FileNotFoundError`, so callers can tell "tsc is not
installed" apart from "tsc could not find a file".
"""

from __future__ import annotations

import os
import subprocess  # noqa: S404 - running node and tsc is the purpose of this module
import time
from dataclasses import dataclass
from pathlib import Path

from bundlekit.logging import get_logger

log = get_logger('bundlekit.backends.run')

# Bundling a large package can take a while on a cold cache.
DEFAULT_TIMEOUT_SECONDS = 600


class ToolNotFoundError(FileNotFoundError):
    """The executable at ``command[0]`` does not exist or is not runnable."""

    def __init__(self, executable: str) -> None:
        """Initialize with the executable that could not be started."""
        self.executable = executable
        super().__init__(f'executable not found: {executable}')


@dataclass(frozen=True)
class CommandResult:
    """Result of a subprocess invocation.

    Attributes:
        command: The command that was executed.
        return_code: Process exit code (0 = success).
        stdout: Captured standard output.
        stderr: Captured standard error.
        duration: Wall-clock duration in milliseconds.
    """

    command: list[str]
    return_code: int
    stdout: str = ''
    stderr: str = ''
    duration: float = 0.0

    @property
    def ok(self) -> bool:
        """Whether the command exited with status 0."""
        return self.return_code == 0

    @property
    def command_str(self) -> str:
        """The command as a single shell-style string."""
        return ' '.join(self.command)


def run_command(
    cmd: list[str],
    *,
    cwd: Path | str | None = None,
    env: dict[str, str] | None = None,
    stdin: str | None = None,
    timeout: int = DEFAULT_TIMEOUT_SECONDS,
) -> CommandResult:
    """Run a command to completion and capture its output.

    Args:
        cmd: Command and arguments.
        cwd: Working directory for the command.
        env: Extra environment variables, merged over the current ones.
        stdin: Text written to the process's standard input.
        timeout: Seconds to wait before the process is killed.

    Returns:
        A :class:`CommandResult`. A non-zero exit is not an exception;
        callers decide what a given exit status means.

    Raises:
        ToolNotFoundError: If ``cmd[0]`` cannot be executed.
        subprocess.TimeoutExpired: If the command exceeds ``timeout``.
    """
    cmd_str = ' '.join(cmd)
    log.debug('run_command', cmd=cmd_str, cwd=str(cwd or '.'))

    full_env: dict[str, str] | None = None
    if env:
        full_env = {**os.environ, **env}

    start = time.monotonic()
    try:
        result = subprocess.run(  # noqa: S603 -- argv built by the backends, no shell
            cmd,
            cwd=cwd,
            env=full_env,
            input=stdin,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except FileNotFoundError as exc:
        # Raised for a missing executable, or for a missing cwd.
        if cwd is not None and not Path(cwd).is_dir():
            raise
        log.error('command_not_found', cmd=cmd_str)
        raise ToolNotFoundError(cmd[0]) from exc
    except subprocess.TimeoutExpired:
        duration = (time.monotonic() - start) * 1000
        log.error('command_timeout', cmd=cmd_str, timeout=timeout, duration=duration)
        raise

    duration = (time.monotonic() - start) * 1000
    cmd_result = CommandResult(
        command=cmd,
        return_code=result.returncode,
        stdout=result.stdout,
        stderr=result.stderr,
        duration=duration,
    )

    if result.returncode != 0:
        log.debug(
            'command_nonzero_exit',
            cmd=cmd_str,
            return_code=result.returncode,
            stderr=result.stderr[:500],
            duration=duration,
        )
    else:
        log.debug('command_ok', cmd=cmd_str, duration=duration)

    return cmd_result


# Re-exported so backends don't import subprocess themselves (S404).
TimeoutExpired = subprocess.TimeoutExpired

__all__ = [
    'DEFAULT_TIMEOUT_SECONDS',
    'CommandResult',
    'TimeoutExpired',
    'ToolNotFoundError',
    'run_command',
]
