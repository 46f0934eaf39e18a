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

"""Structured logging for bundlekit.

Events are emitted through `structlog <https://www.structlog.org/>`_ and
handed to one stdlib handler, so log lines from bundlekit and from any
library using plain ``logging`` come out in the same shape::

    2026-10-19T09:14:02Z [info ] stage_change  directory=ui stage=auditing package_dir=ui
    {"event": "audit_passed", "package": "ui", "resolved": 2, "level": "info", ...}

The first form is the console renderer (colored when the stream is a
TTY), the second is ``--json-log``. Output goes to stderr by default;
stdout belongs to command output such as ``bundlekit build --format json``.

While a package builds, :func:`package_context` binds ``package_dir`` so
diagnostics logged by the bundler and tsc backends carry it too.
"""

from __future__ import annotations

import logging
import sys
from contextlib import AbstractContextManager
from typing import TextIO

import structlog

# Run on every event, whether it comes from structlog or stdlib logging.
_PRE_CHAIN: list[structlog.types.Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt='iso'),
]


def _level(*, verbose: bool, quiet: bool) -> int:
    if quiet:
        return logging.WARNING
    return logging.DEBUG if verbose else logging.INFO


def _renderer(stream: TextIO, *, json_log: bool) -> structlog.types.Processor:
    if json_log:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=stream.isatty())


def configure_logging(
    *,
    verbose: bool = False,
    quiet: bool = False,
    json_log: bool = False,
    stream: TextIO | None = None,
) -> None:
    """Route bundlekit's structured events to ``stream``.

    Safe to call more than once; each call replaces the previous handler.

    Args:
        verbose: Log debug events, including every subprocess call.
        quiet: Only log warnings and errors. Wins over ``verbose``.
        json_log: Render one JSON object per line.
        stream: Destination, ``sys.stderr`` when omitted.
    """
    stream = stream or sys.stderr
    processors: list[structlog.types.Processor] = [structlog.stdlib.ProcessorFormatter.remove_processors_meta]
    if json_log:
        processors.append(structlog.processors.format_exc_info)
    processors.append(_renderer(stream, json_log=json_log))

    handler = logging.StreamHandler(stream)
    handler.setFormatter(structlog.stdlib.ProcessorFormatter(foreign_pre_chain=_PRE_CHAIN, processors=processors))

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(_level(verbose=verbose, quiet=quiet))

    structlog.configure(
        processors=[
            *_PRE_CHAIN,
            structlog.processors.StackInfoRenderer(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str = 'bundlekit') -> structlog.stdlib.BoundLogger:
    """Return a structlog logger; modules pass ``__name__``."""
    return structlog.get_logger(name)


def package_context(directory: str) -> AbstractContextManager[None]:
    """Bind ``package_dir`` to every log event emitted inside the block.

    Args:
        directory: Directory name of the package being built.
    """
    return structlog.contextvars.bound_contextvars(package_dir=directory)


__all__ = [
    'configure_logging',
    'get_logger',
    'package_context',
]
