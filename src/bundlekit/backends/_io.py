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

"""aiofiles helpers for the manifests and generated configs bundlekit touches.

Reads fail with the caller's error code so a broken package manifest and
a broken root manifest can be reported differently. Writes only produce
JSON (the derived tsconfig), always as UTF-8 with a trailing newline.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import aiofiles

from bundlekit.errors import E, BundleKitError, ErrorCode


async def read_file(path: Path, *, code: ErrorCode = E.WORKSPACE_PARSE_ERROR) -> str:
    """Return the text of ``path``.

    Raises:
        BundleKitError: With ``code`` if the file cannot be read.
    """
    try:
        async with aiofiles.open(path, encoding='utf-8') as f:
            return await f.read()
    except OSError as exc:
        raise BundleKitError(code=code, message=f'Cannot read {path}: {exc.strerror or exc}') from exc


async def write_json(path: Path, data: Any) -> None:  # noqa: ANN401 - any JSON-serializable value
    """Write ``data`` as two-space indented JSON, creating parent directories.

    Raises:
        BundleKitError: If the file cannot be written.
    """
    text = json.dumps(data, indent=2) + '\n'
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        async with aiofiles.open(path, mode='w', encoding='utf-8') as f:
            await f.write(text)
    except OSError as exc:
        raise BundleKitError(
            code=E.BUILD_FAILED,
            message=f'Cannot write {path}: {exc.strerror or exc}',
            hint=f'Check that {path.parent} is writable.',
        ) from exc
