# Copyright 2026 Cisco Systems, Inc. and its affiliates
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

"""
Container type detection from magic bytes.

Only the handful of signatures the evaluator routes on are recognised: ZIP
(and therefore OOXML/OpenDocument), OLE2 compound documents and PDF.  A
container whose bytes disagree with its extension is how an attacker slips a
zip-based payload past a parser that only expects a legacy binary format.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import NamedTuple

logger = logging.getLogger(__name__)

HEADER_READ_SIZE = 8


class MagicMatch(NamedTuple):
    """Result of a container type detection."""

    content_type: str  # e.g., "archive/zip", "document/ole"
    content_family: str  # e.g., "archive", "document"
    description: str


ZIP_MATCH = MagicMatch("archive/zip", "archive", "ZIP archive")
OLE_MATCH = MagicMatch("document/ole", "document", "OLE/MS Office compound document")
PDF_MATCH = MagicMatch("document/pdf", "document", "PDF document")

_MAGIC_SIGNATURES: list[tuple[bytes, MagicMatch]] = [
    (b"PK\x03\x04", ZIP_MATCH),
    (b"PK\x05\x06", MagicMatch("archive/zip", "archive", "ZIP archive (empty)")),
    (b"PK\x07\x08", MagicMatch("archive/zip", "archive", "ZIP archive (spanned)")),
    (b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1", OLE_MATCH),
    (b"%PDF", PDF_MATCH),
]


def match_magic_bytes(data: bytes) -> MagicMatch | None:
    """Match raw bytes against known container signatures."""
    for signature, match in _MAGIC_SIGNATURES:
        if data[: len(signature)] == signature:
            return match
    return None


def detect_magic(file_path: Path) -> MagicMatch | None:
    """
    Detect the container type of a file from its first bytes.

    Args:
        file_path: Path to the file to check

    Returns:
        MagicMatch if a known container signature was found, None otherwise
    """
    try:
        with open(file_path, "rb") as f:
            header = f.read(HEADER_READ_SIZE)
    except OSError:
        logger.debug("Could not read header of %s", file_path)
        return None
    if not header:
        return None
    return match_magic_bytes(header)


def is_zip_container(file_path: Path) -> bool:
    match = detect_magic(file_path)
    return match is not None and match.content_family == "archive"
