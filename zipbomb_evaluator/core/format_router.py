# Copyright 2026 Cisco Systems, Inc.
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

"""Extension-based routing to an evaluation strategy."""

from __future__ import annotations

from pathlib import PurePath

from .limit_policy import normalize_extension
from .models import EvaluationStatus, FormatFamily

_EXTENSION_FAMILY: dict[str, FormatFamily] = {
    # Zip-based office (structural check, then document parser)
    "xlsx": FormatFamily.XLSX,
    "docx": FormatFamily.DOCX,
    "pptx": FormatFamily.PPTX,
    # Legacy office (OLE2 compound documents)
    "xls": FormatFamily.XLS,
    "doc": FormatFamily.DOC,
    "ppt": FormatFamily.PPT,
    "pdf": FormatFamily.PDF,
    # Archives (two-pass evaluation)
    "zip": FormatFamily.ARCHIVE,
    "jar": FormatFamily.ARCHIVE,
    "war": FormatFamily.ARCHIVE,
    "ear": FormatFamily.ARCHIVE,
}

_VALID_STATUS: dict[FormatFamily, EvaluationStatus] = {
    FormatFamily.XLSX: EvaluationStatus.VALID_XLSX,
    FormatFamily.DOCX: EvaluationStatus.VALID_DOCX,
    FormatFamily.PPTX: EvaluationStatus.VALID_PPTX,
    FormatFamily.XLS: EvaluationStatus.VALID_XLS,
    FormatFamily.DOC: EvaluationStatus.VALID_DOC,
    FormatFamily.PPT: EvaluationStatus.VALID_PPT,
    FormatFamily.PDF: EvaluationStatus.VALID_PDF,
    FormatFamily.ARCHIVE: EvaluationStatus.VALID_ZIP,
    FormatFamily.UNKNOWN: EvaluationStatus.UNKNOWN_FORMAT,
}


def extension_of(name: str) -> str:
    """Normalized extension of a file or entry name (``""`` when there is none)."""
    return normalize_extension(PurePath(name).suffix)


def route(extension: str) -> FormatFamily:
    """Map a file extension to its format family; unrecognised extensions map to ``UNKNOWN``."""
    return _EXTENSION_FAMILY.get(normalize_extension(extension), FormatFamily.UNKNOWN)


def valid_status(family: FormatFamily) -> EvaluationStatus:
    """The clean status reported when a file of *family* passes every check."""
    return _VALID_STATUS[family]
