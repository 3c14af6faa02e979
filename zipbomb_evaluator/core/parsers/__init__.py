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

"""
Document parsers used to confirm that office and PDF files open cleanly.
"""

from __future__ import annotations

from ..models import FormatFamily
from .base import BaseDocumentParser
from .legacy import LegacyOfficeParser
from .office import DocxParser, PptxParser, XlsxParser
from .pdf import PdfParser

__all__ = [
    "BaseDocumentParser",
    "DocxParser",
    "LegacyOfficeParser",
    "PdfParser",
    "PptxParser",
    "XlsxParser",
    "default_parsers",
]


def default_parsers() -> dict[FormatFamily, BaseDocumentParser]:
    """Build the parser for every document format family."""
    return {
        FormatFamily.XLSX: XlsxParser(),
        FormatFamily.DOCX: DocxParser(),
        FormatFamily.PPTX: PptxParser(),
        FormatFamily.XLS: LegacyOfficeParser(FormatFamily.XLS),
        FormatFamily.DOC: LegacyOfficeParser(FormatFamily.DOC),
        FormatFamily.PPT: LegacyOfficeParser(FormatFamily.PPT),
        FormatFamily.PDF: PdfParser(),
    }
