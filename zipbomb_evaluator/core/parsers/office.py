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
Office Open XML parsers (xlsx, docx, pptx).

These files are zip containers; the evaluator runs the structural analyzer
on them before any of these parsers is allowed to inflate a part.
"""

from __future__ import annotations

import logging
from pathlib import Path

import docx
import openpyxl
import pptx

from ..models import FormatFamily
from .base import BaseDocumentParser

logger = logging.getLogger(__name__)


class XlsxParser(BaseDocumentParser):
    """Reads every cell value of every worksheet with openpyxl."""

    def __init__(self):
        super().__init__("openpyxl", FormatFamily.XLSX)

    def parse(self, path: Path) -> None:
        workbook = openpyxl.load_workbook(str(path), read_only=True, data_only=True)
        try:
            cells = 0
            for worksheet in workbook.worksheets:
                for row in worksheet.iter_rows(values_only=True):
                    cells += len(row)
            logger.debug("Read %d cells from %s", cells, path)
        finally:
            workbook.close()


class DocxParser(BaseDocumentParser):
    """Extracts paragraph and table text with python-docx."""

    def __init__(self):
        super().__init__("python-docx", FormatFamily.DOCX)

    def parse(self, path: Path) -> None:
        document = docx.Document(str(path))
        parts = [p.text for p in document.paragraphs]
        for table in document.tables:
            for row in table.rows:
                parts.extend(cell.text for cell in row.cells)
        logger.debug("Extracted %d text blocks from %s", len(parts), path)


class PptxParser(BaseDocumentParser):
    """Extracts slide text frames with python-pptx."""

    def __init__(self):
        super().__init__("python-pptx", FormatFamily.PPTX)

    def parse(self, path: Path) -> None:
        presentation = pptx.Presentation(str(path))
        parts: list[str] = []
        for slide in presentation.slides:
            for shape in slide.shapes:
                if shape.has_text_frame:
                    parts.append(shape.text_frame.text)
        logger.debug("Extracted %d text frames from %s", len(parts), path)
