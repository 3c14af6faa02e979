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

"""Tests for the built-in document parsers."""

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from zipbomb_evaluator.core.exceptions import DocumentParseError, OfficeFormatMismatch
from zipbomb_evaluator.core.models import FormatFamily
from zipbomb_evaluator.core.parsers import (
    DocxParser,
    LegacyOfficeParser,
    PdfParser,
    PptxParser,
    XlsxParser,
    default_parsers,
)

OLE_HEADER = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"


class TestDefaultParsers:
    def test_every_document_family_has_a_parser(self):
        parsers = default_parsers()
        for family in FormatFamily:
            if family.is_document:
                assert parsers[family].family is family
        assert FormatFamily.ARCHIVE not in parsers

    def test_names(self):
        assert XlsxParser().get_name() == "openpyxl"
        assert LegacyOfficeParser(FormatFamily.DOC).get_name() == "olefile"


class TestOfficeOpenXmlParsers:
    def test_xlsx(self, xlsx_file: Path):
        XlsxParser().parse(xlsx_file)

    def test_docx(self, docx_file: Path):
        DocxParser().parse(docx_file)

    def test_pptx(self, pptx_file: Path):
        PptxParser().parse(pptx_file)

    def test_pdf(self, pdf_file: Path):
        PdfParser().parse(pdf_file)

    def test_xlsx_missing_workbook_part_raises(self, make_zip):
        path = make_zip("empty.xlsx", {"hello.txt": b"not a workbook"})
        with pytest.raises(Exception):
            XlsxParser().parse(path)


class TestLegacyOfficeParser:
    def test_rejects_non_legacy_family(self):
        with pytest.raises(ValueError):
            LegacyOfficeParser(FormatFamily.DOCX)

    def test_zip_bytes_are_a_format_mismatch(self, xlsx_file: Path, tmp_path: Path):
        renamed = tmp_path / "budget.xls"
        renamed.write_bytes(xlsx_file.read_bytes())
        with pytest.raises(OfficeFormatMismatch):
            LegacyOfficeParser(FormatFamily.XLS).parse(renamed)

    def test_non_ole_bytes_rejected(self, tmp_path: Path):
        path = tmp_path / "letter.doc"
        path.write_bytes(b"plain text pretending to be a document")
        with pytest.raises(DocumentParseError, match="Not an OLE2"):
            LegacyOfficeParser(FormatFamily.DOC).parse(path)

    def test_reads_main_stream(self, tmp_path: Path):
        path = tmp_path / "letter.doc"
        path.write_bytes(OLE_HEADER + b"\x00" * 504)
        with patch("zipbomb_evaluator.core.parsers.legacy.olefile") as mock_olefile:
            mock_olefile.isOleFile.return_value = True
            ole = mock_olefile.OleFileIO.return_value.__enter__.return_value
            ole.exists.side_effect = lambda name: name == "WordDocument"
            ole.openstream.return_value.read.return_value = b"\x00" * 64

            LegacyOfficeParser(FormatFamily.DOC).parse(path)

        ole.openstream.assert_called_once_with("WordDocument")

    def test_falls_back_to_older_workbook_stream(self, tmp_path: Path):
        path = tmp_path / "old.xls"
        path.write_bytes(OLE_HEADER + b"\x00" * 504)
        with patch("zipbomb_evaluator.core.parsers.legacy.olefile") as mock_olefile:
            mock_olefile.isOleFile.return_value = True
            ole = mock_olefile.OleFileIO.return_value.__enter__.return_value
            ole.exists.side_effect = lambda name: name == "Book"
            ole.openstream.return_value.read.return_value = b""

            LegacyOfficeParser(FormatFamily.XLS).parse(path)

        ole.openstream.assert_called_once_with("Book")

    def test_missing_stream_raises(self, tmp_path: Path):
        path = tmp_path / "slides.ppt"
        path.write_bytes(OLE_HEADER + b"\x00" * 504)
        with patch("zipbomb_evaluator.core.parsers.legacy.olefile") as mock_olefile:
            mock_olefile.isOleFile.return_value = True
            ole = mock_olefile.OleFileIO.return_value.__enter__.return_value
            ole.exists.return_value = False

            with pytest.raises(DocumentParseError, match="PowerPoint Document"):
                LegacyOfficeParser(FormatFamily.PPT).parse(path)
