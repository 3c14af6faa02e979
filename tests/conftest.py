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
Pytest configuration and shared fixtures.

This file is automatically loaded by pytest before running tests.
All fixtures defined here are available to every test module without
explicit imports.
"""

from __future__ import annotations

import io
import struct
import zipfile
from pathlib import Path

import pytest

from zipbomb_evaluator.core.evaluator import ZipBombEvaluator
from zipbomb_evaluator.core.limit_policy import LimitPolicy

CENTRAL_DIRECTORY_SIGNATURE = b"PK\x01\x02"
LOCAL_HEADER_SIGNATURE = b"PK\x03\x04"

# Uncompressed size of the oversized worksheet in the bomb spreadsheet
BOMB_SHEET_SIZE = 2_500_158


# ---------------------------------------------------------------------------
# Archive builders
# ---------------------------------------------------------------------------


def zip_bytes(entries: dict[str, bytes], compression: int = zipfile.ZIP_DEFLATED) -> bytes:
    """Build an in-memory zip archive from ``{name: content}``."""
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", compression=compression) as zf:
        for name, content in entries.items():
            zf.writestr(name, content)
    return buf.getvalue()


def patch_declared_size(data: bytes, entry_name: str, declared_size: int, *, local_header: bool = False) -> bytes:
    """Rewrite the uncompressed size an archive's central directory declares for *entry_name*.

    The entry body is left alone, so the archive still opens but lies about
    how large the entry inflates to.  With *local_header* the entry's local
    file header is rewritten to the same size.
    """
    patched = bytearray(data)
    if local_header:
        offset = patched.find(LOCAL_HEADER_SIGNATURE)
        while offset != -1:
            name_len = struct.unpack("<H", patched[offset + 26 : offset + 28])[0]
            if bytes(patched[offset + 30 : offset + 30 + name_len]).decode("utf-8", "replace") == entry_name:
                patched[offset + 22 : offset + 26] = struct.pack("<I", declared_size)
                break
            offset = patched.find(LOCAL_HEADER_SIGNATURE, offset + 30 + name_len)
        else:
            raise KeyError(entry_name)
    offset = patched.find(CENTRAL_DIRECTORY_SIGNATURE)
    while offset != -1:
        name_len, extra_len, comment_len = struct.unpack("<HHH", patched[offset + 28 : offset + 34])
        name = bytes(patched[offset + 46 : offset + 46 + name_len]).decode("utf-8")
        if name == entry_name:
            patched[offset + 24 : offset + 28] = struct.pack("<I", declared_size)
            return bytes(patched)
        offset = patched.find(CENTRAL_DIRECTORY_SIGNATURE, offset + 46 + name_len + extra_len + comment_len)
    raise KeyError(entry_name)


def bomb_spreadsheet_bytes() -> bytes:
    """A zip-based spreadsheet whose worksheet inflates far beyond the ratio limit."""
    return zip_bytes(
        {
            "[Content_Types].xml": b'<?xml version="1.0" encoding="UTF-8"?><Types/>',
            "xl/worksheets/sheet1.xml": b"0" * BOMB_SHEET_SIZE,
        }
    )


def nested_archive_bytes(levels: int, leaf_name: str = "readme.txt") -> bytes:
    """Archive nested *levels* deep: level 1 holds a text file, each level above holds the one below."""
    data = zip_bytes({leaf_name: b"innermost"})
    for level in range(2, levels + 1):
        data = zip_bytes({f"level{level - 1}.zip": data})
    return data


# ---------------------------------------------------------------------------
# File fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def make_zip(tmp_path: Path):
    """Factory fixture writing an archive to *tmp_path*.

    Usage::

        path = make_zip("bundle.zip", {"a.txt": b"hello"})
    """

    def _make(name: str, entries: dict[str, bytes], compression: int = zipfile.ZIP_DEFLATED) -> Path:
        path = tmp_path / name
        path.write_bytes(zip_bytes(entries, compression))
        return path

    return _make


@pytest.fixture
def text_file(tmp_path: Path) -> Path:
    path = tmp_path / "notes.txt"
    path.write_bytes(b"Hello, World!\n")
    return path


@pytest.fixture
def bomb_spreadsheet(tmp_path: Path) -> Path:
    path = tmp_path / "bomb.xlsx"
    path.write_bytes(bomb_spreadsheet_bytes())
    return path


@pytest.fixture
def xlsx_file(tmp_path: Path) -> Path:
    """A real spreadsheet written by openpyxl."""
    import openpyxl

    workbook = openpyxl.Workbook()
    sheet = workbook.active
    sheet["A1"] = "quarter"
    sheet["B1"] = "revenue"
    sheet.append(["Q1", 1200])
    sheet.append(["Q2", 1350])
    path = tmp_path / "report.xlsx"
    workbook.save(path)
    return path


@pytest.fixture
def docx_file(tmp_path: Path) -> Path:
    """A real document written by python-docx."""
    import docx

    document = docx.Document()
    document.add_heading("Release notes", level=1)
    document.add_paragraph("Nothing to see here.")
    path = tmp_path / "notes.docx"
    document.save(str(path))
    return path


@pytest.fixture
def pptx_file(tmp_path: Path) -> Path:
    """A real presentation written by python-pptx."""
    import pptx

    presentation = pptx.Presentation()
    slide = presentation.slides.add_slide(presentation.slide_layouts[1])
    slide.shapes.title.text = "Roadmap"
    path = tmp_path / "deck.pptx"
    presentation.save(str(path))
    return path


@pytest.fixture
def pdf_file(tmp_path: Path) -> Path:
    """A single blank page written by pypdf."""
    from pypdf import PdfWriter

    writer = PdfWriter()
    writer.add_blank_page(width=612, height=792)
    path = tmp_path / "manual.pdf"
    with open(path, "wb") as fh:
        writer.write(fh)
    return path


# ---------------------------------------------------------------------------
# Evaluator fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def scratch_dir(tmp_path: Path) -> Path:
    """Dedicated directory for extracted entries, so leftovers can be enumerated."""
    path = tmp_path / "scratch"
    path.mkdir()
    return path


@pytest.fixture
def evaluator(scratch_dir: Path) -> ZipBombEvaluator:
    return ZipBombEvaluator(LimitPolicy(), temp_dir=scratch_dir)
