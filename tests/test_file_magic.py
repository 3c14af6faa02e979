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
Tests for container type detection from magic bytes.
"""

from pathlib import Path

import pytest

from zipbomb_evaluator.core.file_magic import (
    OLE_MATCH,
    PDF_MATCH,
    ZIP_MATCH,
    detect_magic,
    is_zip_container,
    match_magic_bytes,
)

# ── match_magic_bytes ───────────────────────────────────────────────────


class TestMatchMagicBytes:
    @pytest.mark.parametrize(
        "header, expected",
        [
            (b"PK\x03\x04rest", ZIP_MATCH),
            (b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1", OLE_MATCH),
            (b"%PDF-1.7", PDF_MATCH),
        ],
    )
    def test_known_signatures(self, header, expected):
        assert match_magic_bytes(header) == expected

    def test_empty_archive_signature(self):
        match = match_magic_bytes(b"PK\x05\x06" + b"\x00" * 18)
        assert match.content_family == "archive"

    def test_unknown_bytes(self):
        assert match_magic_bytes(b"hello world") is None
        assert match_magic_bytes(b"") is None


# ── detect_magic (file path) ────────────────────────────────────────────


class TestDetectMagic:
    def test_zip_file(self, make_zip):
        path = make_zip("renamed.xls", {"a.txt": b"a"})
        assert detect_magic(path) == ZIP_MATCH
        assert is_zip_container(path)

    def test_text_file(self, text_file: Path):
        assert detect_magic(text_file) is None
        assert not is_zip_container(text_file)

    def test_empty_file(self, tmp_path: Path):
        path = tmp_path / "empty.doc"
        path.touch()
        assert detect_magic(path) is None

    def test_missing_file(self, tmp_path: Path):
        assert detect_magic(tmp_path / "gone.doc") is None
