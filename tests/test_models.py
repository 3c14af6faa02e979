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
Unit tests for core data models.
"""

from datetime import datetime

import pytest

from zipbomb_evaluator.core.models import (
    ArchiveEntryStats,
    EvaluationOutcome,
    EvaluationReport,
    EvaluationStatus,
    FormatFamily,
    ParserFailure,
    RecursionContext,
)


class TestEvaluationOutcome:
    """Test EvaluationOutcome dataclass."""

    def test_clean_outcome_cannot_be_flagged(self):
        with pytest.raises(ValueError):
            EvaluationOutcome(display_path="a.zip", is_flagged=True, status=EvaluationStatus.VALID_ZIP)

    def test_clean_outcome_cannot_carry_cause(self):
        with pytest.raises(ValueError):
            EvaluationOutcome(
                display_path="a.txt",
                is_flagged=False,
                status=EvaluationStatus.UNKNOWN_FORMAT,
                cause=OSError("nope"),
            )

    def test_processing_error_is_unflagged_with_cause(self):
        cause = ValueError("bad cell")
        outcome = EvaluationOutcome(
            display_path="a.xlsx", is_flagged=False, status=EvaluationStatus.PROCESSING_ERROR, cause=cause
        )
        assert outcome.cause is cause

    def test_nesting_properties(self):
        outcome = EvaluationOutcome(
            display_path="outer.zip -> mid.zip -> inner.xlsx",
            is_flagged=True,
            status=EvaluationStatus.EXCESSIVE_COMPRESSION_RATIO,
        )
        assert outcome.file_name == "inner.xlsx"
        assert outcome.nesting_depth == 2

    def test_flagged_summary(self):
        outcome = EvaluationOutcome(
            display_path="bomb.zip",
            is_flagged=True,
            status=EvaluationStatus.POSSIBLE_ZIP_BOMB,
            declared_size=1234567,
            extension="zip",
            details="something broke",
            cause=OSError("corrupt data"),
        )
        summary = outcome.summary()
        assert summary.startswith("=== ZIP BOMB DETECTED ===")
        assert "Filename: bomb.zip" in summary
        assert "File Size: 1,234,567 bytes" in summary
        assert "Status: POSSIBLE_ZIP_BOMB" in summary
        assert "Exception: corrupt data" in summary
        assert "Exception Type: OSError" in summary

    def test_clean_summary_is_one_line(self):
        outcome = EvaluationOutcome(
            display_path="notes.txt",
            is_flagged=False,
            status=EvaluationStatus.UNKNOWN_FORMAT,
            declared_size=14,
            extension="txt",
        )
        assert outcome.summary() == (
            "Filename: notes.txt | Extension: txt | Size: 14 bytes | Status: UNKNOWN_FORMAT"
        )

    def test_to_dict(self):
        outcome = EvaluationOutcome(
            display_path="x.pdf",
            is_flagged=False,
            status=EvaluationStatus.PROCESSING_ERROR,
            extension="pdf",
            cause=ValueError("bad xref"),
        )
        data = outcome.to_dict()
        assert data["status"] == "PROCESSING_ERROR"
        assert data["is_flagged"] is False
        assert data["cause"] == {"type": "ValueError", "message": "bad xref"}


class TestRecursionContext:
    def test_top_level_display_path(self):
        assert RecursionContext().display_path_for("a.zip") == "a.zip"

    def test_descend_chains_display_paths(self):
        ctx = RecursionContext().descend("a.zip").descend("a.zip -> b.zip")
        assert ctx.depth == 2
        assert ctx.display_path_for("c.xlsx") == "a.zip -> b.zip -> c.xlsx"


class TestSmallModels:
    def test_entry_ratio(self):
        assert ArchiveEntryStats("a", 7448, 2500158).ratio == 335
        assert ArchiveEntryStats("a", 0, 10).ratio is None

    def test_parser_failure_from_exception(self):
        exc = KeyError("x")
        failure = ParserFailure.from_exception(exc)
        assert failure.kind == "KeyError"
        assert failure.exception is exc

    def test_status_cleanliness(self):
        assert EvaluationStatus.NOT_ZIP.is_clean
        assert EvaluationStatus.VALID_PDF.is_clean
        assert not EvaluationStatus.PROCESSING_ERROR.is_clean
        assert not EvaluationStatus.MAX_DEPTH_EXCEEDED.is_clean

    def test_format_family_properties(self):
        assert FormatFamily.DOCX.is_zip_based_office
        assert not FormatFamily.DOC.is_zip_based_office
        assert FormatFamily.PDF.is_document
        assert not FormatFamily.ARCHIVE.is_document


class TestEvaluationReport:
    def test_counters(self):
        report = EvaluationReport()
        report.add_outcome(
            EvaluationOutcome("a.txt", False, EvaluationStatus.UNKNOWN_FORMAT, declared_size=10)
        )
        report.add_outcome(
            EvaluationOutcome("b.zip", True, EvaluationStatus.TOTAL_SIZE_LIMIT_EXCEEDED, declared_size=90)
        )
        assert report.total_files == 2
        assert report.passed_count == 1
        assert report.flagged_count == 1
        assert report.total_declared_bytes == 100
        assert report.has_threats
        assert [o.display_path for o in report.get_flagged()] == ["b.zip"]

    def test_to_dict(self):
        report = EvaluationReport()
        data = report.to_dict()
        assert data["summary"]["total_files"] == 0
        assert data["results"] == []
        datetime.fromisoformat(data["summary"]["timestamp"])
