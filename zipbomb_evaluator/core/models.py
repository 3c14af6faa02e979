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
Data models for archive evaluation outcomes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

DISPLAY_SEPARATOR = " -> "


class EvaluationStatus(str, Enum):
    """Terminal classification of a single evaluated file."""

    # Clean
    VALID_ZIP = "VALID_ZIP"
    VALID_XLSX = "VALID_XLSX"
    VALID_DOCX = "VALID_DOCX"
    VALID_PPTX = "VALID_PPTX"
    VALID_XLS = "VALID_XLS"
    VALID_DOC = "VALID_DOC"
    VALID_PPT = "VALID_PPT"
    VALID_PDF = "VALID_PDF"
    UNKNOWN_FORMAT = "UNKNOWN_FORMAT"
    NOT_ZIP = "NOT_ZIP"
    # Policy violations
    ENTRY_SIZE_LIMIT_EXCEEDED = "ENTRY_SIZE_LIMIT_EXCEEDED"
    EXCESSIVE_COMPRESSION_RATIO = "EXCESSIVE_COMPRESSION_RATIO"
    TOTAL_SIZE_LIMIT_EXCEEDED = "TOTAL_SIZE_LIMIT_EXCEEDED"
    MAX_DEPTH_EXCEEDED = "MAX_DEPTH_EXCEEDED"
    NESTED_ENTRY_TOO_LARGE = "NESTED_ENTRY_TOO_LARGE"
    NESTED_ENTRY_EXTRACTION_OVERFLOW = "NESTED_ENTRY_EXTRACTION_OVERFLOW"
    # Parser / IO failures
    IO_ERROR = "IO_ERROR"
    FORMAT_MISMATCH = "FORMAT_MISMATCH"
    POSSIBLE_ZIP_BOMB = "POSSIBLE_ZIP_BOMB"
    PROCESSING_ERROR = "PROCESSING_ERROR"

    @property
    def is_clean(self) -> bool:
        return self in _CLEAN_STATUSES


_CLEAN_STATUSES = frozenset(
    {
        EvaluationStatus.VALID_ZIP,
        EvaluationStatus.VALID_XLSX,
        EvaluationStatus.VALID_DOCX,
        EvaluationStatus.VALID_PPTX,
        EvaluationStatus.VALID_XLS,
        EvaluationStatus.VALID_DOC,
        EvaluationStatus.VALID_PPT,
        EvaluationStatus.VALID_PDF,
        EvaluationStatus.UNKNOWN_FORMAT,
        EvaluationStatus.NOT_ZIP,
    }
)


class FormatFamily(str, Enum):
    """Evaluation strategy selected for a file extension."""

    XLSX = "xlsx"
    DOCX = "docx"
    PPTX = "pptx"
    XLS = "xls"
    DOC = "doc"
    PPT = "ppt"
    PDF = "pdf"
    ARCHIVE = "archive"
    UNKNOWN = "unknown"

    @property
    def is_zip_based_office(self) -> bool:
        return self in (FormatFamily.XLSX, FormatFamily.DOCX, FormatFamily.PPTX)

    @property
    def is_document(self) -> bool:
        """True for formats validated by an external document parser."""
        return self not in (FormatFamily.ARCHIVE, FormatFamily.UNKNOWN)


@dataclass(frozen=True)
class ParserFailure:
    """Structured view of an external parser failure.

    ``kind`` is the failing exception's type name and ``message`` its text;
    classifiers operate on these two fields instead of on the raw exception.
    """

    kind: str
    message: str
    exception: BaseException | None = None

    @classmethod
    def from_exception(cls, exc: BaseException) -> ParserFailure:
        return cls(kind=type(exc).__name__, message=str(exc), exception=exc)


@dataclass(frozen=True)
class EvaluationOutcome:
    """The result of evaluating one file, at any recursion depth."""

    display_path: str
    is_flagged: bool
    status: EvaluationStatus
    declared_size: int = 0
    extension: str = ""
    details: str = ""
    cause: BaseException | None = None

    def __post_init__(self):
        # PROCESSING_ERROR is the only unflagged status allowed to carry a cause.
        if self.status.is_clean and (self.is_flagged or self.cause is not None):
            raise ValueError(f"Clean status {self.status.value} cannot be flagged or carry a failure")

    @property
    def file_name(self) -> str:
        """Last component of the display path."""
        return self.display_path.rsplit(DISPLAY_SEPARATOR, 1)[-1]

    @property
    def nesting_depth(self) -> int:
        """Number of archive boundaries crossed to reach this file."""
        return self.display_path.count(DISPLAY_SEPARATOR)

    def summary(self) -> str:
        """Render the outcome the way the command line prints it."""
        if self.is_flagged:
            return "\n".join(
                [
                    "=== ZIP BOMB DETECTED ===",
                    f"Filename: {self.display_path}",
                    f"Extension: {self.extension}",
                    f"File Size: {self.declared_size:,} bytes",
                    f"Status: {self.status.value}",
                    f"Details: {self.details}",
                    f"Exception: {self.cause if self.cause is not None else 'N/A'}",
                    f"Exception Type: {type(self.cause).__name__ if self.cause is not None else 'N/A'}",
                ]
            )
        return (
            f"Filename: {self.display_path} | Extension: {self.extension} | "
            f"Size: {self.declared_size:,} bytes | Status: {self.status.value}"
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert outcome to dictionary."""
        return {
            "display_path": self.display_path,
            "is_flagged": self.is_flagged,
            "status": self.status.value,
            "declared_size": self.declared_size,
            "extension": self.extension,
            "details": self.details,
            "cause": (
                {"type": type(self.cause).__name__, "message": str(self.cause)} if self.cause is not None else None
            ),
        }


@dataclass(frozen=True)
class RecursionContext:
    """Per-call traversal state, passed by value down the evaluation tree."""

    depth: int = 0
    ancestor_display_path: str | None = None

    def display_path_for(self, name: str) -> str:
        if self.ancestor_display_path:
            return f"{self.ancestor_display_path}{DISPLAY_SEPARATOR}{name}"
        return name

    def descend(self, display_path: str) -> RecursionContext:
        """Context for an entry nested directly inside *display_path*."""
        return RecursionContext(depth=self.depth + 1, ancestor_display_path=display_path)


@dataclass(frozen=True)
class ArchiveEntryStats:
    """Directory metadata of a single archive entry."""

    name: str
    compressed_size: int
    uncompressed_size: int

    @property
    def ratio(self) -> int | None:
        """Integer expansion ratio, or ``None`` when the compressed size is zero."""
        if self.compressed_size <= 0:
            return None
        return self.uncompressed_size // self.compressed_size


@dataclass(frozen=True)
class ArchiveDirectory:
    """An archive's entry directory, read without decompressing any entry body."""

    entries: tuple[ArchiveEntryStats, ...] = ()
    skipped_directories: int = 0

    @property
    def total_uncompressed_size(self) -> int:
        return sum(e.uncompressed_size for e in self.entries)


@dataclass
class EvaluationReport:
    """Aggregated outcomes from evaluating one or more top-level files."""

    outcomes: list[EvaluationOutcome] = field(default_factory=list)
    total_files: int = 0
    passed_count: int = 0
    flagged_count: int = 0
    total_declared_bytes: int = 0
    timestamp: datetime = field(default_factory=datetime.now)

    def add_outcome(self, outcome: EvaluationOutcome) -> None:
        """Add an outcome and update counters."""
        self.outcomes.append(outcome)
        self.total_files += 1
        self.total_declared_bytes += outcome.declared_size
        if outcome.is_flagged:
            self.flagged_count += 1
        else:
            self.passed_count += 1

    @property
    def has_threats(self) -> bool:
        return self.flagged_count > 0

    def get_flagged(self) -> list[EvaluationOutcome]:
        return [o for o in self.outcomes if o.is_flagged]

    def to_dict(self) -> dict[str, Any]:
        """Convert report to dictionary."""
        return {
            "summary": {
                "total_files": self.total_files,
                "passed": self.passed_count,
                "flagged": self.flagged_count,
                "total_declared_bytes": self.total_declared_bytes,
                "timestamp": self.timestamp.isoformat(),
            },
            "results": [o.to_dict() for o in self.outcomes],
        }
