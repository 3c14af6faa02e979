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
Structural analysis of zip archives.

Reads the central directory (entry names, compressed and uncompressed sizes)
and checks it against the limit policy.  Entry bodies are never
decompressed here, so a bomb is caught before a single byte is inflated.
"""

from __future__ import annotations

import logging
import zipfile
from pathlib import Path
from typing import NamedTuple

from .classifier import FailureClassifier, classify_failure, outcome_for_failure
from .limit_policy import LimitPolicy
from .models import ArchiveDirectory, ArchiveEntryStats, EvaluationOutcome, EvaluationStatus, ParserFailure

logger = logging.getLogger(__name__)

# Raised by zipfile while reading a damaged central directory
_DIRECTORY_ERRORS = (zipfile.BadZipFile, zipfile.LargeZipFile, NotImplementedError, ValueError, EOFError)


class Violation(NamedTuple):
    """A limit broken by an archive directory."""

    status: EvaluationStatus
    details: str


def read_directory(archive: zipfile.ZipFile) -> ArchiveDirectory:
    """Build an :class:`ArchiveDirectory` from an open archive, skipping directory entries."""
    entries: list[ArchiveEntryStats] = []
    skipped = 0
    for info in archive.infolist():
        if info.is_dir():
            skipped += 1
            continue
        entries.append(
            ArchiveEntryStats(
                name=info.filename,
                compressed_size=info.compress_size,
                uncompressed_size=info.file_size,
            )
        )
    return ArchiveDirectory(entries=tuple(entries), skipped_directories=skipped)


class StructuralAnalyzer:
    """Checks an archive's entry directory against a :class:`LimitPolicy`."""

    def __init__(self, policy: LimitPolicy, classifier: FailureClassifier = classify_failure):
        self.policy = policy
        self.classifier = classifier

    def check_directory(self, directory: ArchiveDirectory) -> Violation | None:
        """
        Evaluate directory metadata only.

        Per-entry limits are checked entry by entry (size first, then ratio);
        the total is checked once every entry has been accounted for.

        Returns:
            The first violation found, or ``None`` if the directory is within limits
        """
        policy = self.policy
        total_uncompressed = 0

        for entry in directory.entries:
            compressed = entry.compressed_size
            uncompressed = entry.uncompressed_size

            if uncompressed > policy.max_entry_size_bytes:
                ratio = entry.ratio
                percent = f"{100.0 * compressed / uncompressed:.2f}%" if compressed > 0 else "N/A"
                return Violation(
                    EvaluationStatus.ENTRY_SIZE_LIMIT_EXCEEDED,
                    (
                        f"Entry '{entry.name}': uncompressed size {uncompressed:,} bytes exceeds limit of "
                        f"{policy.max_entry_size_bytes:,} bytes. Compression ratio: {percent} "
                        f"(ratio: {ratio if ratio is not None else 0}:1)"
                    ),
                )

            # A zero compressed size has no defined ratio; only the size limits apply.
            ratio = entry.ratio
            if ratio is not None and ratio > policy.max_compression_ratio:
                return Violation(
                    EvaluationStatus.EXCESSIVE_COMPRESSION_RATIO,
                    (
                        f"Entry '{entry.name}': suspicious compression ratio of {ratio}:1 "
                        f"(compressed: {compressed:,} bytes, uncompressed: {uncompressed:,} bytes)"
                    ),
                )

            total_uncompressed += uncompressed

        if total_uncompressed > policy.max_total_size_bytes:
            return Violation(
                EvaluationStatus.TOTAL_SIZE_LIMIT_EXCEEDED,
                (
                    f"Total uncompressed size {total_uncompressed:,} bytes exceeds maximum allowed "
                    f"{policy.max_total_size_bytes:,} bytes"
                ),
            )
        return None

    def analyze(
        self,
        path: Path,
        *,
        display_path: str,
        extension: str,
        declared_size: int,
    ) -> EvaluationOutcome:
        """
        Structurally analyze the archive at *path*.

        Returns:
            ``NOT_ZIP`` (unflagged) when the file is not an archive at all,
            a classified failure when the directory is damaged, a flagged
            policy violation, or ``VALID_ZIP``
        """

        def _outcome(status: EvaluationStatus, flagged: bool, details: str = "") -> EvaluationOutcome:
            return EvaluationOutcome(
                display_path=display_path,
                is_flagged=flagged,
                status=status,
                declared_size=declared_size,
                extension=extension,
                details=details,
            )

        if not zipfile.is_zipfile(path):
            logger.debug("File is not a valid zip archive: %s", display_path)
            return _outcome(EvaluationStatus.NOT_ZIP, False)

        try:
            with zipfile.ZipFile(path, "r") as archive:
                directory = read_directory(archive)
        except _DIRECTORY_ERRORS as e:
            return outcome_for_failure(
                ParserFailure.from_exception(e),
                display_path=display_path,
                extension=extension,
                declared_size=declared_size,
                context="ZipException during structure validation - possibly corrupted archive",
                classifier=self.classifier,
            )
        except OSError as e:
            logger.debug("Could not read archive directory of %s: %s", display_path, e)
            return _outcome(EvaluationStatus.NOT_ZIP, False)

        violation = self.check_directory(directory)
        if violation is not None:
            logger.warning("Structural check failed for %s: %s", display_path, violation.details)
            return _outcome(violation.status, True, violation.details)

        logger.info("ZIP structure validation successful: %s", display_path)
        return _outcome(EvaluationStatus.VALID_ZIP, False)
