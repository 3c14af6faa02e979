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
Recursive evaluation engine.

Evaluates a file for decompression-bomb conditions and, for archives,
extracts every entry with a recursable extension to a bounded temporary file
and evaluates it in turn, so a bomb hidden inside an innocent-looking outer
archive is still found.

Work is bounded regardless of input: the tree is at most
``max_recursion_depth + 1`` levels high, only recursable entries are
extracted, and no extraction copies more than ``max_extract_size_bytes``.
"""

from __future__ import annotations

import logging
import stat
import zipfile
import zlib
from collections.abc import Iterable, Mapping
from pathlib import Path, PurePath

from .classifier import FailureClassifier, classify_failure, outcome_for_failure
from .exceptions import ExtractionLimitExceeded, OfficeFormatMismatch
from .extractor import BoundedExtractor, temporary_artifact
from .format_router import extension_of, route, valid_status
from .limit_policy import LimitPolicy
from .models import (
    EvaluationOutcome,
    EvaluationReport,
    EvaluationStatus,
    FormatFamily,
    ParserFailure,
    RecursionContext,
)
from .parsers import BaseDocumentParser, default_parsers
from .structure import StructuralAnalyzer

logger = logging.getLogger(__name__)

# Entry data that is corrupt or contradicts its directory record; classified like a parser failure.
_ENTRY_INTEGRITY_ERRORS = (zipfile.BadZipFile, zlib.error, EOFError)

# Failures reading one nested entry; the entry is skipped and the scan continues.
_ENTRY_READ_ERRORS = (OSError, NotImplementedError, RuntimeError)


class ZipBombEvaluator:
    """
    Evaluates files for zip bomb conditions with recursive nested archive inspection.

    Example:
        >>> evaluator = ZipBombEvaluator()
        >>> outcome = evaluator.evaluate("upload.zip")
        >>> if outcome.is_flagged:
        ...     print(outcome.status.value, outcome.details)
    """

    def __init__(
        self,
        policy: LimitPolicy | None = None,
        *,
        parsers: Mapping[FormatFamily, BaseDocumentParser] | None = None,
        classifier: FailureClassifier = classify_failure,
        temp_dir: str | Path | None = None,
    ):
        """
        Initialize the evaluator.

        Args:
            policy: Limits to enforce. If None, the built-in defaults are used.
            parsers: Replacement document parsers keyed by format family;
                families not given keep their default parser.
            classifier: Decides whether a parser failure is flagged.
            temp_dir: Directory for extracted entries (system default if None).
        """
        self.policy = policy or LimitPolicy()
        self.classifier = classifier
        self.temp_dir = temp_dir
        self.parsers: dict[FormatFamily, BaseDocumentParser] = {**default_parsers(), **(parsers or {})}
        self.structure = StructuralAnalyzer(self.policy, classifier)
        self.extractor = BoundedExtractor(self.policy, temp_dir=temp_dir)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def evaluate(self, path: str | Path) -> EvaluationOutcome:
        """Evaluate a file on disk. Always returns exactly one outcome."""
        path = Path(path)
        return self._evaluate(path, RecursionContext(), path.name)

    def evaluate_bytes(self, data: bytes, filename: str) -> EvaluationOutcome:
        """
        Evaluate an in-memory document.

        The bytes are written to a temporary file carrying the extension of
        *filename*, which is required for routing, and removed afterwards.
        """
        name = PurePath(filename).name or "document"
        extension = extension_of(name)
        suffix = f".{extension}" if extension else ""
        try:
            with temporary_artifact(suffix, directory=self.temp_dir, prefix="zbdoc_") as temp_path:
                temp_path.write_bytes(data)
                return self._evaluate(temp_path, RecursionContext(), name)
        except OSError as e:
            logger.error("Error staging document: %s - %s", name, e)
            return EvaluationOutcome(
                display_path=name,
                is_flagged=True,
                status=EvaluationStatus.IO_ERROR,
                declared_size=len(data),
                extension=extension,
                details=f"Failed to stage document for evaluation: {e}",
                cause=e,
            )

    def evaluate_many(self, paths: Iterable[str | Path]) -> EvaluationReport:
        """Evaluate independent top-level files and aggregate their outcomes."""
        report = EvaluationReport()
        for path in paths:
            report.add_outcome(self.evaluate(path))
        return report

    # ------------------------------------------------------------------
    # Internal evaluation engine
    # ------------------------------------------------------------------

    def _evaluate(self, path: Path, context: RecursionContext, name: str) -> EvaluationOutcome:
        """
        Evaluate *path* at the depth and ancestry described by *context*.

        Args:
            path: File on disk (a temporary artifact for nested entries)
            context: Depth and ancestor display path of this call
            name: Name shown for this file (the entry name for nested entries)
        """
        display_path = context.display_path_for(name)
        extension = extension_of(name)

        if context.depth > self.policy.max_recursion_depth:
            logger.warning("Max recursion depth reached at: %s", display_path)
            return EvaluationOutcome(
                display_path=display_path,
                is_flagged=True,
                status=EvaluationStatus.MAX_DEPTH_EXCEEDED,
                declared_size=0,
                extension=extension,
                details=(
                    f"Archive nesting exceeds maximum depth of {self.policy.max_recursion_depth} "
                    "levels - possible recursive zip bomb"
                ),
            )

        try:
            st = path.stat()
            if not stat.S_ISREG(st.st_mode):
                raise OSError(f"Not a regular file: {path}")
        except OSError as e:
            logger.error("Error accessing file: %s - %s", display_path, e)
            return EvaluationOutcome(
                display_path=display_path,
                is_flagged=True,
                status=EvaluationStatus.IO_ERROR,
                declared_size=0,
                extension=extension,
                details=f"Failed to access file: {e}",
                cause=e,
            )
        file_size = st.st_size

        if context.depth == 0:
            logger.info("Evaluating file: %s (size: %s bytes)", display_path, f"{file_size:,}")
        else:
            logger.info(
                "  [depth=%d] Evaluating nested: %s (size: %s bytes)", context.depth, display_path, f"{file_size:,}"
            )

        family = route(extension)
        try:
            if family is FormatFamily.ARCHIVE:
                return self._evaluate_archive(path, context, display_path, extension, file_size)
            if family is FormatFamily.UNKNOWN:
                return self._evaluate_generic(path, context, display_path, extension, file_size)
            return self._evaluate_document(path, family, display_path, extension, file_size)
        except Exception as e:
            return outcome_for_failure(
                ParserFailure.from_exception(e),
                display_path=display_path,
                extension=extension,
                declared_size=file_size,
                context=f"Unexpected exception during {extension.upper() or 'file'} evaluation",
                classifier=self.classifier,
            )

    def _evaluate_document(
        self, path: Path, family: FormatFamily, display_path: str, extension: str, file_size: int
    ) -> EvaluationOutcome:
        """Office and PDF formats: structural pre-check for zip-based formats, then the parser."""
        if family.is_zip_based_office:
            structure = self.structure.analyze(
                path, display_path=display_path, extension=extension, declared_size=file_size
            )
            if structure.is_flagged:
                return structure

        parser = self.parsers[family]
        try:
            parser.parse(path)
        except OfficeFormatMismatch as e:
            logger.warning("Format mismatch for %s: %s", display_path, e)
            return EvaluationOutcome(
                display_path=display_path,
                is_flagged=True,
                status=EvaluationStatus.FORMAT_MISMATCH,
                declared_size=file_size,
                extension=extension,
                details=f"File content does not match its .{extension} extension: {e}",
                cause=e,
            )
        except Exception as e:
            return outcome_for_failure(
                ParserFailure.from_exception(e),
                display_path=display_path,
                extension=extension,
                declared_size=file_size,
                context=f"Exception during {family.value.upper()} parsing",
                classifier=self.classifier,
            )

        logger.info("%s validation successful: %s", family.value.upper(), display_path)
        return EvaluationOutcome(
            display_path=display_path,
            is_flagged=False,
            status=valid_status(family),
            declared_size=file_size,
            extension=extension,
        )

    def _evaluate_archive(
        self, path: Path, context: RecursionContext, display_path: str, extension: str, file_size: int
    ) -> EvaluationOutcome:
        """
        zip/jar/war/ear archives, evaluated in two passes.

        Pass 1 checks the archive's own directory; pass 2 extracts and
        evaluates every recursable entry.
        """
        structure = self.structure.analyze(
            path, display_path=display_path, extension=extension, declared_size=file_size
        )
        if structure.is_flagged:
            return structure
        if structure.status is EvaluationStatus.NOT_ZIP:
            logger.info("File with archive extension is not a zip archive: %s", display_path)
            return EvaluationOutcome(
                display_path=display_path,
                is_flagged=False,
                status=EvaluationStatus.UNKNOWN_FORMAT,
                declared_size=file_size,
                extension=extension,
                details="Not a valid zip archive",
            )
        if structure.status is not EvaluationStatus.VALID_ZIP:
            return structure

        nested = self._evaluate_contents(path, context, display_path, file_size)
        if nested is not None:
            return nested

        logger.info("ZIP evaluation passed (including nested contents): %s", display_path)
        return EvaluationOutcome(
            display_path=display_path,
            is_flagged=False,
            status=EvaluationStatus.VALID_ZIP,
            declared_size=file_size,
            extension=extension,
        )

    def _evaluate_generic(
        self, path: Path, context: RecursionContext, display_path: str, extension: str, file_size: int
    ) -> EvaluationOutcome:
        """Unrecognised extensions: inspect as an archive if it is one, otherwise pass."""
        structure = self.structure.analyze(
            path, display_path=display_path, extension=extension, declared_size=file_size
        )
        if structure.is_flagged:
            return structure

        if structure.status is EvaluationStatus.VALID_ZIP:
            nested = self._evaluate_contents(path, context, display_path, file_size)
            if nested is not None:
                return nested

        logger.info("File extension '%s' not specifically handled: %s", extension, display_path)
        return EvaluationOutcome(
            display_path=display_path,
            is_flagged=False,
            status=EvaluationStatus.UNKNOWN_FORMAT,
            declared_size=file_size,
            extension=extension,
        )

    def _evaluate_contents(
        self, path: Path, context: RecursionContext, display_path: str, outer_size: int
    ) -> EvaluationOutcome | None:
        """
        Extract each recursable entry and evaluate it one level deeper.

        Returns:
            The first flagged outcome found, or None if every entry is safe
        """
        nested_context = context.descend(display_path)
        try:
            archive = zipfile.ZipFile(path, "r")
        except (zipfile.BadZipFile, OSError) as e:
            logger.debug("Could not reopen %s for recursive inspection: %s", display_path, e)
            return None

        with archive:
            for info in archive.infolist():
                if info.is_dir():
                    continue
                entry_extension = extension_of(info.filename)
                if not self.policy.is_recursable(entry_extension):
                    continue

                logger.info(
                    "  [depth=%d] Inspecting nested entry: %s -> %s", context.depth, display_path, info.filename
                )
                try:
                    with self.extractor.extract(archive, info, display_path=display_path) as temp_path:
                        outcome = self._evaluate(temp_path, nested_context, info.filename)
                except ExtractionLimitExceeded as e:
                    logger.warning("Extraction limit hit in %s: %s", display_path, e.details)
                    return EvaluationOutcome(
                        display_path=nested_context.display_path_for(info.filename),
                        is_flagged=True,
                        status=e.status,
                        declared_size=outer_size,
                        extension=entry_extension,
                        details=e.details,
                    )
                except _ENTRY_INTEGRITY_ERRORS as e:
                    outcome = outcome_for_failure(
                        ParserFailure.from_exception(e),
                        display_path=nested_context.display_path_for(info.filename),
                        extension=entry_extension,
                        declared_size=outer_size,
                        context="Integrity failure while extracting nested entry",
                        classifier=self.classifier,
                    )
                except _ENTRY_READ_ERRORS as e:
                    logger.warning("Error extracting entry '%s' from %s: %s", info.filename, display_path, e)
                    continue

                if outcome.is_flagged:
                    logger.warning("Nested zip bomb found: %s", outcome.display_path)
                    return outcome

        return None
