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
Gate for document-ingestion pipelines.

Wraps :class:`ZipBombEvaluator` in a pass/raise interface: a document either
passes (``True``) or is rejected with :class:`DocumentSecurityError` carrying
the flagged outcome, so an indexer can refuse it before any parser sees it.
"""

from __future__ import annotations

import logging
from pathlib import Path

from .evaluator import ZipBombEvaluator
from .exceptions import DocumentSecurityError
from .models import EvaluationOutcome

logger = logging.getLogger(__name__)


class DocumentSecurityFilter:
    """Rejects documents that the evaluator flags."""

    def __init__(self, evaluator: ZipBombEvaluator | None = None):
        self.evaluator = evaluator or ZipBombEvaluator()

    def validate_document(self, path: str | Path) -> bool:
        """
        Validate a document on disk before processing.

        Returns:
            True if the document is safe to process

        Raises:
            DocumentSecurityError: the document was flagged
        """
        outcome = self.evaluator.evaluate(path)
        self._raise_if_flagged(outcome, f"Security violation detected in document '{path}'")
        logger.debug("Document safety check passed for: %s", path)
        return True

    def validate_document_bytes(self, data: bytes, filename: str) -> bool:
        """
        Validate raw document bytes.

        The bytes are evaluated from a temporary file that keeps the extension
        of *filename* and is deleted afterwards.

        Returns:
            True if the document is safe to process

        Raises:
            DocumentSecurityError: the document was flagged or could not be staged
        """
        try:
            outcome = self.evaluator.evaluate_bytes(data, filename)
        except OSError as e:
            logger.error("Error validating document bytes: %s - %s", filename, e)
            raise DocumentSecurityError(f"Failed to validate document: {e}") from e

        self._raise_if_flagged(outcome, f"Security violation in '{filename}'")
        logger.debug("Document safety check passed for: %s", filename)
        return True

    @staticmethod
    def _raise_if_flagged(outcome: EvaluationOutcome, prefix: str) -> None:
        if not outcome.is_flagged:
            return
        message = f"{prefix}: {outcome.status.value} - {outcome.details}"
        logger.error(message)
        raise DocumentSecurityError(message, outcome=outcome)
