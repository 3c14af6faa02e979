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

"""ZipBomb Evaluator exceptions.

This module defines custom exceptions for ZipBomb Evaluator operations.
All exceptions inherit from ZipBombEvaluatorError for easy catching.

The evaluation engine itself never raises for a file under inspection; these
exceptions surface configuration problems and the integration shim's
security-rejection signal.

Example:
    >>> from zipbomb_evaluator.core.security_filter import DocumentSecurityFilter
    >>> from zipbomb_evaluator.core.exceptions import DocumentSecurityError
    >>>
    >>> security_filter = DocumentSecurityFilter()
    >>>
    >>> try:
    ...     security_filter.validate_document("upload.xlsx")
    ... except DocumentSecurityError as e:
    ...     print(f"Rejected: {e.outcome.status.value}")
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import EvaluationOutcome, EvaluationStatus


class ZipBombEvaluatorError(Exception):
    """Base exception for all ZipBomb Evaluator errors."""

    pass


class PolicyError(ZipBombEvaluatorError):
    """Raised when a limit policy cannot be loaded.

    This can indicate:
    - Unknown preset name
    - Malformed YAML
    - Negative or non-integer limits
    """

    pass


class DocumentSecurityError(ZipBombEvaluatorError):
    """Raised by the integration filter when a document is rejected.

    The flagged outcome is attached as ``outcome``.
    """

    def __init__(self, message: str, outcome: EvaluationOutcome | None = None):
        super().__init__(message)
        self.outcome = outcome


class ExtractionLimitExceeded(ZipBombEvaluatorError):
    """Raised by the bounded extractor when a nested entry breaks the extraction cap."""

    def __init__(self, status: EvaluationStatus, details: str, bytes_written: int = 0):
        super().__init__(details)
        self.status = status
        self.details = details
        self.bytes_written = bytes_written


class DocumentParseError(ZipBombEvaluatorError):
    """Raised by a built-in document parser when a file is structurally unusable."""

    pass


class OfficeFormatMismatch(DocumentParseError):
    """Raised by a legacy office parser when the bytes are a different container format."""

    pass
