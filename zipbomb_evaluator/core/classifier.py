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
Classification of external parser failures.

Parsers fail for two very different reasons: the input is an attack that
tripped an internal safety check, or the input is simply damaged or from an
incompatible producer.  Telling the two apart is a heuristic.  The default
classifier looks for archive and bomb vocabulary in the failure's type name
and message; hosts that know their parser's exception contract better can
pass their own ``FailureClassifier`` to the evaluator.

Both false negatives (a bomb reported as ``PROCESSING_ERROR``) and false
positives (a corrupt but benign file reported as ``POSSIBLE_ZIP_BOMB``) are
expected outcomes.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from .models import EvaluationOutcome, EvaluationStatus, ParserFailure

logger = logging.getLogger(__name__)

FailureClassifier = Callable[[ParserFailure], bool]

# Lowercased fragments of exception type names that indicate an archive-level failure.
# Matches zipfile.BadZipFile, zipfile.LargeZipFile and pypdf's LimitReachedError.
SUSPICIOUS_KIND_FRAGMENTS: tuple[str, ...] = (
    "zip",
    "recordformat",
    "malformed",
    "limitreached",
)

# Lowercased fragments of failure messages.
# Message wording is parser-specific; matching is best-effort, not a contract.
SUSPICIOUS_MESSAGE_FRAGMENTS: tuple[str, ...] = (
    "zip",
    "bomb",
    "corrupt",
    "uncompressed",
    "ratio",
)


def classify_failure(failure: ParserFailure) -> bool:
    """Return ``True`` when *failure* looks like a decompression attack."""
    kind = failure.kind.lower()
    message = (failure.message or "").lower()
    if any(fragment in kind for fragment in SUSPICIOUS_KIND_FRAGMENTS):
        return True
    return any(fragment in message for fragment in SUSPICIOUS_MESSAGE_FRAGMENTS)


def outcome_for_failure(
    failure: ParserFailure,
    *,
    display_path: str,
    extension: str,
    declared_size: int,
    context: str,
    classifier: FailureClassifier = classify_failure,
) -> EvaluationOutcome:
    """Build the outcome for a parser failure using *classifier*."""
    flagged = bool(classifier(failure))
    details = f"{context} - Exception: {failure.kind} - Message: {failure.message}"
    if flagged:
        logger.warning("Potential zip bomb detected: %s - %s", display_path, details)
    else:
        logger.warning("Processing error (not classified as a threat): %s - %s", display_path, details)
    return EvaluationOutcome(
        display_path=display_path,
        is_flagged=flagged,
        status=EvaluationStatus.POSSIBLE_ZIP_BOMB if flagged else EvaluationStatus.PROCESSING_ERROR,
        declared_size=declared_size,
        extension=extension,
        details=details,
        cause=failure.exception,
    )
