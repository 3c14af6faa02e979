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

"""PDF parser backed by pypdf."""

from __future__ import annotations

import logging
from pathlib import Path

from pypdf import PdfReader

from ..models import FormatFamily
from .base import BaseDocumentParser

logger = logging.getLogger(__name__)


class PdfParser(BaseDocumentParser):
    """Extracts the text of every page.

    pypdf enforces its own output limits on FlateDecode streams and raises
    ``LimitReachedError`` when they trip; the classifier treats that as a bomb.
    """

    def __init__(self):
        super().__init__("pypdf", FormatFamily.PDF)

    def parse(self, path: Path) -> None:
        reader = PdfReader(str(path), strict=False)
        chars = 0
        for page in reader.pages:
            chars += len(page.extract_text() or "")
        logger.debug("Extracted %d characters from %d pages of %s", chars, len(reader.pages), path)
