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
Base parser interface for document format validation.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from ..models import FormatFamily


class BaseDocumentParser(ABC):
    """Abstract base class for external document parsers.

    A parser is only asked whether a file opens and its text can be
    extracted; the text itself is discarded.
    """

    def __init__(self, name: str, family: FormatFamily):
        """
        Initialize parser.

        Args:
            name: Name of the library backing the parser
            family: Format family this parser validates
        """
        self.name = name
        self.family = family

    @abstractmethod
    def parse(self, path: Path) -> None:
        """
        Open *path* and extract its content.

        Args:
            path: File to parse

        Raises:
            Exception: any parser-level failure; the evaluator classifies it
        """
        pass

    def get_name(self) -> str:
        """Get the parser name."""
        return self.name
