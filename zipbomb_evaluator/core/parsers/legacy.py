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
Legacy binary Office parsers (xls, doc, ppt).

Legacy documents are OLE2 compound files.  Each format keeps its content in
a well-known stream; the parser opens the container with olefile and reads
that stream end to end.  A file carrying a legacy extension but zip bytes
(an OOXML document renamed to ``.xls``) is reported as a format mismatch.
"""

from __future__ import annotations

import logging
from pathlib import Path

import olefile

from ..exceptions import DocumentParseError, OfficeFormatMismatch
from ..file_magic import is_zip_container
from ..models import FormatFamily
from .base import BaseDocumentParser

logger = logging.getLogger(__name__)

# Main content stream(s) per format, in lookup order
_MAIN_STREAMS: dict[FormatFamily, tuple[str, ...]] = {
    FormatFamily.XLS: ("Workbook", "Book"),
    FormatFamily.DOC: ("WordDocument",),
    FormatFamily.PPT: ("PowerPoint Document",),
}


class LegacyOfficeParser(BaseDocumentParser):
    """Validates an OLE2 compound document by reading its main stream."""

    def __init__(self, family: FormatFamily):
        if family not in _MAIN_STREAMS:
            raise ValueError(f"No legacy office layout for {family.value}")
        super().__init__("olefile", family)
        self.streams = _MAIN_STREAMS[family]

    def parse(self, path: Path) -> None:
        if is_zip_container(path):
            raise OfficeFormatMismatch(
                f"File appears to be a newer Office Open XML document, not a legacy .{self.family.value} file"
            )
        if not olefile.isOleFile(str(path)):
            raise DocumentParseError(f"Not an OLE2 compound document: {path.name}")

        with olefile.OleFileIO(str(path)) as ole:
            stream = next((name for name in self.streams if ole.exists(name)), None)
            if stream is None:
                raise DocumentParseError(f"Missing '{self.streams[0]}' stream in .{self.family.value} document")
            data = ole.openstream(stream).read()
        logger.debug("Read %d bytes from '%s' stream of %s", len(data), stream, path)
