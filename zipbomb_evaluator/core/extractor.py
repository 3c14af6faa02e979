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
Bounded extraction of nested archive entries.

Copies a single entry to a temporary file so it can be evaluated as if it
were standalone.  Two independent caps apply: the entry's declared size is
checked before any byte is copied, and the bytes actually written are
counted during the copy.  Zip metadata is attacker-controlled, so only the
second check is authoritative: stored and deflated entries are decoded from
their raw member data, and a finished entry whose size or CRC-32 differs from
what the directory declares is rejected as corrupt.

Every temporary file lives inside a ``with`` block owned by the caller and
is removed when that block exits, whatever the outcome.
"""

from __future__ import annotations

import logging
import os
import struct
import tempfile
import zipfile
import zlib
from collections.abc import Iterator
from contextlib import closing, contextmanager, nullcontext
from pathlib import Path

from .exceptions import ExtractionLimitExceeded
from .format_router import extension_of
from .limit_policy import LimitPolicy
from .models import EvaluationStatus

logger = logging.getLogger(__name__)

TEMP_PREFIX = "zbeval_"

LOCAL_HEADER_SIGNATURE = b"PK\x03\x04"

# Signature, fixed fields, then file name and extra field lengths.
_LOCAL_HEADER = struct.Struct("<4s22xHH")
_ENCRYPTED_FLAG = 0x1
_RAW_METHODS = (zipfile.ZIP_STORED, zipfile.ZIP_DEFLATED)


@contextmanager
def temporary_artifact(
    suffix: str = "",
    *,
    directory: str | Path | None = None,
    prefix: str = TEMP_PREFIX,
) -> Iterator[Path]:
    """Create an empty temporary file and delete it when the block exits."""
    fd, name = tempfile.mkstemp(prefix=prefix, suffix=suffix, dir=directory)
    os.close(fd)
    path = Path(name)
    logger.debug("Created temporary artifact %s", path)
    try:
        yield path
    finally:
        try:
            path.unlink(missing_ok=True)
            logger.debug("Removed temporary artifact %s", path)
        except OSError as e:
            logger.warning("Failed to remove temporary artifact %s: %s", path, e)


class BoundedExtractor:
    """Streams archive entries to temporary files under a hard byte cap."""

    def __init__(self, policy: LimitPolicy, temp_dir: str | Path | None = None):
        self.policy = policy
        self.temp_dir = temp_dir

    def check_declared_size(self, info: zipfile.ZipInfo, display_path: str) -> None:
        """Reject an entry whose declared size is already over the extraction cap."""
        cap = self.policy.max_extract_size_bytes
        if info.file_size > cap:
            raise ExtractionLimitExceeded(
                EvaluationStatus.NESTED_ENTRY_TOO_LARGE,
                (
                    f"Nested entry '{info.filename}' in '{display_path}' declares size {info.file_size:,} bytes "
                    f"(exceeds extraction safety limit of {cap:,} bytes)"
                ),
            )

    @contextmanager
    def extract(self, archive: zipfile.ZipFile, info: zipfile.ZipInfo, *, display_path: str) -> Iterator[Path]:
        """
        Extract *info* from *archive* into a temporary file.

        The temporary file keeps the entry's extension so that it routes the
        same way a standalone file would.  It is deleted when the ``with``
        block exits.

        Raises:
            ExtractionLimitExceeded: the declared or the actual size is over the cap
            zipfile.BadZipFile: the entry's data is corrupt or does not match
                its declared size or CRC-32
            OSError: the archive could not be read
        """
        self.check_declared_size(info, display_path)

        extension = extension_of(info.filename)
        suffix = f".{extension}" if extension else ""
        with temporary_artifact(suffix, directory=self.temp_dir) as temp_path:
            written = self._copy_bounded(archive, info, temp_path, display_path)
            logger.debug("Extracted %s bytes of '%s' from %s", written, info.filename, display_path)
            yield temp_path

    def _copy_bounded(self, archive: zipfile.ZipFile, info: zipfile.ZipInfo, target: Path, display_path: str) -> int:
        cap = self.policy.max_extract_size_bytes
        written = 0
        crc = 0
        with closing(self._member_chunks(archive, info)) as chunks, open(target, "wb") as dst:
            for chunk in chunks:
                written += len(chunk)
                if written > cap:
                    raise ExtractionLimitExceeded(
                        EvaluationStatus.NESTED_ENTRY_EXTRACTION_OVERFLOW,
                        (
                            f"Nested entry '{info.filename}' in '{display_path}' exceeded extraction limit "
                            f"during read ({written:,} bytes extracted before abort)"
                        ),
                        bytes_written=written,
                    )
                crc = zlib.crc32(chunk, crc)
                dst.write(chunk)

        if written != info.file_size:
            raise zipfile.BadZipFile(
                f"Uncompressed size mismatch for file '{info.filename}': "
                f"declared {info.file_size:,} bytes, extracted {written:,}"
            )
        if crc != info.CRC:
            raise zipfile.BadZipFile(f"Bad CRC-32 for file '{info.filename}'")
        return written

    def _member_chunks(self, archive: zipfile.ZipFile, info: zipfile.ZipInfo) -> Iterator[bytes]:
        """
        Yield the decompressed bytes of *info*.

        Stored and deflated entries are decoded from the raw member data, so
        the count reflects what the data really inflates to rather than the
        size the directory declares.  Encrypted entries and other compression
        methods go through ``zipfile``.
        """
        chunk_size = self.policy.extract_chunk_size
        if info.flag_bits & _ENCRYPTED_FLAG or info.compress_type not in _RAW_METHODS:
            with archive.open(info) as src:
                chunk = src.read(chunk_size)
                while chunk:
                    yield chunk
                    chunk = src.read(chunk_size)
            return

        source = open(archive.filename, "rb") if archive.filename else nullcontext(archive.fp)
        with source as fp:
            fp.seek(info.header_offset)
            header = fp.read(_LOCAL_HEADER.size)
            if len(header) != _LOCAL_HEADER.size:
                raise zipfile.BadZipFile(f"Truncated local header for file '{info.filename}'")
            signature, name_length, extra_length = _LOCAL_HEADER.unpack(header)
            if signature != LOCAL_HEADER_SIGNATURE:
                raise zipfile.BadZipFile(f"Bad magic number for file header of '{info.filename}'")
            fp.seek(info.header_offset + _LOCAL_HEADER.size + name_length + extra_length)

            if info.compress_type == zipfile.ZIP_STORED:
                remaining = info.compress_size
                while remaining > 0:
                    chunk = fp.read(min(chunk_size, remaining))
                    if not chunk:
                        raise zipfile.BadZipFile(f"Truncated data for file '{info.filename}'")
                    remaining -= len(chunk)
                    yield chunk
                return

            # Deflate streams end themselves; compress_size is not trusted either.
            decompressor = zlib.decompressobj(-zlib.MAX_WBITS)
            while not decompressor.eof:
                data = decompressor.unconsumed_tail or fp.read(chunk_size)
                try:
                    chunk = decompressor.decompress(data, chunk_size)
                except zlib.error as e:
                    raise zipfile.BadZipFile(f"Corrupt deflate data for file '{info.filename}': {e}") from e
                if chunk:
                    yield chunk
                elif not data and not decompressor.eof:
                    raise zipfile.BadZipFile(f"Truncated deflate data for file '{info.filename}'")
