"""
oldcpio: reader for old portable ASCII cpio archives (magic ``070707``).

The decode pipeline runs in three stages:

- records: the fixed 71-byte ASCII header, decoded into a HeaderRecord
- entry: header + NUL-terminated filename + payload, assembled into an Entry
- reader: ArchiveReader, which rewinds the stream and walks entries up to
  the ``TRAILER!!!`` record

Extraction to a directory is available via ArchiveReader.extract/extractall.
There is no writer and no support for the newc/crc or binary variants.
"""

__version__ = "0.1"

from .entry import Entry, read_entry
from .errors import ArchiveFormatError, CpioError, UnsafePathError
from .reader import ArchiveReader
from .records import HeaderRecord, read_header

__all__ = [
    "ArchiveReader",
    "Entry",
    "HeaderRecord",
    "read_entry",
    "read_header",
    "CpioError",
    "ArchiveFormatError",
    "UnsafePathError",
]
