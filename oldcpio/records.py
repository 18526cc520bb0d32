from __future__ import annotations

from dataclasses import dataclass
from typing import BinaryIO

from .constants import HEADER_FIELDS, HEADER_SIZE, MAGIC, READ_CHUNK
from .errors import ArchiveFormatError


# Header record (fixed 71 bytes, all ASCII digits)
#  - magic[6] dev[6] inode[6] mode[6] uid[6] gid[6] numlinks[6] rdev[6]
#  - mtime[11] namesize[6] filesize[11]
# Every numeric field is octal, usually zero-padded.


@dataclass(frozen=True)
class HeaderRecord:
    magic: int
    dev: int
    inode: int
    mode: int
    uid: int
    gid: int
    numlinks: int
    rdev: int
    mtime: int
    namesize: int
    filesize: int


def read_exact(f: BinaryIO, n: int, message: str) -> bytes:
    """Read exactly n bytes or raise ArchiveFormatError(message).

    Sizes come straight from the header (filesize reaches 8**11 - 1), so the
    read proceeds in chunks of at most READ_CHUNK bytes and never allocates
    more than the stream actually delivers.
    """
    if n <= READ_CHUNK:
        b = f.read(n)
        if b is None or len(b) != n:
            raise ArchiveFormatError(message)
        return b
    buf = bytearray()
    remaining = n
    while remaining:
        chunk = f.read(min(remaining, READ_CHUNK))
        if not chunk:
            raise ArchiveFormatError(message)
        buf += chunk
        remaining -= len(chunk)
    return bytes(buf)


def parse_field(name: str, chunk: bytes) -> int:
    """Decode one fixed-width run of octal digits.

    Writers zero-pad every field, but a full-width run (regular file modes
    such as ``100644``, 11-digit mtimes after 2004) has no leading zero and
    is still octal.
    """
    if not chunk.isdigit():
        raise ArchiveFormatError(f"header field {name!r} is not numeric: {chunk!r}")
    try:
        return int(chunk, 8)
    except ValueError as exc:
        raise ArchiveFormatError(f"header field {name!r} is not valid octal: {chunk!r}") from exc


def parse_header(data: bytes) -> HeaderRecord:
    if len(data) < HEADER_SIZE:
        raise ArchiveFormatError("header too short for ASCII CPIO header")
    if data[: len(MAGIC)] != MAGIC:
        raise ArchiveFormatError("not a valid ASCII CPIO archive")
    values = {}
    pos = 0
    for width, name in HEADER_FIELDS:
        values[name] = parse_field(name, data[pos : pos + width])
        pos += width
    return HeaderRecord(**values)


def read_header(f: BinaryIO) -> HeaderRecord:
    data = read_exact(f, HEADER_SIZE, "header too short for ASCII CPIO header")
    return parse_header(data)
