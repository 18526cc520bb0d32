from __future__ import annotations

from dataclasses import dataclass
from functools import cached_property
from typing import BinaryIO

from .constants import (
    EXEC_MASK,
    PERM_MASK,
    S_IFDIR,
    S_IFLNK,
    S_IFMT,
    S_IFREG,
    TRAILER_NAME,
)
from .records import HeaderRecord, read_exact, read_header


@dataclass(frozen=True)
class Entry:
    header: HeaderRecord
    name: bytes  # filename field without its trailing NUL
    data: bytes

    @property
    def filename(self) -> str:
        return self.name.decode("utf-8", "surrogateescape")

    @property
    def mode(self) -> int:
        return self.header.mode

    @property
    def permissions(self) -> int:
        return self.header.mode & PERM_MASK

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def mtime(self) -> int:
        return self.header.mtime

    @property
    def uid(self) -> int:
        return self.header.uid

    @property
    def gid(self) -> int:
        return self.header.gid

    @cached_property
    def file_type(self) -> int:
        return self.header.mode & S_IFMT

    def is_trailer(self) -> bool:
        return self.name == TRAILER_NAME and len(self.data) == 0

    def is_dir(self) -> bool:
        return self.file_type == S_IFDIR

    def is_file(self) -> bool:
        return self.file_type == S_IFREG

    def is_symlink(self) -> bool:
        return self.file_type == S_IFLNK

    def is_executable(self) -> bool:
        return bool(self.header.mode & EXEC_MASK)

    def link_target(self) -> str:
        """Symlink target; odc stores it as the entry payload."""
        return self.data.decode("utf-8", "surrogateescape")


def read_entry(f: BinaryIO) -> Entry:
    """Read one header, its filename and its payload.

    Either a complete Entry is returned or ArchiveFormatError is raised;
    the trailer comes back as an ordinary Entry for the caller to test.
    """
    header = read_header(f)
    raw_name = read_exact(f, header.namesize, "namesize does not match available data")
    if raw_name.endswith(b"\x00"):
        raw_name = raw_name[:-1]
    data = read_exact(f, header.filesize, "filesize does not match available data")
    return Entry(header=header, name=raw_name, data=data)
