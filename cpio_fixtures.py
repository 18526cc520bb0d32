"""Helpers that format odc cpio bytes for the tests."""
from __future__ import annotations

from typing import Iterable, Optional


def odc_header(
    *,
    mode: int,
    namesize: int,
    filesize: int,
    dev: int = 0o1,
    inode: int = 0,
    uid: int = 0,
    gid: int = 0,
    numlinks: int = 1,
    rdev: int = 0,
    mtime: int = 0,
    magic: bytes = b"070707",
) -> bytes:
    body = "%06o%06o%06o%06o%06o%06o%06o%011o%06o%011o" % (
        dev, inode, mode, uid, gid, numlinks, rdev, mtime, namesize, filesize
    )
    return magic + body.encode("ascii")


def odc_record(name: str, data: bytes = b"", *, mode: int = 0o100644, **fields) -> bytes:
    raw_name = name.encode("utf-8") + b"\x00"
    return odc_header(mode=mode, namesize=len(raw_name), filesize=len(data), **fields) + raw_name + data


def odc_trailer() -> bytes:
    return odc_record("TRAILER!!!", b"", mode=0, numlinks=1)


def odc_archive(records: Iterable[bytes], *, block: Optional[int] = 512) -> bytes:
    blob = b"".join(records) + odc_trailer()
    if block:
        blob += b"\x00" * (-len(blob) % block)
    return blob


FOO_FILE = b"foobarbazbeep"
FOO_EXEC = b"foobarbaz"


def cpio_test_archive() -> bytes:
    """cpio_test/ with a nested directory, a plain file and an executable."""
    return odc_archive(
        [
            odc_record("cpio_test", mode=0o040755, inode=1, numlinks=3, mtime=1300000000),
            odc_record("cpio_test/test_dir", mode=0o040755, inode=2, numlinks=2, mtime=1300000000),
            odc_record("cpio_test/test_dir/test_file", FOO_FILE, mode=0o100644, inode=3, mtime=1300000100),
            odc_record("cpio_test/test_executable", FOO_EXEC, mode=0o100755, inode=4, mtime=1300000200),
        ]
    )
