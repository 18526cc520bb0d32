from __future__ import annotations

import os
import sys
from typing import BinaryIO, Callable, Iterator, List, Optional, Union

from .entry import Entry, read_entry
from .errors import CpioError, UnsafePathError
from .pathutil import norm_path, safe_join


def _safe_chmod(path: str, mode: Optional[int]) -> None:
    """Best-effort chmod that never raises.

    Args:
        path: Destination filesystem path to update.
        mode: POSIX permission bits to apply. If None, no change is made.
    """
    if mode is None:
        return
    try:
        os.chmod(path, mode)
    except OSError as exc:
        print(f"Warning: failed to set mode on {path}: {exc}", file=sys.stderr)


def _safe_utime(path: str, mtime: Optional[int]) -> None:
    """Best-effort utime that never raises; atime is set to mtime."""
    if mtime is None:
        return
    try:
        os.utime(path, (mtime, mtime), follow_symlinks=False)
    except (OSError, NotImplementedError) as exc:
        print(f"Warning: failed to set timestamps on {path}: {exc}", file=sys.stderr)


class ArchiveReader:
    """Sequential reader for old portable ASCII cpio archives.

    ``source`` is either a binary stream supporting ``read(n)`` and
    ``seek(0)``, or a filesystem path. A path is opened by ``open()`` (or the
    context manager) and closed again by ``close()``; a stream handed in by
    the caller is never closed here.

    Every pass over the entries starts by rewinding the stream, so the reader
    can be iterated repeatedly, but never by two passes at once.
    """

    def __init__(self, source: Union[str, os.PathLike, BinaryIO]):
        if isinstance(source, (str, os.PathLike)):
            self.path: Optional[str] = os.fspath(source)
            self.f: Optional[BinaryIO] = None
        else:
            self.path = None
            self.f = source

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def open(self):
        if self.f is not None:
            return
        self.f = open(self.path, "rb")

    def close(self):
        if self.f is not None and self.path is not None:
            self.f.close()
            self.f = None

    def _stream(self) -> BinaryIO:
        if self.f is None:
            raise RuntimeError("Archive not open")
        return self.f

    def __iter__(self) -> Iterator[Entry]:
        return self.iter_entries()

    def iter_entries(self) -> Iterator[Entry]:
        f = self._stream()
        f.seek(0)
        while True:
            entry = read_entry(f)
            if entry.is_trailer():
                return
            yield entry

    def each_entry(self, callback: Callable[[Entry], None]) -> int:
        count = 0
        for entry in self.iter_entries():
            callback(entry)
            count += 1
        return count

    def list(self) -> List[Entry]:
        return list(self.iter_entries())

    def verify(self) -> int:
        """Decode the whole archive once and return the number of entries.

        Any malformed record raises ArchiveFormatError.
        """
        return sum(1 for _ in self.iter_entries())

    def extract(self, entry: Entry, outdir: str = ".") -> Optional[str]:
        """Write one entry below ``outdir`` and return the path written.

        Directories and regular files are always written; symlinks are
        created where the platform allows it. Other entry types (devices,
        fifos, sockets) are skipped with a warning and None is returned.
        Permission bits and mtime are applied best-effort.
        """
        rel = norm_path(entry.filename)
        dst = safe_join(outdir, rel)
        if entry.is_dir():
            if os.path.islink(dst):
                raise UnsafePathError(f"Refusing to use symlink {dst!r} as a directory")
            os.makedirs(dst, exist_ok=True)
            _safe_chmod(dst, entry.permissions)
            _safe_utime(dst, entry.mtime)
            return dst
        if not (entry.is_file() or entry.is_symlink()):
            print(
                f"Warning: skipping {entry.filename}: unsupported file type {entry.file_type:06o}",
                file=sys.stderr,
            )
            return None
        if not rel:
            raise CpioError(f"Entry has no usable path: {entry.filename!r}")
        parent = os.path.dirname(dst)
        if parent:
            os.makedirs(parent, exist_ok=True)
        if entry.is_file():
            if os.path.islink(dst):
                os.remove(dst)
            with open(dst, "wb") as wf:
                wf.write(entry.data)
            _safe_chmod(dst, entry.permissions)
            _safe_utime(dst, entry.mtime)
            return dst
        symlink_fn = getattr(os, "symlink", None)
        if symlink_fn is None:
            print(f"Warning: symlinks unsupported, skipping {entry.filename}", file=sys.stderr)
            return None
        if os.path.lexists(dst):
            os.remove(dst)
        try:
            symlink_fn(entry.link_target(), dst)
        except OSError as exc:
            print(f"Warning: failed to create symlink {dst}: {exc}", file=sys.stderr)
            return None
        return dst

    def extractall(self, outdir: str = ".") -> List[str]:
        """Extract every entry; directory modes and mtimes are applied last."""
        written: List[str] = []
        dirs: List[tuple] = []
        for entry in self.iter_entries():
            if entry.is_dir():
                dst = safe_join(outdir, norm_path(entry.filename))
                if os.path.islink(dst):
                    raise UnsafePathError(f"Refusing to use symlink {dst!r} as a directory")
                os.makedirs(dst, exist_ok=True)
                dirs.append((dst, entry))
                written.append(dst)
                continue
            path = self.extract(entry, outdir)
            if path is not None:
                written.append(path)
        # deepest first
        for dst, entry in sorted(dirs, key=lambda item: item[0], reverse=True):
            _safe_chmod(dst, entry.permissions)
            _safe_utime(dst, entry.mtime)
        return written
