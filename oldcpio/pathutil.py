from __future__ import annotations

import os

from .errors import UnsafePathError


def norm_path(p: str) -> str:
    """Canonical relative form of a cpio member name.

    ``./a//b/`` becomes ``a/b``; a leading ``/`` is dropped so absolute
    members land inside the output directory. A ``..`` segment raises
    UnsafePathError. The root itself (``.``) normalizes to ``""``.
    """
    parts = [q for q in p.replace("\\", "/").split("/") if q not in ("", ".")]
    if ".." in parts:
        raise UnsafePathError(f"Path may not contain '..': {p!r}")
    return "/".join(parts)


def _is_within(path: str, root: str) -> bool:
    return path == root or path.startswith(root.rstrip(os.sep) + os.sep)


def safe_join(outdir: str, rel: str) -> str:
    """Join a normalized member name onto ``outdir`` without leaving it.

    Every existing directory between ``outdir`` and the member must be a
    real directory: a symlink anywhere in that chain raises UnsafePathError,
    as does a parent whose resolved location is outside ``outdir``. The last
    component is not checked; callers decide what to do with a symlink there.
    """
    base = outdir or "."
    if not rel:
        return base
    parts = rel.split("/")
    cur = base
    for part in parts[:-1]:
        cur = os.path.join(cur, part)
        if os.path.islink(cur):
            raise UnsafePathError(f"Refusing to extract through symlink {cur!r}")
    dst = os.path.join(base, *parts)
    root = os.path.realpath(base)
    if not _is_within(os.path.realpath(os.path.dirname(dst)), root):
        raise UnsafePathError(f"Extraction target escapes {base!r}: {rel!r}")
    return dst
