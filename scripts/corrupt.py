from __future__ import annotations

import argparse
import os
import random
import sys
from typing import List, Optional, Sequence, Tuple

from oldcpio.constants import HEADER_SIZE, MAGIC
from oldcpio.entry import read_entry
from oldcpio.errors import CpioError


def entry_spans(path: str) -> List[Tuple[int, int, int]]:
    """Return (record_offset, payload_offset, payload_len) for each record, trailer included."""
    spans = []
    with open(path, "rb") as f:
        while True:
            start = f.tell()
            entry = read_entry(f)
            end = f.tell()
            spans.append((start, end - len(entry.data), len(entry.data)))
            if entry.is_trailer():
                return spans


def xor_bytes(path: str, offsets: Sequence[int], mask: int = 0xFF) -> int:
    """XOR each listed byte of the archive with ``mask`` in place.

    All offsets are validated before anything is written. Returns the number
    of bytes changed.
    """
    with open(path, "rb") as f:
        blob = bytearray(f.read())
    for off in offsets:
        if off < 0 or off >= len(blob):
            raise ValueError(f"Offset {off} outside archive (0..{len(blob) - 1})")
    for off in offsets:
        blob[off] ^= mask & 0xFF
    with open(path, "wb") as f:
        f.write(blob)
    return len(offsets)


def candidate_offsets(path: str, region: str, skip_first_header: bool = False) -> List[int]:
    """Offsets eligible for random damage: header bytes, payload bytes or any byte."""
    if region == "any":
        lo = HEADER_SIZE if skip_first_header else 0
        return list(range(lo, os.path.getsize(path)))
    spans = entry_spans(path)
    if skip_first_header and region == "headers":
        spans = spans[1:]
    if region == "headers":
        return [o for start, _p, _n in spans for o in range(start, start + HEADER_SIZE)]
    return [o for _s, payload_off, n in spans for o in range(payload_off, payload_off + n)]


def truncate_payload(path: str, index: int, drop: int = 1) -> int:
    """Remove ``drop`` payload bytes from record ``index``, leaving its header as is.

    Everything after the removed bytes shifts down. Returns the offset of the
    first removed byte.
    """
    spans = entry_spans(path)
    if index < 0 or index >= len(spans) - 1:
        raise ValueError(f"Entry index out of range (0..{len(spans) - 2})")
    _start, payload_off, payload_len = spans[index]
    if drop < 1 or drop > payload_len:
        raise ValueError(f"Entry {index} has {payload_len} payload byte(s); cannot drop {drop}")
    cut = payload_off + payload_len - drop
    with open(path, "rb") as f:
        blob = f.read()
    with open(path, "wb") as f:
        f.write(blob[:cut] + blob[cut + drop :])
    return cut


def cmd_by_offset(args: argparse.Namespace) -> None:
    xor_bytes(args.archive, [args.offset], mask=args.xor)
    print(f"Flipped 1 byte at offset {args.offset}")


def cmd_magic(args: argparse.Namespace) -> None:
    spans = entry_spans(args.archive)
    if args.index < 0 or args.index >= len(spans):
        raise ValueError(f"Record index out of range (0..{len(spans) - 1})")
    off = spans[args.index][0] + len(MAGIC) - 1
    xor_bytes(args.archive, [off], mask=0x01)
    print(f"Damaged magic of record {args.index} at archive offset {off}")


def cmd_truncate(args: argparse.Namespace) -> None:
    off = truncate_payload(args.archive, args.index, drop=args.drop)
    print(f"Dropped {args.drop} payload byte(s) from entry {args.index} at archive offset {off}")


def cmd_random(args: argparse.Namespace) -> None:
    pool = candidate_offsets(args.archive, args.region, skip_first_header=args.skip_first_header)
    if not pool:
        raise ValueError(f"No {args.region} bytes to corrupt")
    rng = random.Random(args.seed)
    picks = rng.sample(pool, min(args.count, len(pool)))
    flips = xor_bytes(args.archive, picks, mask=args.xor)
    print(f"Flipped {flips} {args.region} byte(s) at random offsets")


def main(argv: Optional[list[str]] = None) -> None:
    ap = argparse.ArgumentParser(prog="oldcpio.corrupt", description="Damage odc cpio archives for testing")
    sub = ap.add_subparsers(dest="cmd", required=True)

    p_off = sub.add_parser("by-offset", help="Flip one byte at an absolute archive offset")
    p_off.add_argument("archive", help="Path to .cpio archive")
    p_off.add_argument("--offset", type=int, required=True, help="Absolute byte offset in archive")
    p_off.add_argument("--xor", type=lambda x: int(x, 0), default=0xFF, help="XOR mask to apply (default 0xFF)")
    p_off.set_defaults(func=cmd_by_offset)

    p_magic = sub.add_parser("magic", help="Break the magic number of one record")
    p_magic.add_argument("archive", help="Path to .cpio archive")
    p_magic.add_argument("--index", type=int, default=0, help="Record index (0-based, default 0)")
    p_magic.set_defaults(func=cmd_magic)

    p_trunc = sub.add_parser("truncate", help="Drop payload bytes from one entry without fixing its header")
    p_trunc.add_argument("archive", help="Path to .cpio archive")
    p_trunc.add_argument("--index", type=int, required=True, help="Entry index (0-based)")
    p_trunc.add_argument("--drop", type=int, default=1, help="Number of bytes to drop (default 1)")
    p_trunc.set_defaults(func=cmd_truncate)

    p_rand = sub.add_parser("random", help="Flip N distinct random bytes in the archive")
    p_rand.add_argument("archive", help="Path to .cpio archive")
    p_rand.add_argument("--count", type=int, default=1, help="Number of random byte flips (default 1)")
    p_rand.add_argument("--seed", type=int, default=None, help="PRNG seed for reproducibility")
    p_rand.add_argument("--xor", type=lambda x: int(x, 0), default=0xFF, help="XOR mask to apply (default 0xFF)")
    p_rand.add_argument(
        "--region",
        choices=["any", "headers", "payloads"],
        default="any",
        help="Restrict flips to header bytes or payload bytes (default any)",
    )
    p_rand.add_argument("--skip-first-header", action="store_true", help="Never touch the first 71-byte header")
    p_rand.set_defaults(func=cmd_random)

    args = ap.parse_args(argv)
    try:
        args.func(args)
    except (CpioError, OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    main()
