from __future__ import annotations

import contextlib
import io
import os
import stat
import tempfile
import unittest
from pathlib import Path

from oldcpio import ArchiveReader, UnsafePathError
from oldcpio.pathutil import norm_path, safe_join

from cpio_fixtures import FOO_EXEC, FOO_FILE, cpio_test_archive, odc_archive, odc_record


class NormPathTests(unittest.TestCase):
    def test_normalizes(self):
        self.assertEqual(norm_path("./a//b/./c/"), "a/b/c")
        self.assertEqual(norm_path("/etc/passwd"), "etc/passwd")
        self.assertEqual(norm_path("a\\b"), "a/b")
        self.assertEqual(norm_path("."), "")

    def test_rejects_parent_segments(self):
        for p in ("../x", "a/../../b", "a/.."):
            with self.assertRaises(UnsafePathError):
                norm_path(p)
        # still a ValueError for callers that only know the stdlib
        with self.assertRaises(ValueError):
            norm_path("..")


class ExtractTests(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.out = Path(self._tmp.name)

    def test_extractall_recreates_tree(self):
        r = ArchiveReader(io.BytesIO(cpio_test_archive()))
        written = r.extractall(str(self.out))
        self.assertEqual(len(written), 4)
        root = self.out / "cpio_test"
        self.assertTrue(root.is_dir())
        self.assertTrue((root / "test_dir").is_dir())
        self.assertEqual((root / "test_dir" / "test_file").read_bytes(), FOO_FILE)
        self.assertEqual((root / "test_executable").read_bytes(), FOO_EXEC)

    @unittest.skipIf(os.name == "nt", "POSIX permission bits")
    def test_extract_applies_mode_and_mtime(self):
        r = ArchiveReader(io.BytesIO(cpio_test_archive()))
        r.extractall(str(self.out))
        exe = self.out / "cpio_test" / "test_executable"
        plain = self.out / "cpio_test" / "test_dir" / "test_file"
        self.assertEqual(stat.S_IMODE(exe.stat().st_mode), 0o755)
        self.assertEqual(stat.S_IMODE(plain.stat().st_mode), 0o644)
        self.assertEqual(int(plain.stat().st_mtime), 1300000100)
        self.assertEqual(int((self.out / "cpio_test").stat().st_mtime), 1300000000)

    def test_extract_single_entry_creates_parents(self):
        r = ArchiveReader(io.BytesIO(cpio_test_archive()))
        entry = [e for e in r if e.filename.endswith("test_file")][0]
        dst = r.extract(entry, str(self.out))
        self.assertEqual(Path(dst).read_bytes(), FOO_FILE)

    def test_parent_escape_refused(self):
        blob = odc_archive([odc_record("../evil", b"x")])
        r = ArchiveReader(io.BytesIO(blob))
        with self.assertRaises(UnsafePathError):
            r.extractall(str(self.out))
        self.assertFalse((self.out.parent / "evil").exists())

    def test_absolute_name_lands_inside_outdir(self):
        blob = odc_archive([odc_record("/abs/file", b"data")])
        ArchiveReader(io.BytesIO(blob)).extractall(str(self.out))
        self.assertEqual((self.out / "abs" / "file").read_bytes(), b"data")

    def test_special_files_are_skipped_with_warning(self):
        blob = odc_archive([odc_record("dev/null", b"", mode=0o020666, rdev=0o103)])
        err = io.StringIO()
        with contextlib.redirect_stderr(err):
            written = ArchiveReader(io.BytesIO(blob)).extractall(str(self.out))
        self.assertEqual(written, [])
        self.assertIn("Warning: skipping dev/null", err.getvalue())
        self.assertFalse((self.out / "dev" / "null").exists())

    @unittest.skipUnless(hasattr(os, "symlink") and os.name != "nt", "symlinks")
    def test_symlink_entry(self):
        blob = odc_archive(
            [
                odc_record("d", mode=0o040755),
                odc_record("d/target", b"content"),
                odc_record("d/link", b"target", mode=0o120777),
            ]
        )
        ArchiveReader(io.BytesIO(blob)).extractall(str(self.out))
        link = self.out / "d" / "link"
        self.assertTrue(link.is_symlink())
        self.assertEqual(os.readlink(link), "target")
        self.assertEqual(link.read_bytes(), b"content")


@unittest.skipUnless(hasattr(os, "symlink") and os.name != "nt", "symlinks")
class SymlinkContainmentTests(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.base = Path(self._tmp.name)
        self.out = self.base / "out"
        self.out.mkdir()

    def test_file_replaces_symlink_instead_of_following_it(self):
        victim = self.base / "victim.txt"
        victim.write_bytes(b"original")
        blob = odc_archive(
            [
                odc_record("x", str(victim).encode(), mode=0o120777),
                odc_record("x", b"PWNED"),
            ]
        )
        ArchiveReader(io.BytesIO(blob)).extractall(str(self.out))
        self.assertEqual(victim.read_bytes(), b"original")
        self.assertFalse((self.out / "x").is_symlink())
        self.assertEqual((self.out / "x").read_bytes(), b"PWNED")

    def test_write_through_symlinked_directory_refused(self):
        outside = self.base / "outside"
        outside.mkdir()
        blob = odc_archive(
            [
                odc_record("d", str(outside).encode(), mode=0o120777),
                odc_record("d/planted", b"payload"),
            ]
        )
        with self.assertRaises(UnsafePathError):
            ArchiveReader(io.BytesIO(blob)).extractall(str(self.out))
        self.assertFalse((outside / "planted").exists())

    def test_directory_entry_over_symlink_refused(self):
        outside = self.base / "outside"
        outside.mkdir()
        blob = odc_archive(
            [
                odc_record("d", str(outside).encode(), mode=0o120777),
                odc_record("d", mode=0o040700),
                odc_record("d/sub", mode=0o040755),
            ]
        )
        with self.assertRaises(UnsafePathError):
            ArchiveReader(io.BytesIO(blob)).extractall(str(self.out))
        self.assertFalse((outside / "sub").exists())

    def test_single_entry_extract_checks_parents(self):
        outside = self.base / "outside"
        outside.mkdir()
        os.symlink(outside, self.out / "d")
        blob = odc_archive([odc_record("d/planted", b"payload")])
        r = ArchiveReader(io.BytesIO(blob))
        entry = r.list()[0]
        with self.assertRaises(UnsafePathError):
            r.extract(entry, str(self.out))
        self.assertFalse((outside / "planted").exists())

    def test_safe_join(self):
        (self.out / "real").mkdir()
        os.symlink(self.base, self.out / "up")
        self.assertEqual(safe_join(str(self.out), "real/f"), os.path.join(str(self.out), "real", "f"))
        self.assertEqual(safe_join(str(self.out), ""), str(self.out))
        # a symlink as the final component is left to the caller
        self.assertEqual(safe_join(str(self.out), "up"), os.path.join(str(self.out), "up"))
        with self.assertRaises(UnsafePathError):
            safe_join(str(self.out), "up/f")


if __name__ == "__main__":
    unittest.main()
