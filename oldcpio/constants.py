# Old portable ASCII cpio ("odc") layout.
MAGIC = b"070707"

# (width, name) in on-disk order
HEADER_FIELDS = (
    (6, "magic"),
    (6, "dev"),
    (6, "inode"),
    (6, "mode"),
    (6, "uid"),
    (6, "gid"),
    (6, "numlinks"),
    (6, "rdev"),
    (11, "mtime"),
    (6, "namesize"),
    (11, "filesize"),
)

HEADER_SIZE = sum(width for width, _ in HEADER_FIELDS)  # 71

TRAILER_NAME = b"TRAILER!!!"

# Mode bits
S_IFMT = 0o170000
S_IFDIR = 0o040000
S_IFREG = 0o100000
S_IFLNK = 0o120000

S_IXUSR = 0o000100
S_IXGRP = 0o000010
S_IXOTH = 0o000001
EXEC_MASK = S_IXUSR | S_IXGRP | S_IXOTH

PERM_MASK = 0o7777

# Largest single read issued while pulling a name or payload
READ_CHUNK = 1 << 20
