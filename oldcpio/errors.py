class CpioError(Exception):
    """Base class for oldcpio errors."""


class ArchiveFormatError(CpioError):
    """The byte stream is not a well-formed old ASCII cpio archive."""


# Extraction
class UnsafePathError(CpioError, ValueError):
    pass
