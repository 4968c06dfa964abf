"""
异常定义

Per-file parse failures (DeclarationError) are always recovered inside the
engine. Everything else reaching the command line maps to exit code 3.
"""


class DetectorError(Exception):
    """Base class for go-detector failures."""
    pass


class ProjectReadError(DetectorError):
    """The project tree cannot be read (missing root, permission denied)."""
    pass


class DeclarationError(DetectorError):
    """A single Go source file could not be parsed."""
    pass


class FetchError(DetectorError):
    """Retrieving a remote source failed."""
    pass


class FetchNotFoundError(FetchError):
    """Remote resource answered 404; never retried."""
    pass


class FetchTimeoutError(FetchError):
    """Remote request timed out."""
    pass


class ArchiveError(FetchError):
    """Downloaded archive is corrupt or contains unsafe paths."""
    pass
