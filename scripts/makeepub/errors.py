"""
Error types raised by the book pipeline.

Every failure aborts the current run; the command line reports the
message (which always names the offending path) and exits non-zero.
Plain read/write failures are left as the built-in OSError.
"""


class MakeEpubError(Exception):
    """Base class for all pipeline errors."""
    pass


class ConfigError(MakeEpubError):
    """Raised when metadata.yaml is missing or invalid."""
    pass


class ContentError(MakeEpubError):
    """Raised when a chapter source cannot be read."""
    pass


class StyleError(MakeEpubError):
    """Raised when a stylesheet is missing or fails to compile."""
    pass


class TemplateError(MakeEpubError):
    """Raised for a missing template, bad syntax, or an undefined variable."""
    pass


class ManifestError(MakeEpubError):
    """Raised when a file cannot be given a media type."""
    pass


class PackError(MakeEpubError):
    """Raised when a build artifact is missing at pack time."""
    pass


class BuildStateError(MakeEpubError):
    """Raised when a pipeline step is called out of order."""
    pass
