"""Exception hierarchy for PageScribe."""


class PageScribeError(Exception):
    """Base exception for all PageScribe errors."""


class AnalyzerError(PageScribeError):
    """Raised when page or element analysis fails."""


class DetachedElementError(AnalyzerError):
    """Raised when an element can no longer be read from the DOM."""


class GeneratorError(PageScribeError):
    """Raised when test generation fails."""


class StorageError(PageScribeError):
    """Raised when storage operations fail."""


class SnapshotError(StorageError):
    """Raised when the analysis snapshot cannot be read."""


class SnapshotNotFoundError(SnapshotError):
    """Raised when no analysis snapshot exists yet."""


class ConfigError(PageScribeError):
    """Raised when configuration is invalid."""
