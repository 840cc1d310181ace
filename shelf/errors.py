"""Exception hierarchy shared by the repositories, services and entry point."""


class ShelfError(Exception):
    """Base class for every error raised by the ``shelf`` package."""


class StorageError(ShelfError):
    """The catalog file (or an interchange file) could not be read or written.

    Raised for missing directories, permission problems and malformed
    documents.  The original exception, when there is one, is chained as
    ``__cause__``.
    """

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


class ConfigError(ShelfError):
    """The configuration file is unreadable or not a JSON object."""
