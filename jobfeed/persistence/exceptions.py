"""Persistence layer exceptions.

All store exceptions inherit from StoreError for easy catching.
"""


class StoreError(Exception):
    """Base exception for all job store errors."""

    def __init__(self, message: str, path: str) -> None:
        super().__init__(message)
        self.path = path


class StoreReadError(StoreError):
    """Raised when the jobs file exists but cannot be read or decoded.

    Recoverable: JobStore.load() logs it and treats the store as empty.
    """

    pass


class StoreWriteError(StoreError):
    """Raised when the jobs file cannot be replaced.

    Fatal for the run. The previous file is left untouched.
    """

    pass
