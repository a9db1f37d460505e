# src/flashrepo/errors.py
from pathlib import Path
from typing import List, Tuple


class FlashRepoError(Exception):
    """Base class for every failure reported to the user."""


class NoWorkspaceError(FlashRepoError):
    def __init__(self, path=None):
        self.path = path
        if path is None:
            message = "No workspace folder open"
        else:
            message = f"No workspace folder at '{path}'"
        super().__init__(message)


class FileSystemError(OSError, FlashRepoError):
    """A read or write failure, keeping errno/strerror/filename of the cause."""

    @classmethod
    def wrap(cls, err: OSError) -> "FileSystemError":
        if isinstance(err, FileSystemError):
            return err
        if err.errno is None:
            wrapped = cls(str(err))
        else:
            wrapped = cls(err.errno, err.strerror, err.filename)
        wrapped.__cause__ = err
        return wrapped


class EmptyInputError(FlashRepoError):
    pass


class UnrecognizedFormatError(FlashRepoError):
    def __init__(self, message: str = "Not a Flash Repo snapshot"):
        super().__init__(message)


class HydrationError(FileSystemError):
    """
    Raised once every entry has been attempted and at least one write failed.
    Files written before and after the failures stay on disk.
    """

    def __init__(self, snapshot_dir: Path, failures: List[Tuple[str, OSError]]):
        self.snapshot_dir = snapshot_dir
        self.failures = failures
        details = "; ".join(f"{path} ({err.strerror or err})" for path, err in failures)
        super().__init__(f"{len(failures)} file(s) could not be written to {snapshot_dir}: {details}")
