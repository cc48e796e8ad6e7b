from typing import List, Optional


class PatchError(Exception):
    """Base class for everything that can go wrong while applying a diff."""


class DiffParseError(PatchError):
    def __init__(self, message: str = "Failed to parse diff format"):
        super().__init__(message)


class ContextNotFoundError(PatchError):
    """
    A hunk's old lines could not be located at or after the search cursor.

    Carries the first lines that were sought and the first lines of the file
    so callers can show why matching failed.
    """

    def __init__(
        self,
        message: str,
        expected: Optional[List[str]] = None,
        file_preview: Optional[List[str]] = None,
    ):
        super().__init__(message)
        self.expected = expected or []
        self.file_preview = file_preview or []


class FileApplyError(PatchError):
    """Reading, patching or writing a file on disk failed."""
