"""
Fatal preview errors.

Only failures that abort a job live here. Network trouble while resolving a
link is never an error (it just means "not reachable"), and malformed
structured data is logged and ignored.

    PreviewError (base, carries code + message)
    ├── DownloadError              a source or thumbnail could not be fetched
    ├── ToolError                  an external tool exited non-zero, timed out
    │                              or did not produce its output file
    └── UnexpectedContentTypeError a file turned out not to be what we needed
"""

from typing import Iterable


class PreviewError(Exception):

    def __init__(self, message: str, code: int = 500):
        super().__init__(message)
        self.code = code
        self.message = message

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message}


class DownloadError(PreviewError):
    pass


class ToolError(PreviewError):
    pass


class UnexpectedContentTypeError(PreviewError):

    def __init__(self, what: str, expected: Iterable[str], actual: str | None):
        self.expected = tuple(expected)
        self.actual = actual
        super().__init__(
            f"Unexpected MIME type '{actual}' for {what} (expected {' or '.join(self.expected)})"
        )
