from enum import Enum


class ErrorCode(str, Enum):
    INVALID_ID = "INVALID_ID"
    CONTENT_REQUIRED = "CONTENT_REQUIRED"
    CONTENT_TOO_LARGE = "CONTENT_TOO_LARGE"
    NOT_FOUND = "NOT_FOUND"
    EXPIRED = "EXPIRED"
    SERVER_ERROR = "SERVER_ERROR"

    @property
    def message(self) -> str:
        return _MESSAGES[self]

    @property
    def status_code(self) -> int:
        return _STATUS[self]


_MESSAGES = {
    ErrorCode.INVALID_ID: "Invalid ID",
    ErrorCode.CONTENT_REQUIRED: "Content required",
    ErrorCode.CONTENT_TOO_LARGE: "Content too large (max 100KB)",
    ErrorCode.NOT_FOUND: "Not found",
    ErrorCode.EXPIRED: "Expired",
    ErrorCode.SERVER_ERROR: "Server error",
}

_STATUS = {
    ErrorCode.INVALID_ID: 400,
    ErrorCode.CONTENT_REQUIRED: 400,
    ErrorCode.CONTENT_TOO_LARGE: 400,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.EXPIRED: 410,
    ErrorCode.SERVER_ERROR: 500,
}


class NoteError(Exception):
    """Raised by the note lifecycle; carries a code safe to show clients."""

    def __init__(self, code: ErrorCode):
        super().__init__(code.message)
        self.code = code

    @property
    def status_code(self) -> int:
        return self.code.status_code
