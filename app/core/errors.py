"""Typed errors raised by services and mapped to HTTP/socket responses in one place."""

from typing import Any, Optional


class GeneralError(Exception):
    status_code = 500
    title = "General error"

    def __init__(self, detail: Optional[str] = None, *, extra: Optional[dict[str, Any]] = None):
        self.detail = detail or self.title
        self.extra = extra or {}
        super().__init__(self.detail)

    @property
    def name(self) -> str:
        return type(self).__name__

    def to_dict(self) -> dict[str, Any]:
        body = {
            "status": self.status_code,
            "title": self.title,
            "detail": self.detail,
            "type": self.name,
        }
        if self.extra:
            body["extra"] = self.extra
        return {"error": body}


class InvalidData(GeneralError):
    status_code = 400
    title = "Invalid data"


class Insufficient(GeneralError):
    status_code = 400
    title = "Insufficient"


class TooFrequent(GeneralError):
    status_code = 400
    title = "Too frequent"


class Expired(GeneralError):
    status_code = 400
    title = "Expired"


class NotAllowed(GeneralError):
    status_code = 401
    title = "Not allowed"


class Banned(GeneralError):
    status_code = 401
    title = "Banned"


class NeedsVerification(GeneralError):
    status_code = 401
    title = "Needs verification"


class AlreadyExists(GeneralError):
    status_code = 403
    title = "Already exists"


class DoesNotExist(GeneralError):
    status_code = 404
    title = "Does not exist"


class Database(GeneralError):
    title = "Database error"


class Internal(GeneralError):
    title = "Internal error"


class External(GeneralError):
    title = "External service error"
