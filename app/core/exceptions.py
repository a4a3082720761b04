# app/core/exceptions.py
from typing import Any, Sequence


class TicketError(Exception):
    """Base error for ticket operations, rendered as {"error": message}."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(TicketError):
    status_code = 400

    @classmethod
    def from_errors(cls, errors: Sequence[dict[str, Any]]) -> "ValidationError":
        """Build from pydantic/FastAPI error dicts, keeping only the first violation."""
        if not errors:
            return cls("Invalid request")
        first = errors[0]
        # loc looks like ("body", "title") or ("body", "attachmentUrls", 0)
        loc = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path")]
        msg = first.get("msg", "Invalid value")
        if loc:
            return cls(f"{'.'.join(loc)}: {msg}")
        return cls(msg)


class NotFoundError(TicketError):
    status_code = 404

    def __init__(self, message: str = "Ticket not found"):
        super().__init__(message)


class StorageError(TicketError):
    status_code = 500

    def __init__(self, message: str = "Internal server error", detail: str | None = None):
        super().__init__(message)
        # Raw driver message, only sent to clients when explicitly enabled
        self.detail = detail


__all__ = ["TicketError", "ValidationError", "NotFoundError", "StorageError"]
