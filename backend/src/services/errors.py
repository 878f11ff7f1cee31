"""Domain errors surfaced to API callers.

Each error carries the HTTP status the API layer answers with; the message is
what the caller sees, so it must never include storage details.
"""

from __future__ import annotations


class PortfolioError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(PortfolioError):
    status_code = 400
    default_message = "Invalid request"


class UnauthorizedError(PortfolioError):
    status_code = 401
    default_message = "Authorization header required"


class ForbiddenError(PortfolioError):
    status_code = 403
    default_message = "Invalid authorization token"


class NotFoundError(PortfolioError):
    status_code = 404
    default_message = "Not found"


class ConflictError(PortfolioError):
    status_code = 409
    default_message = "A profile with this email already exists."


class InternalError(PortfolioError):
    status_code = 500


class UpstreamError(PortfolioError):
    status_code = 502
    default_message = "Upstream service unavailable"
