"""
Failure taxonomy for the career analysis pipeline and the speech/identity proxies.

Every failure leaving a route is one of these; the handler registered in
app.main renders it as {"error": message} with the error's status code.
Diagnostic detail stays on the exception for logging and never reaches the body.
"""
from typing import Optional

from fastapi import Request
from fastapi.responses import JSONResponse


class CareerServiceError(Exception):
    """Base class: public message + HTTP status, private diagnostic detail"""

    status_code = 500
    default_message = "An unexpected error occurred"

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        detail: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        self.message = message or self.default_message
        self.detail = detail
        if status_code is not None:
            self.status_code = status_code
        super().__init__(detail or self.message)

    def to_body(self) -> dict:
        return {"error": self.message}


class ConfigurationError(CareerServiceError):
    """A required credential is absent; the body never names which one"""

    default_message = "AI service is not configured. Please contact support."


class ValidationError(CareerServiceError):
    """Caller input rejected before any external call"""

    status_code = 400
    default_message = "Invalid request"


class UpstreamError(CareerServiceError):
    """The model/provider call failed, returned non-success, or returned no content"""

    default_message = "Failed to analyze career path. Please try again."

    def __init__(self, message: Optional[str] = None, *, upstream_status: Optional[int] = None, **kwargs):
        self.upstream_status = upstream_status
        super().__init__(message, **kwargs)


class ProviderError(UpstreamError):
    """Speech provider failure; the provider's own diagnostic text is forwarded as `details`"""

    default_message = "TTS failed"

    def to_body(self) -> dict:
        return {"error": self.message, "details": self.detail or ""}


class MalformedOutputError(CareerServiceError):
    """The model reply could not be parsed into the expected document"""

    default_message = "Failed to parse career analysis"


class UnexpectedError(CareerServiceError):
    """Catch-all for anything not classified above"""


async def career_service_error_handler(request: Request, exc: CareerServiceError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())
