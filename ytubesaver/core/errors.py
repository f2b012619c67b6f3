from typing import Dict, Optional

from fastapi import HTTPException


class ServiceError(HTTPException):
    """
    Failure reported to API callers as {success: false, message, error?}.
    `error` carries diagnostic text (e.g. yt-dlp stderr) when there is any.
    """
    status_code = 500

    def __init__(
        self,
        message: str,
        error: Optional[str] = None,
        status_code: Optional[int] = None,
        headers: Optional[Dict[str, str]] = None
    ):
        super().__init__(status_code=status_code or self.status_code, detail=message, headers=headers)
        self.message = message
        self.error = error


class InvalidUrlError(ServiceError):
    """Missing or unsupported URL, rejected before any subprocess runs"""
    status_code = 400


class ToolInvocationError(ServiceError):
    """yt-dlp could not be started or exited non-zero"""
    status_code = 500


class ToolTimeoutError(ServiceError):
    """yt-dlp exceeded its bounded wait and was killed"""
    status_code = 504


class ToolOutputParseError(ServiceError):
    """yt-dlp exited cleanly but its output could not be parsed"""
    status_code = 500


class OutputNotFoundError(ServiceError):
    """yt-dlp reported success but no output file exists"""
    status_code = 500


class RateLimitedError(ServiceError):
    status_code = 429


class ForbiddenError(ServiceError):
    status_code = 403
