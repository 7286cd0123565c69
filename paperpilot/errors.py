from typing import Any, Dict, Optional

from .llm.base import CompletionFailure, CompletionRateLimited, CompletionTimeout


class PaperPilotError(Exception):
    """Base error carrying the HTTP status it is reported with."""
    status_code: int = 500

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> Dict[str, Any]:
        body = {"error": self.message}
        if self.details:
            body["details"] = self.details
        return body


class TaskValidationError(PaperPilotError):
    status_code = 400


class UpstreamTimeout(PaperPilotError):
    status_code = 504


class UpstreamRateLimited(PaperPilotError):
    status_code = 429


class UpstreamError(PaperPilotError):
    status_code = 500


def from_completion_failure(failure: CompletionFailure, message: str,
                            timeout_message: str = "Request timeout. Please try again.") -> PaperPilotError:
    """Translate a classified completion failure into the error reported to callers.

    `message` is used for generic failures; timeouts and rate limits get their
    fixed user-facing text.
    """
    if isinstance(failure, CompletionTimeout):
        return UpstreamTimeout(timeout_message)
    if isinstance(failure, CompletionRateLimited):
        return UpstreamRateLimited("Rate limit exceeded. Please wait a moment.")
    return UpstreamError(message, details=str(failure))
