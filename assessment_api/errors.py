"""
Error taxonomy for the assessment relay.

ValidationError, ConfigError and UpstreamError reach the HTTP layer and are
rendered as a JSON {error, details} body. DispatchError never leaves the
webhook dispatcher.
"""

from typing import Any


class AssessmentError(Exception):
    """Base class for all errors raised by the relay."""

    status_code = 500
    public_message = "Internal server error"


class ValidationError(AssessmentError):
    """The inbound request is malformed or missing required fields."""

    status_code = 400
    public_message = "Invalid request"


class ConfigError(AssessmentError):
    """Credentials or other deployment configuration are missing or malformed."""

    status_code = 500
    public_message = "Internal server error"


class UpstreamError(AssessmentError):
    """The LLM provider call failed or returned a shape we do not recognise."""

    status_code = 502
    public_message = "Upstream provider error"

    def __init__(self, message: str, *, status_code: int | None = None, body: Any = None):
        super().__init__(message)
        self.upstream_status = status_code
        self.body = body


class DispatchError(AssessmentError):
    """Webhook delivery failed. Logged by the dispatcher, never surfaced."""

    def __init__(self, message: str, *, status_code: int | None = None):
        super().__init__(message)
        self.upstream_status = status_code
