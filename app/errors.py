"""Error taxonomy for the content analyzer.

Every error that can reach a caller carries an HTTP status and a public
message. Raw gateway/provider text never goes into ``public_message``; it is
logged instead.
"""
from __future__ import annotations


class AnalyzerError(Exception):
    status_code: int = 500
    public_message: str = "Internal server error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.public_message)
        if message:
            self.public_message = message


class ConfigurationMissing(AnalyzerError):
    status_code = 500
    public_message = "Server is not configured"


class Unauthorized(AnalyzerError):
    status_code = 401
    public_message = "Unauthorized"


class InvalidInput(AnalyzerError):
    status_code = 400
    public_message = "Missing required field: content"


class ExternalServiceUnavailable(AnalyzerError):
    status_code = 503
    public_message = "Analysis service temporarily unavailable"


class Internal(AnalyzerError):
    status_code = 500
    public_message = "Failed to analyze content"


class SchemaViolation(Internal):
    """Analysis output did not match the result contract."""

    public_message = "Analysis produced an invalid result"

    def __init__(self, field: str, reason: str = "invalid value"):
        self.field = field
        self.reason = reason
        Exception.__init__(self, f"{field}: {reason}")


class StageFailed(Exception):
    """An external call in one pipeline stage failed.

    ``api_fault`` is True when the failure came from the gateway/provider API
    layer (connection, status, timeout), which callers may retry.
    """

    stage: str = "unknown"

    def __init__(self, message: str, *, api_fault: bool = False):
        super().__init__(message)
        self.api_fault = api_fault


class ResearchFailed(StageFailed):
    stage = "research"


class SynthesisFailed(StageFailed):
    stage = "synthesis"
