"""
readiness/errors.py
Errors that are reported to the caller. Everything else (missing llms.txt,
probe timeouts, ...) is absorbed into the score as a deduction.
"""


class AuditError(Exception):
    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(AuditError):
    """Missing or malformed request field."""
    status_code = 400


class UpstreamFetchError(AuditError):
    """The primary page could not be fetched. The message is safe to show users."""
    status_code = 500

    def __init__(self, message: str = "Could not fetch the target site", cause: str = ""):
        super().__init__(message)
        self.cause = cause


class RenderError(AuditError):
    """Report content could not be laid out or drawn."""
    status_code = 500
