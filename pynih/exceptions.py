"""
Exception classes for PyNIH
"""

from typing import Any, List, Optional

from .config import RetryConfig


def is_retryable_status(status: int) -> bool:
    """Return True when an HTTP status signals a transient failure"""
    return 500 <= status < 600 or status in RetryConfig.EXTRA_RETRYABLE_STATUSES


class NIHReporterError(Exception):
    """Base exception class for PyNIH"""
    pass


class TransportError(NIHReporterError):
    """Raised when the request cannot be sent or the response body cannot be read"""
    
    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class ApiError(NIHReporterError):
    """
    Raised for a non-2xx response, or a 2xx response whose envelope
    signals that the request was rejected upstream
    """
    
    def __init__(self, status: int, status_text: str, retriable: Optional[bool] = None, cause: Any = None):
        if retriable is None:
            retriable = is_retryable_status(status)
        super().__init__(f"NIH API error ({status}): {status_text}")
        self.status = status
        self.status_text = status_text
        self.retriable = retriable
        self.cause = cause


class ParseError(NIHReporterError):
    """Raised when a returned project fails structural validation"""
    
    def __init__(self, raw_input: str, schema_errors: List[str], cause: Any = None):
        summary = "; ".join(schema_errors) if schema_errors else "invalid input"
        super().__init__(f"Failed to parse NIH project: {summary}")
        self.raw_input = raw_input
        self.schema_errors = schema_errors
        self.cause = cause


# Errors surfaced by a query once the HTTP exchange itself succeeded or was classified
NIHApiError = (ApiError, ParseError)

# Everything a query reports through (value, error) results: library errors
# plus the ValueError of a malformed date, which is passed through unchanged
QueryError = (NIHReporterError, ValueError)
