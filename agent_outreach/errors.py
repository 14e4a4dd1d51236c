"""
Error types raised by the ag.dev client and the agent batch runner.
"""

from typing import Optional


class AgDevError(Exception):
    """Base class for all ag.dev client errors."""


class NetworkError(AgDevError):
    """The request failed before any HTTP response was received."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class ApiError(AgDevError):
    """The API answered with a non-2xx status."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        error_code: Optional[str] = None,
    ):
        super().__init__(f"API Error: {message}")
        self.message = message
        self.status_code = status_code
        self.error_code = error_code


class NotFoundError(ApiError):
    """The requested agent or run does not exist."""


class RunTimeoutError(AgDevError):
    """
    A run did not reach a terminal state before the local deadline.

    The remote run keeps executing and may still complete afterwards.
    """

    def __init__(self, run_id: str, timeout: float):
        super().__init__(f"Agent run {run_id} did not complete within {timeout}s")
        self.run_id = run_id
        self.timeout = timeout


class BatchFailure(AgDevError):
    """A member of a batch failed, so the whole batch failed."""


class InvalidPayloadError(AgDevError):
    """The API returned a payload that is not the expected JSON object."""
