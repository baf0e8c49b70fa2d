"""Exception hierarchy for codefixer.

Only `InvalidArgumentError` is meant to reach the caller of a service; the
other errors are raised by the adapters and contained per file by the
correction and update services.
"""

from typing import Optional


class CodeFixerError(Exception):
    """Base class for all codefixer errors."""


class InvalidArgumentError(CodeFixerError, ValueError):
    """Raised when a service is called with arguments it cannot work with."""


class ConfigurationError(CodeFixerError):
    """Raised when a configuration value is missing or has the wrong type."""


class InferenceError(CodeFixerError):
    """Base class for failures talking to the inference endpoint."""


class InferenceRequestError(InferenceError):
    """The request failed at transport level or returned a non-2xx status."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class InferenceTimeoutError(InferenceRequestError):
    """The request did not complete within the configured timeout."""


class InferenceResponseError(InferenceError):
    """The endpoint answered with a body that could not be decoded."""
