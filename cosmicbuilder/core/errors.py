# cosmicbuilder/core/errors.py
"""
Error taxonomy for the assistant pipeline.

Only failures that reject a whole model call are exceptions. Problems with
a single action inside a batch are represented as ``SkippedAction`` values
by the action parser and never raised.
"""

from typing import Optional


class CosmicBuilderError(Exception):
    """Base class for errors surfaced to the chat transcript."""

    default_code = "error"

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code


class MissingCredentialError(CosmicBuilderError):
    """
    Raised when a model backend is invoked without its API key.
    Fatal for that call; never retried.
    """

    default_code = "missing_key"


class ProviderError(CosmicBuilderError):
    """
    Raised when the model call itself fails (network, non-2xx,
    provider error payload, empty response, unknown provider).
    """

    default_code = "api_error"


class MalformedReplyError(CosmicBuilderError):
    """
    Raised when the model text does not parse into ``{"actions": [...]}``.
    The raw text is kept for diagnosis.
    """

    default_code = "invalid_format"

    def __init__(self, message: str, raw_text: str = ""):
        super().__init__(message)
        self.raw_text = raw_text
