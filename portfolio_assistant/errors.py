"""
Error types raised along the chat pipeline.

Each error carries the message that is safe to return to an HTTP caller as
``{"error": ...}``. Anything else that escapes the pipeline before streaming
starts is reported with the generic message.
"""

GENERIC_ERROR_MESSAGE = "Failed to generate response"


class PortfolioAssistantError(Exception):
    """Base class for pipeline errors."""

    public_message: str = GENERIC_ERROR_MESSAGE


class MissingCredentialError(PortfolioAssistantError):
    """No provider API key is configured."""

    public_message = "Missing Google API Key"


class EmbeddingError(PortfolioAssistantError):
    """The embedding provider failed or returned malformed vectors."""


class DimensionMismatchError(EmbeddingError):
    """Two vectors that must be compared have different lengths."""


class StreamInterruptedError(PortfolioAssistantError):
    """The generation stream failed after it had started."""
