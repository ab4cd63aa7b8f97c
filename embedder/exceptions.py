"""
Custom exceptions for the link embedder, providing a structured error hierarchy.
"""


class EmbedderBaseException(Exception):
    """Base exception for all custom exceptions in this bot."""

    pass


class ConfigurationError(EmbedderBaseException):
    """Raised for errors in bot configuration, like a missing token."""

    pass


class TransportError(EmbedderBaseException):
    """Raised when a network fetch (page markup, avatar bytes) fails."""

    pass


class ExternalToolError(EmbedderBaseException):
    """Raised when the external media extractor is missing, times out, exits nonzero or prints garbage."""

    pass


class ParseError(EmbedderBaseException):
    """Raised when fetched data decodes but does not have the expected shape."""

    pass


class DispatchError(EmbedderBaseException):
    """Raised when an adapter fails unexpectedly while processing a matched link."""

    def __init__(self, platform_id: str, url: str, cause: BaseException):
        super().__init__(f"{platform_id} failed for {url}: {cause}")
        self.platform_id = platform_id
        self.url = url
        self.cause = cause
