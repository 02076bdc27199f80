"""
Custom exceptions for repair orchestration and the generative fallback.
"""


class UnsupportedFormatException(Exception):
    """Exception raised when a document format has no repair engine."""

    def __init__(self, message: str, requested_format: str = None):
        self.message = message
        self.requested_format = requested_format
        super().__init__(self.message)


class FallbackUnavailableException(Exception):
    """Exception raised when a fallback is requested without a model or LLM client."""

    def __init__(self, message: str = "No generative fallback configured"):
        self.message = message
        super().__init__(self.message)
