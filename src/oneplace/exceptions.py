"""Exceptions raised by the policy assistant and mapped to HTTP responses."""


class PolicyAssistantError(Exception):
    """Base error carrying the HTTP status it should be reported with."""

    status_code: int = 500

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class InvalidRequestError(PolicyAssistantError):
    """The caller sent something the assistant cannot act on."""

    status_code = 400


class EmbeddingError(PolicyAssistantError):
    """The embedding API failed or returned an unknown response shape."""


class GenerationError(PolicyAssistantError):
    """The text-generation API failed."""
