class AiServiceError(Exception):
    """Raised when an AI collaborator call fails."""


class AiNetworkError(AiServiceError):
    """Raised when the provider cannot be reached or rejects the request."""


class AiResponseError(AiServiceError):
    """Raised when the provider reply is empty or not the expected JSON shape."""
