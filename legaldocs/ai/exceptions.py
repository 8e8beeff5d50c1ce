class AIError(Exception):
    """Raised when a language-model call does not yield a usable result."""


class AIResponseValidationError(AIError):
    """Raised when the model's JSON does not match the expected structure."""


class AIProviderNetworkError(AIError):
    """Raised when the AI provider call fails due to network/infrastructure issues."""
