from shared.errors import ExternalProviderError


class ScriptGenerationError(ExternalProviderError):
    """The language model failed or returned something that is not a script list."""
