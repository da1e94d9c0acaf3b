from shared.errors import ExternalProviderError


class TTSProviderError(ExternalProviderError):
    """A speech provider (or every provider in the fallback chain) failed."""
