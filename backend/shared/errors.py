"""
Exceptions shared by the services that call external AI providers.
"""

QUOTA_STATUS_CODES = {402, 429}


class ExternalProviderError(Exception):
    """An external LLM or speech provider rejected or failed a request."""

    def __init__(
        self,
        message: str,
        provider: str | None = None,
        quota_exceeded: bool = False,
        suggestion: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.provider = provider
        self.quota_exceeded = quota_exceeded
        self.suggestion = suggestion


def is_quota_error(status_code: int | None, message: str = "") -> bool:
    """Return True when a provider failure looks like a quota or billing limit."""
    if status_code in QUOTA_STATUS_CODES:
        return True
    lowered = message.lower()
    return "resource_exhausted" in lowered or "quota" in lowered or "billing" in lowered
