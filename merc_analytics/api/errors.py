"""Provider error taxonomy."""


class ProviderError(Exception):
    """Base class for failures of a single upstream provider call."""

    def __init__(self, provider: str, message: str):
        super().__init__(f"{provider}: {message}")
        self.provider = provider


class UpstreamUnavailable(ProviderError):
    """Network failure, timeout, non-2xx status or missing credentials."""


class MalformedResponse(ProviderError):
    """2xx response whose body does not have the expected shape."""
