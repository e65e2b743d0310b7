class ProviderFailure(Exception):
    """Raised when a capability provider cannot produce a usable result."""


class ProviderNetworkError(ProviderFailure):
    """Raised when the provider call fails due to network/infrastructure issues."""


class ProviderResponseError(ProviderFailure):
    """Raised when the provider answers with an empty or malformed payload."""


class ProviderTimeoutError(ProviderFailure):
    """Raised when the provider does not answer within its time budget."""


class CapabilityConfigurationError(Exception):
    """Raised when a capability chain is wired incorrectly."""
