class GatewayError(Exception):
    """Base exception class for the Maka gateway."""
    pass

class ConfigError(GatewayError):
    """Raised when a configuration value is missing or invalid."""
    pass

class MissingInput(GatewayError):
    """Raised when a query carries neither text nor a file."""
    pass

class NoProvidersConfigured(GatewayError):
    """Raised when there is no provider to dispatch to."""
    pass

class TransportFailure(GatewayError):
    """Raised when a single attempt against a provider fails on the wire."""

    def __init__(self, provider: str, message: str):
        super().__init__(f"{provider} -> {message}")
        self.provider = provider

class ProviderFailure(GatewayError):
    """Raised when a provider exhausted its retries or gave no usable answer."""

    def __init__(self, provider: str, reason: str):
        super().__init__(f"{provider}: {reason}")
        self.provider = provider
        self.reason = reason

class AllProvidersFailed(GatewayError):
    """Raised when every provider in the list failed."""

    def __init__(self, failures):
        super().__init__("All providers failed.")
        self.failures = list(failures)

class InvalidRequestBody(GatewayError):
    """Raised when a client request body cannot be parsed."""
    pass
