from __future__ import annotations


class DefluxError(Exception):
    """Base class for deflux errors."""


class ConfigurationError(DefluxError):
    """A single configuration location could not be read or parsed."""


class ConfigurationNotFound(DefluxError):
    """No configuration location yielded a usable configuration."""

    def __init__(self, causes: list[Exception]) -> None:
        self.causes = list(causes)
        super().__init__("\n" + "\n".join(str(c) for c in self.causes))


class DiscoveryError(DefluxError):
    pass


class GatewayError(DefluxError):
    """The gateway REST API failed or answered with an error object."""


class PairingError(GatewayError):
    pass


class GatewayConnectionError(DefluxError):
    """The gateway session or event stream could not be opened."""


class EventStreamClosed(DefluxError):
    """The event stream ended; it cannot be restarted."""


class NormalizationError(DefluxError):
    """A sensor event has no point mapping or is missing required state."""
