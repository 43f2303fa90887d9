from __future__ import annotations


class GatewayError(Exception):
    pass


class ConfigurationError(GatewayError):
    """Unknown target name or a missing/invalid setting."""


class TransportError(GatewayError):
    """Connection refused, timeout, DNS failure, cancellation, broker unreachable."""


class ProtocolError(GatewayError):
    """The peer answered, but with an error (RPC status, mid-stream failure, broker NACK)."""


class SerializationError(GatewayError):
    pass
