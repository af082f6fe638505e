"""Error taxonomy surfaced by the negotiation service."""


class NegotiationError(Exception):
    """Base class for every error raised by dealroom."""


class InvalidArgumentError(NegotiationError):
    """Missing or malformed required field. Nothing was mutated."""


class ConfigError(InvalidArgumentError):
    """A configuration value could not be parsed."""


class UnauthorizedError(NegotiationError):
    """The access code was rejected. No session was created."""


class NotFoundError(NegotiationError):
    """No session exists for the given key."""


class AlreadyExistsError(NegotiationError):
    """Strict creation was requested for an identity that already has a session."""


class BusyError(NegotiationError):
    """Another turn for the same session is in flight. Safe to retry."""


class UpstreamError(NegotiationError):
    """The dialogue generator failed or timed out."""
