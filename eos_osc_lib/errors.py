"""
Exception Hierarchy

All library-specific errors derive from EosError. Most also derive from the
matching built-in so callers can catch them generically.
"""


class EosError(Exception):
    """Base exception for all eos_osc_lib errors."""
    pass


class EosConnectionError(EosError, ConnectionError):
    """Failed to connect to, write to, or read from the console."""
    pass


class ArgumentTypeError(EosError, TypeError):
    """An OSC argument was read with an accessor for the wrong type."""
    pass


class ListJoinError(EosError, ValueError):
    """A /list/<index>/<count> chunk arrived out of sequence or orphaned."""
    pass


class RouteError(EosError, ValueError):
    """An address pattern could not be registered with the router."""
    pass


class UnsolicitedResponseError(EosError, RuntimeError):
    """A response arrived while no request was pending."""
    pass


class RequestError(EosError, ValueError):
    """A response did not have the shape its request expected."""
    pass


class OscDecodeError(EosError, ValueError):
    """A frame could not be decoded into an OSC message."""
    pass


class OscEncodeError(EosError, ValueError):
    """A message could not be encoded for the wire."""
    pass
