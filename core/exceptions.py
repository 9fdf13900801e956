"""
Simulator error types
"""


class ConfigurationError(ValueError):
    """Malformed simulation input, rejected before the run starts."""


class InvariantError(RuntimeError):
    """
    Illegal state transition or unknown pid.

    Raised when a policy or the engine breaks the process-state contract.
    Never retried.
    """
