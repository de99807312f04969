"""
Errors raised by the network, the gene pool and genome persistence.
"""


class EvoDriveError(Exception):
    """Base class for every error raised by evodrive."""


class InvalidTopology(EvoDriveError, ValueError):
    """A network was requested with fewer than 2 layers or an empty layer."""


class InputArityMismatch(EvoDriveError, ValueError):
    """The input fed to a network does not match its input layer size."""

    def __init__(self, expected, got):
        super().__init__(f"Bad input size: expected {expected}, got {got}")
        self.expected = expected
        self.got = got


class DegenerateGenePool(EvoDriveError, ValueError):
    """Fitness weights cannot form a sampling distribution.

    Raised when the expiring generation is empty, has a negative fitness,
    or when every fitness is zero. Selection pressure has collapsed and the
    caller has to decide what to do about it.
    """


class PersistenceUnavailable(EvoDriveError):
    """A saved genome could not be read or decoded."""


class PersistenceShapeMismatch(EvoDriveError):
    """A saved genome decoded fine but has a different layer layout."""

    def __init__(self, expected, got):
        super().__init__(f"Saved genome shape {got} does not match expected {expected}")
        self.expected = list(expected)
        self.got = list(got)
