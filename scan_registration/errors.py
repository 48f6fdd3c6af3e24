"""
Exception types raised by the registration engine.
"""


class RegistrationError(ValueError):
    """Base class for registration failures caused by unusable input geometry."""


class EmptyIndexError(RegistrationError):
    """Raised when a spatial index is requested over an empty point cloud."""


class NoCorrespondenceError(RegistrationError):
    """Raised when a correspondence search accepts no point pairs."""


class IllConditionedInputError(RegistrationError):
    """Raised when paired points cannot determine a unique rotation."""
