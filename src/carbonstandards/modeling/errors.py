"""Exceptions raised by the model fitting layer."""


class InsufficientDataError(ValueError):
    """A sample is too small or has no spread, so no model can be fitted."""
