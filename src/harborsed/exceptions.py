"""
Error taxonomy for censored-data estimation.

The fitter and the conditional-mean estimator fail loudly with these types;
substituting a convention value (e.g. half the detection limit) is left to the
caller, which must label it as a different method.
"""
from __future__ import annotations


class CensoredEstimationError(Exception):
    """Base class for all estimation failures."""


class InsufficientDataError(CensoredEstimationError):
    """The group holds too few observations to fit a distribution."""


class FitDivergedError(CensoredEstimationError):
    """The likelihood optimizer did not converge or produced an invalid scale."""

    def __init__(self, message: str, *, iterations: int | None = None):
        super().__init__(message)
        self.iterations = iterations


class InvalidLimitError(CensoredEstimationError, ValueError):
    """A detection limit was non-positive or non-finite."""


class InvalidObservationError(CensoredEstimationError, ValueError):
    """An observation value lies outside the lognormal support."""
