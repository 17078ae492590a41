"""Errors and warnings raised by the inversion engine."""


class InversionError(RuntimeError):
    """Base class for every failure of an inversion run."""


class AxisError(InversionError, ValueError):
    """An acquisition or solution axis is empty, non-finite or out of domain."""


class ShapeMismatchError(InversionError, ValueError):
    """Axis lengths, kernel dimensions and data shape disagree."""


class UnknownSequenceError(InversionError, KeyError):
    """No kernel equation is registered for a pulse-sequence tag."""


class NoiseEstimateError(InversionError, FloatingPointError):
    """The noise standard deviation is zero, non-finite or undefined."""


class TruncationError(InversionError, FloatingPointError):
    """No singular value survives the noise threshold."""


class ParameterSelectionError(InversionError):
    """Automatic selection of the regularization parameter failed."""


class SolverConvergenceError(InversionError):
    """The non-negative least-squares primitive did not converge."""


class LowSNRWarning(UserWarning):
    """Signal-to-noise ratio is below the recommended threshold."""
