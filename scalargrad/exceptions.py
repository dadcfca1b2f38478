"""Exceptions raised by the scalargrad engine and training utilities."""


class ScalarGradError(Exception):
    """Base class for all scalargrad errors."""


class DimensionMismatch(ScalarGradError, ValueError):
    """An input vector's length disagrees with a neuron's weight count."""


class InsufficientData(ScalarGradError, ValueError):
    """A dataset cannot be split into non-empty train/validation partitions."""


class NumericalInstability(ScalarGradError, ArithmeticError):
    """An operation produced a non-finite value."""
