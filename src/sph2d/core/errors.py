from __future__ import annotations


class InvalidConfigurationError(ValueError):
    """Raised when a simulation is created with unusable parameters."""


class NumericDegeneracyError(FloatingPointError):
    """
    Raised by explicit finiteness checks when the particle state holds NaN/Inf.

    The solver itself never raises this: non-finite values propagate through
    subsequent steps unchanged.
    """
