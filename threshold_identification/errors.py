"""Faults raised while building or solving a linear program.

A function that is not a threshold function is a normal result, never one of
these exceptions.
"""


class ThresholdSolverError(RuntimeError):
    """Base class for solver faults that abort an identification call."""


class ModelAllocationError(ThresholdSolverError):
    """The solver could not create a model."""


class ConstraintConstructionError(ThresholdSolverError):
    """A bound, row or objective could not be attached to the model."""


class SolverTimeoutError(ThresholdSolverError):
    """The solver stopped before finding any solution; the answer is unknown."""
