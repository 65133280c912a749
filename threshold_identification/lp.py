"""
Linear-program solver interface used by threshold identification.

The identification code only talks to a `LinearProgramSolver`; any backend
that implements the methods below can be passed in. Columns are addressed by
0-based index and coefficients are given sparsely as {column: coefficient}.
"""

import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from enum import Enum
from typing import Any, Iterator, Mapping, Optional

from .config import SolverConfig
from .errors import ModelAllocationError

logger = logging.getLogger(__name__)


class Relation(Enum):
    GE = ">="
    LE = "<="


class SolveStatus(Enum):
    OPTIMAL = "optimal"
    SUBOPTIMAL = "suboptimal"      # feasible incumbent, search stopped early
    INFEASIBLE = "infeasible"
    UNBOUNDED = "unbounded"
    NOT_SOLVED = "not_solved"      # e.g. time limit hit with no incumbent
    FAILURE = "failure"            # backend or numerical failure


FEASIBLE_STATUSES = frozenset({SolveStatus.OPTIMAL, SolveStatus.SUBOPTIMAL})


class LinearProgramSolver(ABC):
    """
    Strategy interface for an integer linear program backend.

    Every model starts with `num_columns` integer columns bounded below by 0
    and unbounded above. Construction methods return False when the backend
    rejects the request.
    """

    name = "abstract"

    def __init__(self, config: Optional[SolverConfig] = None):
        self.config = config or SolverConfig()

    @abstractmethod
    def create_model(self, num_columns: int) -> Optional[Any]:
        """Allocate a model; None if allocation failed."""

    @abstractmethod
    def set_column_bounds(
        self, handle: Any, column: int, lower: Optional[int], upper: Optional[int]
    ) -> bool:
        ...

    @abstractmethod
    def add_constraint(
        self,
        handle: Any,
        coefficients: Mapping[int, int],
        relation: Relation,
        bound: int,
    ) -> bool:
        ...

    @abstractmethod
    def set_objective(
        self, handle: Any, coefficients: Mapping[int, int], minimize: bool = True
    ) -> bool:
        ...

    @abstractmethod
    def optimize(self, handle: Any) -> SolveStatus:
        ...

    @abstractmethod
    def get_solution(self, handle: Any) -> list[float]:
        """Column values in column order; only valid after a feasible solve."""

    @abstractmethod
    def release(self, handle: Any) -> None:
        ...

    @contextmanager
    def open_model(self, num_columns: int) -> Iterator[Any]:
        """
        Scoped model: raises ModelAllocationError if creation fails and
        releases the model on every exit path otherwise.
        """
        handle = self.create_model(num_columns)
        if handle is None:
            raise ModelAllocationError(
                f"{self.name}: unable to create LP model with {num_columns} columns"
            )
        try:
            yield handle
        finally:
            self.release(handle)
            logger.debug("%s: released model", self.name)


def get_solver(name: str = "pulp", config: Optional[SolverConfig] = None) -> LinearProgramSolver:
    """Instantiate a backend by name ("pulp" or "z3")."""
    if name == "pulp":
        from .pulp_solver import PulpSolver
        return PulpSolver(config)
    if name == "z3":
        from .z3_solver import Z3Solver
        return Z3Solver(config)
    raise ValueError(f"Unknown solver backend: {name!r} (expected 'pulp' or 'z3')")
