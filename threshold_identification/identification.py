"""
Threshold logic function identification.

A Boolean function is a threshold function (TF) if it can be written as

    f(x_0, ..., x_{n-1}) = [ sum_i w_i x_i >= T ]

for integer weights w_i and threshold T. The linear form of a TF is the
vector [w_0, ..., w_{n-1}; T].

Identification runs in three stages:
1. Polarity normalization: make every variable positive unate by flipping
   the negative unate ones; a binate variable means the function is not a TF
2. ILP formulation: one row per cube of the ISOP of the positive unate
   function and of its complement, objective = sum of all columns
3. Solution translation: read back the columns and undo the flips
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence, Union

from .config import SolverConfig
from .errors import ConstraintConstructionError, SolverTimeoutError
from .isop import Cube, isop
from .lp import FEASIBLE_STATUSES, LinearProgramSolver, Relation, SolveStatus
from .truth_table import TruthTable

logger = logging.getLogger(__name__)


class Polarity(Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    DONT_CARE = "dont_care"


@dataclass(frozen=True)
class UnateNormalization:
    """Positive unate equivalent of a function plus the flips that produced it."""

    table: TruthTable
    flipped: tuple[int, ...]             # negative unate variables, in flip order
    polarities: tuple[Polarity, ...]

    @property
    def dont_cares(self) -> tuple[int, ...]:
        return tuple(i for i, p in enumerate(self.polarities) if p is Polarity.DONT_CARE)


@dataclass(frozen=True)
class Threshold:
    """A TF together with one linear form valid for the original function."""

    linear_form: tuple[int, ...]

    @property
    def weights(self) -> tuple[int, ...]:
        return self.linear_form[:-1]

    @property
    def threshold(self) -> int:
        return self.linear_form[-1]

    def __bool__(self):
        return True


@dataclass(frozen=True)
class NotThreshold:
    def __bool__(self):
        return False


IdentificationResult = Union[Threshold, NotThreshold]


# ---------------------------------------------------------------------
# Stage 1: polarity normalization
# ---------------------------------------------------------------------

def normalize_polarity(tt: TruthTable) -> Optional[UnateNormalization]:
    """
    Classify every variable and flip the negative unate ones.

    Returns None as soon as a binate variable is found; the remaining
    variables are not examined.
    """
    work = tt
    flipped: list[int] = []
    polarities: list[Polarity] = []

    for i in range(tt.num_vars):
        c0 = work.cofactor0(i)
        c1 = work.cofactor1(i)
        smoothing = c0 | c1

        if c0 == c1:
            polarities.append(Polarity.DONT_CARE)
        elif c0 == smoothing:
            work = work.flip(i)
            flipped.append(i)
            polarities.append(Polarity.NEGATIVE)
        elif c1 != smoothing:
            logger.debug("x%d is binate in %s", i, tt.to_hex())
            return None
        else:
            polarities.append(Polarity.POSITIVE)

    logger.debug(
        "%s is unate: polarities=%s flipped=%s",
        tt.to_hex(), [p.value for p in polarities], flipped,
    )
    return UnateNormalization(
        table=work, flipped=tuple(flipped), polarities=tuple(polarities)
    )


# ---------------------------------------------------------------------
# Stage 2: ILP formulation
# ---------------------------------------------------------------------

class ConstraintRow:
    """
    Scratch row reused for every constraint of one model.

    Holds one coefficient per column; `sparse()` yields the nonzero entries
    in the {column: coefficient} form the solver interface takes.
    """

    def __init__(self, num_columns: int):
        self.coefficients = [0] * num_columns

    def clear(self):
        for j in range(len(self.coefficients)):
            self.coefficients[j] = 0

    def __setitem__(self, column: int, value: int):
        self.coefficients[column] = value

    def sparse(self) -> dict[int, int]:
        return {j: c for j, c in enumerate(self.coefficients) if c}


def _fill_onset_row(row: ConstraintRow, cube: Cube, variables: Sequence[int]):
    """Weights of the literals the cube sets to 1, minus T."""
    row.clear()
    for i in variables:
        if cube.get_mask(i) and cube.get_bit(i):
            row[i] = 1
    row[len(row.coefficients) - 1] = -1


def _fill_offset_row(row: ConstraintRow, cube: Cube, variables: Sequence[int]):
    """Weights of the variables free in the cube or set to 1 by it, minus T."""
    row.clear()
    for i in variables:
        if not cube.get_mask(i) or cube.get_bit(i):
            row[i] = 1
    row[len(row.coefficients) - 1] = -1


def formulate(
    solver: LinearProgramSolver, handle, normalization: UnateNormalization
) -> tuple[int, int]:
    """
    Add the rows and objective for a positive unate function to an open model.

    The model must have num_vars + 1 columns: the weights then T. Columns of
    don't-care variables are pinned to 0 and left out of every row.

    Returns:
        (number of on-set rows, number of off-set rows)

    Raises:
        ConstraintConstructionError: if the solver rejects a bound, row or
            the objective
    """
    ttf = normalization.table
    num_vars = ttf.num_vars
    ncol = num_vars + 1

    fcubes = isop(ttf)
    nfcubes = isop(~ttf)

    dont_cares = set(normalization.dont_cares)
    variables = [i for i in range(num_vars) if i not in dont_cares]

    for i in sorted(dont_cares):
        if not solver.set_column_bounds(handle, i, 0, 0):
            raise ConstraintConstructionError(f"Unable to pin weight of x{i} to 0")

    row = ConstraintRow(ncol)

    for cube in fcubes:
        _fill_onset_row(row, cube, variables)
        if not solver.add_constraint(handle, row.sparse(), Relation.GE, 0):
            raise ConstraintConstructionError(f"Unable to add on-set row for {cube}")

    for cube in nfcubes:
        _fill_offset_row(row, cube, variables)
        if not solver.add_constraint(handle, row.sparse(), Relation.LE, -1):
            raise ConstraintConstructionError(f"Unable to add off-set row for {cube}")

    if not solver.set_objective(handle, {j: 1 for j in range(ncol)}, minimize=True):
        raise ConstraintConstructionError("Unable to set objective function")

    logger.debug(
        "ILP for %s: %d columns, %d on-set rows, %d off-set rows",
        ttf.to_hex(), ncol, len(fcubes), len(nfcubes),
    )
    return len(fcubes), len(nfcubes)


# ---------------------------------------------------------------------
# Stage 3: solution translation
# ---------------------------------------------------------------------

def translate_solution(
    status: SolveStatus,
    solution: Optional[Sequence[float]],
    flipped: Sequence[int],
) -> IdentificationResult:
    """
    Turn a solver outcome into a result for the original function.

    Each flipped variable v gets w_v' = -w_v and the threshold absorbs the
    constant: T' = T + w_v'.

    Raises:
        SolverTimeoutError: the solver stopped without any solution, so the
            function may or may not be a TF
    """
    if status is SolveStatus.NOT_SOLVED:
        raise SolverTimeoutError("Solver stopped before finding a solution")
    if status not in FEASIBLE_STATUSES:
        return NotThreshold()

    linear_form = [int(round(v)) for v in solution]
    for var in flipped:
        linear_form[var] = -linear_form[var]
        linear_form[-1] += linear_form[var]

    return Threshold(linear_form=tuple(linear_form))


# ---------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------

def identify_threshold(
    tt: TruthTable,
    solver: Optional[LinearProgramSolver] = None,
    config: Optional[SolverConfig] = None,
) -> IdentificationResult:
    """
    Decide whether `tt` is a threshold function and find a linear form.

    Args:
        tt: Complete truth table of n variables
        solver: ILP backend; defaults to PuLP/CBC configured by `config`
        config: Settings for the default backend; pass them to the backend
            itself when giving `solver`

    Returns:
        Threshold with n + 1 integers (weights then T), or NotThreshold

    Raises:
        ValueError: both `solver` and `config` were given
        ModelAllocationError, ConstraintConstructionError, SolverTimeoutError:
            solver faults; the model is released before the exception
            propagates
    """
    if solver is not None and config is not None:
        raise ValueError("Pass config to the solver backend, not alongside it")

    normalization = normalize_polarity(tt)
    if normalization is None:
        return NotThreshold()

    if solver is None:
        from .pulp_solver import PulpSolver
        solver = PulpSolver(config)

    with solver.open_model(tt.num_vars + 1) as handle:
        formulate(solver, handle, normalization)
        status = solver.optimize(handle)
        logger.debug("%s: solver %s returned %s", tt.to_hex(), solver.name, status.value)
        solution = solver.get_solution(handle) if status in FEASIBLE_STATUSES else None

    return translate_solution(status, solution, normalization.flipped)


def is_threshold(
    tt: TruthTable, solver: Optional[LinearProgramSolver] = None
) -> tuple[bool, Optional[list[int]]]:
    """Boolean form of identify_threshold: (is_tf, linear form or None)."""
    result = identify_threshold(tt, solver)
    if isinstance(result, Threshold):
        return True, list(result.linear_form)
    return False, None
