"""Threshold logic function identification via integer linear programming."""

from .truth_table import TruthTable
from .isop import Cube, isop
from .identification import (
    Threshold,
    NotThreshold,
    Polarity,
    UnateNormalization,
    identify_threshold,
    is_threshold,
    normalize_polarity,
    formulate,
    translate_solution,
)
from .lp import LinearProgramSolver, Relation, SolveStatus, get_solver
from .config import SolverConfig
from .errors import (
    ThresholdSolverError,
    ModelAllocationError,
    ConstraintConstructionError,
    SolverTimeoutError,
)
from .verify import verify_linear_form
from .export import to_inequality, to_verilog, to_json

__all__ = [
    "TruthTable",
    "Cube",
    "isop",
    "Threshold",
    "NotThreshold",
    "Polarity",
    "UnateNormalization",
    "identify_threshold",
    "is_threshold",
    "normalize_polarity",
    "formulate",
    "translate_solution",
    "LinearProgramSolver",
    "Relation",
    "SolveStatus",
    "get_solver",
    "SolverConfig",
    "ThresholdSolverError",
    "ModelAllocationError",
    "ConstraintConstructionError",
    "SolverTimeoutError",
    "verify_linear_form",
    "to_inequality",
    "to_verilog",
    "to_json",
]
__version__ = "0.1.0"
