"""
PuLP backend: integer columns solved with CBC (system binary or PuLP's own).
"""

import logging
import shutil
from dataclasses import dataclass, field
from typing import Mapping, Optional

import pulp

from .lp import LinearProgramSolver, Relation, SolveStatus

logger = logging.getLogger(__name__)


@dataclass
class PulpModel:
    problem: pulp.LpProblem
    columns: list[pulp.LpVariable] = field(default_factory=list)
    released: bool = False


class PulpSolver(LinearProgramSolver):
    name = "pulp"

    def create_model(self, num_columns: int) -> Optional[PulpModel]:
        if num_columns < 1:
            return None
        problem = pulp.LpProblem("threshold_identification", pulp.LpMinimize)
        columns = [
            pulp.LpVariable(f"c{j}", lowBound=0, cat=pulp.LpInteger)
            for j in range(num_columns)
        ]
        return PulpModel(problem=problem, columns=columns)

    def _valid(self, handle: PulpModel, coefficients: Mapping[int, int]) -> bool:
        if handle.released:
            return False
        return all(0 <= j < len(handle.columns) for j in coefficients)

    def _expr(self, handle: PulpModel, coefficients: Mapping[int, int]):
        return pulp.lpSum(coef * handle.columns[j] for j, coef in coefficients.items())

    def set_column_bounds(self, handle, column, lower, upper) -> bool:
        if not self._valid(handle, {column: 1}):
            return False
        var = handle.columns[column]
        var.lowBound = lower
        var.upBound = upper
        return True

    def add_constraint(self, handle, coefficients, relation, bound) -> bool:
        if not coefficients or not self._valid(handle, coefficients):
            return False
        expr = self._expr(handle, coefficients)
        if relation is Relation.GE:
            handle.problem += expr >= bound
        elif relation is Relation.LE:
            handle.problem += expr <= bound
        else:
            return False
        return True

    def set_objective(self, handle, coefficients, minimize=True) -> bool:
        if not self._valid(handle, coefficients):
            return False
        handle.problem.setObjective(self._expr(handle, coefficients))
        handle.problem.sense = pulp.LpMinimize if minimize else pulp.LpMaximize
        return True

    def _cbc_command(self):
        """CBC on PATH if installed, otherwise the binary bundled with PuLP."""
        options = dict(
            msg=self.config.msg,
            timeLimit=self.config.time_limit,
            threads=self.config.threads,
        )
        cbc = shutil.which("cbc")
        if cbc:
            return pulp.COIN_CMD(path=cbc, **options)
        return pulp.PULP_CBC_CMD(**options)

    def optimize(self, handle) -> SolveStatus:
        cmd = self._cbc_command()
        try:
            status = handle.problem.solve(cmd)
        except pulp.PulpSolverError as e:
            logger.warning("CBC failed: %s", e)
            return SolveStatus.FAILURE

        logger.debug(
            "CBC status %s, solution status %s",
            pulp.LpStatus[status], handle.problem.sol_status,
        )
        if status == pulp.LpStatusOptimal:
            if handle.problem.sol_status == pulp.LpSolutionIntegerFeasible:
                return SolveStatus.SUBOPTIMAL
            return SolveStatus.OPTIMAL
        if status == pulp.LpStatusInfeasible:
            return SolveStatus.INFEASIBLE
        if status == pulp.LpStatusUnbounded:
            return SolveStatus.UNBOUNDED
        if status == pulp.LpStatusNotSolved:
            return SolveStatus.NOT_SOLVED
        return SolveStatus.FAILURE

    def get_solution(self, handle) -> list[float]:
        # Some solvers can return None for variables in degenerate cases
        return [float(v.varValue) if v.varValue is not None else 0.0 for v in handle.columns]

    def release(self, handle) -> None:
        handle.columns = []
        handle.released = True
