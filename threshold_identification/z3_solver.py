"""
z3 backend: integer columns solved with z3's Optimize engine.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

import z3

from .lp import LinearProgramSolver, Relation, SolveStatus

logger = logging.getLogger(__name__)


@dataclass
class Z3Model:
    optimizer: z3.Optimize
    columns: list = field(default_factory=list)
    model: Optional[z3.ModelRef] = None
    released: bool = False


class Z3Solver(LinearProgramSolver):
    name = "z3"

    def create_model(self, num_columns: int) -> Optional[Z3Model]:
        if num_columns < 1:
            return None
        optimizer = z3.Optimize()
        if self.config.time_limit is not None:
            optimizer.set("timeout", int(self.config.time_limit * 1000))
        columns = [z3.Int(f"c{j}") for j in range(num_columns)]
        optimizer.add([c >= 0 for c in columns])
        return Z3Model(optimizer=optimizer, columns=columns)

    def _valid(self, handle: Z3Model, coefficients) -> bool:
        if handle.released:
            return False
        return all(0 <= j < len(handle.columns) for j in coefficients)

    def _expr(self, handle: Z3Model, coefficients):
        terms = [coef * handle.columns[j] for j, coef in coefficients.items()]
        return z3.Sum(terms) if terms else z3.IntVal(0)

    def set_column_bounds(self, handle, column, lower, upper) -> bool:
        if not self._valid(handle, {column: 1}):
            return False
        var = handle.columns[column]
        if lower is not None:
            handle.optimizer.add(var >= lower)
        if upper is not None:
            handle.optimizer.add(var <= upper)
        return True

    def add_constraint(self, handle, coefficients, relation, bound) -> bool:
        if not coefficients or not self._valid(handle, coefficients):
            return False
        expr = self._expr(handle, coefficients)
        if relation is Relation.GE:
            handle.optimizer.add(expr >= bound)
        elif relation is Relation.LE:
            handle.optimizer.add(expr <= bound)
        else:
            return False
        return True

    def set_objective(self, handle, coefficients, minimize=True) -> bool:
        if not self._valid(handle, coefficients):
            return False
        expr = self._expr(handle, coefficients)
        if minimize:
            handle.optimizer.minimize(expr)
        else:
            handle.optimizer.maximize(expr)
        return True

    def optimize(self, handle) -> SolveStatus:
        result = handle.optimizer.check()
        logger.debug("z3 optimize result: %s", result)
        if result == z3.sat:
            handle.model = handle.optimizer.model()
            return SolveStatus.OPTIMAL
        if result == z3.unsat:
            return SolveStatus.INFEASIBLE

        # Stopped early: keep the best model found so far if it is feasible
        incumbent = self._incumbent(handle)
        if incumbent is None:
            return SolveStatus.NOT_SOLVED
        handle.model = incumbent
        return SolveStatus.SUBOPTIMAL

    def _incumbent(self, handle) -> Optional[z3.ModelRef]:
        try:
            model = handle.optimizer.model()
        except z3.Z3Exception:
            return None
        for assertion in handle.optimizer.assertions():
            if not z3.is_true(model.eval(assertion, model_completion=True)):
                return None
        return model

    def get_solution(self, handle) -> list[float]:
        model = handle.model if handle.model is not None else handle.optimizer.model()
        return [
            float(model.eval(c, model_completion=True).as_long())
            for c in handle.columns
        ]

    def release(self, handle) -> None:
        handle.columns = []
        handle.model = None
        handle.released = True
