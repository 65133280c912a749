import pytest

from threshold_identification.lp import LinearProgramSolver, SolveStatus


class FakeSolver(LinearProgramSolver):
    """Records every call and counts model acquire/release."""

    name = "fake"

    def __init__(
        self,
        status=SolveStatus.OPTIMAL,
        solution=None,
        fail_create=False,
        fail_row_at=None,
        fail_objective=False,
        fail_bounds=False,
    ):
        super().__init__()
        self.status = status
        self.solution = solution
        self.fail_create = fail_create
        self.fail_row_at = fail_row_at
        self.fail_objective = fail_objective
        self.fail_bounds = fail_bounds

        self.acquired = 0
        self.released = 0
        self.num_columns = None
        self.bounds = {}
        self.rows = []
        self.objective = None
        self.solution_reads = 0

    def create_model(self, num_columns):
        if self.fail_create:
            return None
        self.acquired += 1
        self.num_columns = num_columns
        return object()

    def set_column_bounds(self, handle, column, lower, upper):
        if self.fail_bounds:
            return False
        self.bounds[column] = (lower, upper)
        return True

    def add_constraint(self, handle, coefficients, relation, bound):
        if self.fail_row_at is not None and len(self.rows) == self.fail_row_at:
            return False
        self.rows.append((dict(coefficients), relation, bound))
        return True

    def set_objective(self, handle, coefficients, minimize=True):
        if self.fail_objective:
            return False
        self.objective = (dict(coefficients), minimize)
        return True

    def optimize(self, handle):
        return self.status

    def get_solution(self, handle):
        self.solution_reads += 1
        if self.solution is None:
            raise AssertionError("get_solution called without a solution")
        return list(self.solution)

    def release(self, handle):
        self.released += 1


@pytest.fixture
def fake_solver():
    return FakeSolver


@pytest.fixture(params=["pulp", "z3"])
def backend(request):
    return request.param
