import pytest

from threshold_identification.config import SolverConfig
from threshold_identification.errors import (
    ConstraintConstructionError,
    ModelAllocationError,
    SolverTimeoutError,
)
from threshold_identification.identification import (
    ConstraintRow,
    NotThreshold,
    Polarity,
    Threshold,
    identify_threshold,
    is_threshold,
    normalize_polarity,
    translate_solution,
)
from threshold_identification.lp import Relation, SolveStatus
from threshold_identification.truth_table import TruthTable

XOR2 = TruthTable.from_binary("0110")
MAJ3 = TruthTable.majority(3)


def rows_by_relation(solver, relation):
    return {
        frozenset(coefs.items())
        for coefs, rel, _ in solver.rows
        if rel is relation
    }


# ---------------------------------------------------------------------
# Polarity normalization
# ---------------------------------------------------------------------

def test_binate_function_is_rejected():
    assert normalize_polarity(XOR2) is None


def test_binate_in_later_variable():
    # x0 positive unate, x1 and x2 form an XOR
    tt = TruthTable.from_function(3, lambda xs: xs[0] and (xs[1] ^ xs[2]))
    assert normalize_polarity(tt) is None


def test_negative_unate_variable_is_flipped():
    tt = TruthTable.from_function(2, lambda xs: (not xs[0]) and xs[1])
    norm = normalize_polarity(tt)
    assert norm.flipped == (0,)
    assert norm.polarities == (Polarity.NEGATIVE, Polarity.POSITIVE)
    assert norm.table == TruthTable.from_function(2, lambda xs: xs[0] and xs[1])
    # caller's table is untouched
    assert tt == TruthTable.from_function(2, lambda xs: (not xs[0]) and xs[1])


def test_dont_care_variables():
    tt = TruthTable.nth_var(3, 1)
    norm = normalize_polarity(tt)
    assert norm.polarities == (Polarity.DONT_CARE, Polarity.POSITIVE, Polarity.DONT_CARE)
    assert norm.dont_cares == (0, 2)
    assert norm.flipped == ()


@pytest.mark.parametrize("value", [False, True])
def test_constant_functions_have_no_influential_variables(value):
    norm = normalize_polarity(TruthTable.constant(3, value))
    assert norm.dont_cares == (0, 1, 2)
    assert norm.table == TruthTable.constant(3, value)


# ---------------------------------------------------------------------
# ILP formulation (recorded by the fake solver)
# ---------------------------------------------------------------------

def test_majority_rows_and_objective(fake_solver):
    solver = fake_solver(solution=[1, 1, 1, 2])
    result = identify_threshold(MAJ3, solver)

    assert solver.num_columns == 4
    assert rows_by_relation(solver, Relation.GE) == {
        frozenset({0: 1, 1: 1, 3: -1}.items()),
        frozenset({0: 1, 2: 1, 3: -1}.items()),
        frozenset({1: 1, 2: 1, 3: -1}.items()),
    }
    # off-set cubes x0'x1', x0'x2', x1'x2' keep only their free variable
    assert rows_by_relation(solver, Relation.LE) == {
        frozenset({2: 1, 3: -1}.items()),
        frozenset({1: 1, 3: -1}.items()),
        frozenset({0: 1, 3: -1}.items()),
    }
    assert all(b == 0 for _, rel, b in solver.rows if rel is Relation.GE)
    assert all(b == -1 for _, rel, b in solver.rows if rel is Relation.LE)
    assert solver.objective == ({0: 1, 1: 1, 2: 1, 3: 1}, True)
    assert result == Threshold(linear_form=(1, 1, 1, 2))


def test_dont_care_weights_are_pinned_to_zero(fake_solver):
    solver = fake_solver(solution=[1, 0, 1])
    identify_threshold(TruthTable.nth_var(2, 0), solver)

    assert solver.bounds == {1: (0, 0)}
    assert all(1 not in coefs for coefs, _, _ in solver.rows)
    assert rows_by_relation(solver, Relation.GE) == {frozenset({0: 1, 2: -1}.items())}
    assert rows_by_relation(solver, Relation.LE) == {frozenset({2: -1}.items())}


def test_constant_zero_rows(fake_solver):
    solver = fake_solver(solution=[0, 0, 1])
    result = identify_threshold(TruthTable.constant(2, False), solver)
    assert solver.rows == [({2: -1}, Relation.LE, -1)]
    assert result == Threshold(linear_form=(0, 0, 1))


def test_constant_one_rows(fake_solver):
    solver = fake_solver(solution=[0, 0, 0])
    result = identify_threshold(TruthTable.constant(2, True), solver)
    assert solver.rows == [({2: -1}, Relation.GE, 0)]
    assert result == Threshold(linear_form=(0, 0, 0))


def test_constraint_row_scratch_buffer():
    row = ConstraintRow(4)
    row[0] = 1
    row[3] = -1
    assert row.sparse() == {0: 1, 3: -1}
    row.clear()
    assert row.sparse() == {}
    assert len(row.coefficients) == 4


# ---------------------------------------------------------------------
# Solution translation
# ---------------------------------------------------------------------

def test_translate_undoes_single_flip():
    result = translate_solution(SolveStatus.OPTIMAL, [1.0, 1.0], flipped=(0,))
    assert result == Threshold(linear_form=(-1, 0))
    assert result.weights == (-1,)
    assert result.threshold == 0


def test_translate_undoes_several_flips():
    result = translate_solution(SolveStatus.OPTIMAL, [2, 1, 1, 3], flipped=(0, 2))
    assert result.linear_form == (-2, 1, -1, 0)


def test_translate_rounds_solver_values():
    result = translate_solution(SolveStatus.SUBOPTIMAL, [0.9999999, 2.0000001], flipped=())
    assert result.linear_form == (1, 2)


@pytest.mark.parametrize(
    "status",
    [SolveStatus.INFEASIBLE, SolveStatus.UNBOUNDED, SolveStatus.FAILURE],
)
def test_translate_non_feasible_status(status):
    assert translate_solution(status, None, flipped=(0,)) == NotThreshold()


def test_result_truthiness():
    assert Threshold(linear_form=(1, 1))
    assert not NotThreshold()


def test_negative_unate_back_substitution_end_to_end(fake_solver):
    tt = ~TruthTable.nth_var(1, 0)
    solver = fake_solver(solution=[1, 1])
    assert identify_threshold(tt, solver) == Threshold(linear_form=(-1, 0))


# ---------------------------------------------------------------------
# Resource cleanup
# ---------------------------------------------------------------------

def test_binate_never_opens_a_model(fake_solver):
    solver = fake_solver()
    assert identify_threshold(XOR2, solver) == NotThreshold()
    assert solver.acquired == 0
    assert solver.released == 0


def test_model_released_after_success(fake_solver):
    solver = fake_solver(solution=[1, 1, 1, 2])
    identify_threshold(MAJ3, solver)
    assert solver.acquired == solver.released == 1


@pytest.mark.parametrize(
    "status",
    [SolveStatus.INFEASIBLE, SolveStatus.UNBOUNDED, SolveStatus.FAILURE],
)
def test_model_released_when_not_threshold(fake_solver, status):
    solver = fake_solver(status=status)
    assert identify_threshold(MAJ3, solver) == NotThreshold()
    assert solver.acquired == solver.released == 1
    assert solver.solution_reads == 0


def test_allocation_failure_is_a_fault(fake_solver):
    solver = fake_solver(fail_create=True)
    with pytest.raises(ModelAllocationError):
        identify_threshold(MAJ3, solver)
    assert solver.acquired == solver.released == 0


@pytest.mark.parametrize("fail_at", [0, 1, 4])
def test_row_failure_is_a_fault(fake_solver, fail_at):
    solver = fake_solver(fail_row_at=fail_at)
    with pytest.raises(ConstraintConstructionError):
        identify_threshold(MAJ3, solver)
    assert solver.acquired == solver.released == 1


def test_objective_failure_is_a_fault(fake_solver):
    solver = fake_solver(fail_objective=True)
    with pytest.raises(ConstraintConstructionError):
        identify_threshold(MAJ3, solver)
    assert solver.acquired == solver.released == 1


def test_bound_failure_is_a_fault(fake_solver):
    solver = fake_solver(fail_bounds=True)
    with pytest.raises(ConstraintConstructionError):
        identify_threshold(TruthTable.nth_var(2, 0), solver)
    assert solver.acquired == solver.released == 1


def test_repeated_calls_build_fresh_models(fake_solver):
    solver = fake_solver(solution=[1, 1, 1, 2])
    for _ in range(3):
        identify_threshold(MAJ3, solver)
    assert solver.acquired == solver.released == 3


def test_is_threshold_wrapper(fake_solver):
    assert is_threshold(MAJ3, fake_solver(solution=[1, 1, 1, 2])) == (True, [1, 1, 1, 2])
    assert is_threshold(XOR2, fake_solver()) == (False, None)


# ---------------------------------------------------------------------
# Solver stopped without an answer
# ---------------------------------------------------------------------

def test_translate_not_solved_is_unknown():
    with pytest.raises(SolverTimeoutError):
        translate_solution(SolveStatus.NOT_SOLVED, None, flipped=())


def test_not_solved_is_a_fault_and_releases_model(fake_solver):
    solver = fake_solver(status=SolveStatus.NOT_SOLVED)
    with pytest.raises(SolverTimeoutError):
        identify_threshold(MAJ3, solver)
    assert solver.acquired == solver.released == 1
    assert solver.solution_reads == 0


def test_suboptimal_incumbent_is_accepted(fake_solver):
    solver = fake_solver(status=SolveStatus.SUBOPTIMAL, solution=[2, 2, 2, 4])
    assert identify_threshold(MAJ3, solver) == Threshold(linear_form=(2, 2, 2, 4))


def test_config_alongside_solver_is_rejected(fake_solver):
    solver = fake_solver(solution=[1, 1, 1, 2])
    with pytest.raises(ValueError):
        identify_threshold(MAJ3, solver, SolverConfig(time_limit=1))
    assert solver.acquired == 0
