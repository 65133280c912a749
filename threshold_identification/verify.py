"""
Verification of linear forms against the truth table they claim to realize.

Identification does not re-simulate its own answer; these helpers do, row by
row over all 2^n assignments.
"""

from typing import Sequence

from .truth_table import TruthTable, minterm_to_bits


def evaluate_linear_form(
    weights: Sequence[int], threshold: int, assignment: Sequence[int]
) -> bool:
    """Evaluate sum_i w_i x_i >= T on a specific input."""
    return sum(w * x for w, x in zip(weights, assignment)) >= threshold


def verify_linear_form(
    tt: TruthTable, linear_form: Sequence[int]
) -> tuple[bool, list[str]]:
    """
    Verify that a linear form reproduces `tt` on every assignment.

    Args:
        tt: The function the form should realize
        linear_form: n weights followed by the threshold

    Returns:
        Tuple of (all_correct, list of error messages)
    """
    if len(linear_form) != tt.num_vars + 1:
        return False, [
            f"Linear form has {len(linear_form)} entries, "
            f"expected {tt.num_vars + 1} for {tt.num_vars} variables"
        ]

    weights, threshold = linear_form[:-1], linear_form[-1]
    errors = []

    for m in range(1 << tt.num_vars):
        assignment = minterm_to_bits(m, tt.num_vars)
        actual = evaluate_linear_form(weights, threshold, assignment)
        expected = bool((tt.bits >> m) & 1)

        if actual != expected:
            bits = "".join(str(b) for b in reversed(assignment))
            errors.append(
                f"Minterm {m} ({bits or '-'}): expected {int(expected)}, got {int(actual)}"
            )

    return len(errors) == 0, errors


def print_truth_table_comparison(tt: TruthTable, linear_form: Sequence[int]) -> bool:
    """Print truth table comparing expected outputs with the linear form."""
    n = tt.num_vars
    weights, threshold = linear_form[:-1], linear_form[-1]
    header = "".join(f"x{i}".rjust(4) for i in reversed(range(n)))

    print("Truth Table Verification")
    print("=" * 50)
    print(f"{'m':>5} |{header} |   sum | f | lf | Match")
    print("-" * 50)

    all_match = True
    for m in range(1 << n):
        assignment = minterm_to_bits(m, n)
        total = sum(w * x for w, x in zip(weights, assignment))
        expected = (tt.bits >> m) & 1
        actual = int(total >= threshold)
        if expected != actual:
            all_match = False

        bits = "".join(f"{b:>4}" for b in reversed(assignment))
        print(
            f"{m:>5} |{bits} | {total:>5} | {expected} | {actual:>2} | "
            f"{'.' if expected == actual else 'X'}"
        )

    print("-" * 50)
    print(f"All correct: {all_match}")
    return all_match
