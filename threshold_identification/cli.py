"""Command-line interface for threshold function identification."""

import argparse
import logging
import sys

from .config import SolverConfig
from .errors import ThresholdSolverError
from .export import to_inequality, to_json, to_verilog
from .identification import Threshold, identify_threshold
from .isop import isop, print_cover
from .lp import get_solver
from .truth_table import TruthTable
from .verify import print_truth_table_comparison, verify_linear_form


def init_argparse() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Identify threshold logic functions and compute a linear form",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  tlf-identify 11101000              MAJ-3 as a binary truth table
  tlf-identify --hex e8 1ee8         Several functions as hex
  tlf-identify --majority 5          Built-in MAJ-5
  tlf-identify 0110 --format json    XOR-2, JSON output
  tlf-identify e8 --hex --verify     Re-simulate the linear form
        """,
    )

    parser.add_argument(
        "functions",
        nargs="*",
        metavar="FUNCTION",
        help="Truth table, most significant minterm first (binary unless --hex)",
    )
    parser.add_argument(
        "--hex",
        action="store_true",
        help="Read FUNCTION arguments as hex strings",
    )
    parser.add_argument(
        "--majority",
        type=int,
        metavar="K",
        help="Also identify the K-input majority function",
    )
    parser.add_argument(
        "--solver",
        choices=["pulp", "z3"],
        default="pulp",
        help="ILP backend (default: pulp)",
    )
    parser.add_argument(
        "--time-limit",
        type=float,
        help="Solver time limit in seconds (default: none)",
    )
    parser.add_argument(
        "--format", "-f",
        choices=["text", "inequality", "verilog", "json"],
        default="text",
        help="Output format (default: text)",
    )
    parser.add_argument(
        "--verify",
        action="store_true",
        help="Re-simulate every linear form against its truth table",
    )
    parser.add_argument(
        "--show-covers",
        action="store_true",
        help="Print the ISOP covers of each function and its complement",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output",
    )
    return parser


def parse_functions(args) -> list[TruthTable]:
    tables = []
    for text in args.functions:
        if args.hex:
            tables.append(TruthTable.from_hex(text))
        else:
            tables.append(TruthTable.from_binary(text))
    if args.majority is not None:
        if args.majority < 1:
            raise ValueError(f"--majority needs K >= 1, got {args.majority}")
        tables.append(TruthTable.majority(args.majority))
    if not tables:
        raise ValueError("No functions given")
    return tables


def print_result(tt: TruthTable, result):
    print(f"Function 0x{tt.to_hex()} ({tt.num_vars} variables)")
    if isinstance(result, Threshold):
        weights = ", ".join(str(w) for w in result.weights)
        print("  Threshold function: yes")
        print(f"  Linear form: [{weights}; {result.threshold}]")
        print(f"  Inequality:  {to_inequality(result.linear_form)}")
    else:
        print("  Threshold function: no")


def report(tt: TruthTable, result, fmt: str):
    if fmt == "json":
        print(to_json(tt, result))
    elif fmt == "verilog":
        if isinstance(result, Threshold):
            print(to_verilog(result.linear_form, module_name=f"tf_{tt.to_hex()}"))
        else:
            print(f"// 0x{tt.to_hex()} is not a threshold function")
    elif fmt == "inequality":
        if isinstance(result, Threshold):
            print(to_inequality(result.linear_form))
        else:
            print("not threshold")
    else:
        print_result(tt, result)


def main(argv=None):
    parser = init_argparse()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s.%(msecs)03d - %(funcName)s: %(message)s",
        datefmt="%m-%d %H:%M:%S",
    )

    try:
        tables = parse_functions(args)
        solver = get_solver(args.solver, SolverConfig(time_limit=args.time_limit))

        failed = False
        for tt in tables:
            if args.show_covers:
                print_cover(isop(tt))
                print_cover(isop(~tt))

            result = identify_threshold(tt, solver)
            report(tt, result, args.format)

            if args.verify and isinstance(result, Threshold):
                if args.format == "text":
                    print()
                    ok = print_truth_table_comparison(tt, result.linear_form)
                else:
                    ok, errors = verify_linear_form(tt, result.linear_form)
                    for err in errors:
                        print(f"  {err}", file=sys.stderr)
                if not ok:
                    print(f"Verification FAILED for 0x{tt.to_hex()}", file=sys.stderr)
                    failed = True

        return 1 if failed else 0

    except (ValueError, ThresholdSolverError) as e:
        print(f"Error: {e}", file=sys.stderr)
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
