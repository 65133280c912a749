"""
Export identification results to text formats (inequality, Verilog, JSON).
"""

import json
from typing import Sequence

from .identification import IdentificationResult, Threshold
from .truth_table import TruthTable


def _var_names(n: int, var_names: Sequence[str] = None) -> list[str]:
    if var_names is None:
        return [f"x{i}" for i in range(n)]
    if len(var_names) != n:
        raise ValueError(f"Expected {n} variable names, got {len(var_names)}")
    return list(var_names)


def to_inequality(linear_form: Sequence[int], var_names: Sequence[str] = None) -> str:
    """
    Format a linear form as an inequality, e.g. "2*x0 + x1 - x2 >= 1".

    Zero weights are omitted; an all-zero left side is written as 0.
    """
    weights, threshold = linear_form[:-1], linear_form[-1]
    names = _var_names(len(weights), var_names)

    lhs = ""
    for name, w in zip(names, weights):
        if w == 0:
            continue
        magnitude = abs(w)
        term = name if magnitude == 1 else f"{magnitude}*{name}"
        if not lhs:
            lhs = term if w > 0 else f"-{term}"
        else:
            lhs += f" + {term}" if w > 0 else f" - {term}"

    return f"{lhs or '0'} >= {threshold}"


def to_verilog(linear_form: Sequence[int], module_name: str = "threshold_gate") -> str:
    """
    Export a linear form as a combinational Verilog module.

    Args:
        linear_form: n weights followed by the threshold
        module_name: Name for the Verilog module

    Returns:
        Verilog source code as string
    """
    weights, threshold = linear_form[:-1], linear_form[-1]
    n = len(weights)
    # Wide enough for any reachable weighted sum and the threshold
    bound = max(sum(abs(w) for w in weights), abs(threshold), 1)
    width = bound.bit_length() + 2

    lines = []
    lines.append(f"// Threshold gate: {to_inequality(linear_form)}")
    lines.append("")
    if n:
        lines.append(f"module {module_name} (")
        lines.append(f"    input  wire [{n - 1}:0] x,")
        lines.append("    output wire f")
        lines.append(");")
    else:
        lines.append(f"module {module_name} (")
        lines.append("    output wire f")
        lines.append(");")
    lines.append("")

    terms = []
    for i, w in enumerate(weights):
        if w:
            terms.append(f"({w}) * $signed({{1'b0, x[{i}]}})")
    expr = " + ".join(terms) if terms else "0"

    lines.append(f"    wire signed [{width - 1}:0] acc = {expr};")
    lines.append(f"    assign f = (acc >= {threshold});")
    lines.append("")
    lines.append("endmodule")

    return "\n".join(lines)


def to_json(tt: TruthTable, result: IdentificationResult, indent: int = 2) -> str:
    """Serialize a truth table and its identification result."""
    doc = {
        "num_vars": tt.num_vars,
        "truth_table": tt.to_hex(),
        "is_threshold": bool(result),
    }
    if isinstance(result, Threshold):
        doc["weights"] = list(result.weights)
        doc["threshold"] = result.threshold
        doc["inequality"] = to_inequality(result.linear_form)
    return json.dumps(doc, indent=indent)
