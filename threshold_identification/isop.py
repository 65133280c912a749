"""
Irredundant sum-of-products (ISOP) covers of completely specified functions.

Implements the Minato-Morreale recursion: split on the highest variable in the
support, cover the parts that need x' and x, then cover what remains with
cubes free in that variable.
"""

import logging
from dataclasses import dataclass
from typing import Sequence

from .truth_table import TruthTable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Cube:
    """
    A product term over variables x0..x_{n-1}.

    - mask: which variables appear (1 = literal present, 0 = free)
    - bits: the literal polarity for variables in the mask (1 = x, 0 = x')

    The empty cube (mask 0) is the tautology.
    """

    mask: int = 0
    bits: int = 0

    def get_mask(self, var: int) -> bool:
        return bool((self.mask >> var) & 1)

    def get_bit(self, var: int) -> bool:
        return bool((self.bits >> var) & 1)

    @property
    def num_literals(self) -> int:
        """Count the number of literals in this cube."""
        return bin(self.mask).count("1")

    def covers(self, minterm: int) -> bool:
        """Check if this cube contains a given minterm."""
        return (minterm & self.mask) == (self.bits & self.mask)

    def add_literal(self, var: int, polarity: bool) -> "Cube":
        """Return this cube with literal x_var (polarity True) or x_var' added."""
        bit = 1 << var
        return Cube(
            mask=self.mask | bit,
            bits=(self.bits | bit) if polarity else (self.bits & ~bit),
        )

    def to_expr_str(self, var_names: Sequence[str] = None) -> str:
        """Convert to a product term string, e.g. x0x2'."""
        width = max(self.mask.bit_length(), 1)
        if var_names is None:
            var_names = [f"x{i}" for i in range(width)]

        literals = []
        for i in range(width):
            if self.get_mask(i):
                literals.append(var_names[i] if self.get_bit(i) else f"{var_names[i]}'")

        return "".join(literals) if literals else "1"

    def __repr__(self):
        return f"Cube({self.to_expr_str()})"


def _isop_rec(
    on: TruthTable, upper: TruthTable, var_index: int, cubes: list[Cube]
) -> TruthTable:
    """
    Cover some function g with on <= g <= upper, appending cubes.

    Only variables below `var_index` may appear in the new cubes. Returns the
    function of the cubes appended by this call.
    """
    if on.is_const0():
        return on
    if upper.is_const1():
        cubes.append(Cube())
        return upper

    var = var_index - 1
    while var >= 0 and not (on.has_var(var) or upper.has_var(var)):
        var -= 1
    if var < 0:
        raise RuntimeError("ISOP bounds are inconsistent: lower bound exceeds upper bound")

    on0, on1 = on.cofactor0(var), on.cofactor1(var)
    up0, up1 = upper.cofactor0(var), upper.cofactor1(var)

    beg0 = len(cubes)
    res0 = _isop_rec(on0 & ~up1, up0, var, cubes)
    end0 = len(cubes)
    res1 = _isop_rec(on1 & ~up0, up1, var, cubes)
    end1 = len(cubes)
    res2 = _isop_rec((on0 & ~res0) | (on1 & ~res1), up0 & up1, var, cubes)

    for c in range(beg0, end0):
        cubes[c] = cubes[c].add_literal(var, False)
    for c in range(end0, end1):
        cubes[c] = cubes[c].add_literal(var, True)

    x = TruthTable.nth_var(on.num_vars, var)
    return res2 | (res0 & ~x) | (res1 & x)


def isop(tt: TruthTable) -> list[Cube]:
    """
    Compute an irredundant sum-of-products cover of `tt`.

    Args:
        tt: Completely specified function

    Returns:
        Cubes whose union is exactly `tt`; [] for constant 0 and the single
        empty cube for constant 1
    """
    cubes: list[Cube] = []
    _isop_rec(tt, tt, tt.num_vars, cubes)
    logger.debug("ISOP of %s: %d cubes", tt.to_hex(), len(cubes))
    return cubes


def cubes_to_truth_table(cubes: Sequence[Cube], num_vars: int) -> TruthTable:
    """Rebuild the function of a cube cover (OR of AND terms)."""
    return TruthTable.from_function(
        num_vars,
        lambda xs: any(
            c.covers(sum(b << i for i, b in enumerate(xs))) for c in cubes
        ),
    )


def print_cover(cubes: Sequence[Cube], var_names: Sequence[str] = None):
    """Debug helper to print a cube cover."""
    print(f"Cover ({len(cubes)} cubes):")
    for c in sorted(cubes, key=lambda x: (x.num_literals, x.mask, x.bits)):
        print(f"  {c.to_expr_str(var_names):8} ({c.num_literals} lit)")
