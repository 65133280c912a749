"""
Complete truth tables for Boolean functions of n variables.

A truth table over n variables holds 2^n output bits packed into a Python int:
- Bit m of the int is the output for minterm m
- Variable i is bit i of the minterm index (variable 0 is the LSB input)

For 3 variables (x2, x1, x0), MAJ-3 is 0b11101000 = 0xe8:

    m  | x2 x1 x0 | f
    ---+----------+--
    0  |  0  0  0 | 0
    3  |  0  1  1 | 1
    7  |  1  1  1 | 1

Binary and hex strings are written most significant minterm first, so the
string "0110" is XOR of two variables.
"""

from dataclasses import dataclass
from functools import lru_cache
from typing import Callable, Iterator, Sequence


@lru_cache(maxsize=None)
def _var_mask(num_vars: int, var: int) -> int:
    """Bits of all minterms in which variable `var` is 1."""
    shift = 1 << var
    period = shift << 1
    block = ((1 << shift) - 1) << shift
    reps = (1 << num_vars) // period
    # Repeat the block every `period` bits
    return block * (((1 << (period * reps)) - 1) // ((1 << period) - 1))


def _full_mask(num_vars: int) -> int:
    return (1 << (1 << num_vars)) - 1


def minterm_to_bits(minterm: int, num_vars: int) -> tuple[int, ...]:
    """Convert a minterm index to its assignment (x0, x1, ..., x_{n-1})."""
    return tuple((minterm >> i) & 1 for i in range(num_vars))


def bits_to_minterm(bits: Sequence[int]) -> int:
    """Convert an assignment (x0, x1, ...) to its minterm index."""
    minterm = 0
    for i, b in enumerate(bits):
        if b:
            minterm |= 1 << i
    return minterm


@dataclass(frozen=True)
class TruthTable:
    """
    Immutable truth table of a completely specified Boolean function.

    All operations return new tables; nothing mutates `bits` in place.
    """

    num_vars: int
    bits: int = 0

    def __post_init__(self):
        if self.num_vars < 0:
            raise ValueError(f"num_vars must be >= 0, got {self.num_vars}")
        if self.bits < 0 or self.bits > _full_mask(self.num_vars):
            raise ValueError(
                f"bits 0x{self.bits:x} do not fit a {self.num_vars}-variable table"
            )

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_binary(cls, text: str) -> "TruthTable":
        """Parse a binary string, most significant minterm first."""
        text = text.strip()
        length = len(text)
        if length == 0 or length & (length - 1):
            raise ValueError(f"Binary truth table length must be a power of two: {text!r}")
        if any(ch not in "01" for ch in text):
            raise ValueError(f"Binary truth table may only contain 0 and 1: {text!r}")
        return cls(num_vars=length.bit_length() - 1, bits=int(text, 2))

    @classmethod
    def from_hex(cls, text: str, num_vars: int = None) -> "TruthTable":
        """
        Parse a hex string, most significant minterm first.

        Without `num_vars` the variable count is derived from the string
        length (4 bits per digit, so at least 2 variables).
        """
        text = text.strip().lower()
        if text.startswith("0x"):
            text = text[2:]
        if not text:
            raise ValueError("Empty hex truth table")
        try:
            value = int(text, 16)
        except ValueError:
            raise ValueError(f"Invalid hex truth table: {text!r}") from None

        if num_vars is None:
            num_bits = 4 * len(text)
            if num_bits & (num_bits - 1):
                raise ValueError(f"Hex truth table length must be a power of two bits: {text!r}")
            num_vars = num_bits.bit_length() - 1

        if value > _full_mask(num_vars):
            raise ValueError(f"Hex truth table {text!r} does not fit {num_vars} variables")
        return cls(num_vars=num_vars, bits=value)

    @classmethod
    def from_function(
        cls, num_vars: int, fn: Callable[[tuple[int, ...]], bool]
    ) -> "TruthTable":
        """Build a table by evaluating `fn` on every assignment (x0, ..., x_{n-1})."""
        bits = 0
        for m in range(1 << num_vars):
            if fn(minterm_to_bits(m, num_vars)):
                bits |= 1 << m
        return cls(num_vars=num_vars, bits=bits)

    @classmethod
    def from_linear_form(cls, weights: Sequence[int], threshold: int) -> "TruthTable":
        """Simulate sum_i w_i x_i >= T over all assignments."""
        return cls.from_function(
            len(weights),
            lambda xs: sum(w * x for w, x in zip(weights, xs)) >= threshold,
        )

    @classmethod
    def constant(cls, num_vars: int, value: bool) -> "TruthTable":
        return cls(num_vars=num_vars, bits=_full_mask(num_vars) if value else 0)

    @classmethod
    def nth_var(cls, num_vars: int, var: int) -> "TruthTable":
        """Projection function f = x_var."""
        if not 0 <= var < num_vars:
            raise IndexError(f"Variable {var} out of range for {num_vars} variables")
        return cls(num_vars=num_vars, bits=_var_mask(num_vars, var))

    @classmethod
    def majority(cls, num_vars: int) -> "TruthTable":
        """MAJ-n: true when more than half of the inputs are 1."""
        return cls.from_function(num_vars, lambda xs: 2 * sum(xs) > num_vars)

    # ------------------------------------------------------------------
    # Cofactors and polarity
    # ------------------------------------------------------------------

    def _check_var(self, var: int):
        if not 0 <= var < self.num_vars:
            raise IndexError(f"Variable {var} out of range for {self.num_vars} variables")

    def cofactor0(self, var: int) -> "TruthTable":
        """f with x_var fixed to 0, still over num_vars variables."""
        self._check_var(var)
        shift = 1 << var
        low = self.bits & ~_var_mask(self.num_vars, var)
        return TruthTable(self.num_vars, low | (low << shift))

    def cofactor1(self, var: int) -> "TruthTable":
        """f with x_var fixed to 1, still over num_vars variables."""
        self._check_var(var)
        shift = 1 << var
        high = self.bits & _var_mask(self.num_vars, var)
        return TruthTable(self.num_vars, high | (high >> shift))

    def flip(self, var: int) -> "TruthTable":
        """f with input x_var complemented."""
        self._check_var(var)
        shift = 1 << var
        mask = _var_mask(self.num_vars, var)
        high = self.bits & mask
        low = self.bits & ~mask
        return TruthTable(self.num_vars, (high >> shift) | (low << shift))

    def has_var(self, var: int) -> bool:
        """True if the function depends on x_var."""
        return self.cofactor0(var) != self.cofactor1(var)

    # ------------------------------------------------------------------
    # Bitwise operators
    # ------------------------------------------------------------------

    def _operand(self, other) -> "TruthTable":
        if not isinstance(other, TruthTable):
            raise TypeError(f"Expected TruthTable, got {type(other).__name__}")
        if other.num_vars != self.num_vars:
            raise ValueError(
                f"Truth tables differ in size: {self.num_vars} vs {other.num_vars} variables"
            )
        return other

    def __invert__(self) -> "TruthTable":
        return TruthTable(self.num_vars, ~self.bits & _full_mask(self.num_vars))

    def __or__(self, other: "TruthTable") -> "TruthTable":
        return TruthTable(self.num_vars, self.bits | self._operand(other).bits)

    def __and__(self, other: "TruthTable") -> "TruthTable":
        return TruthTable(self.num_vars, self.bits & self._operand(other).bits)

    def __xor__(self, other: "TruthTable") -> "TruthTable":
        return TruthTable(self.num_vars, self.bits ^ self._operand(other).bits)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def is_const0(self) -> bool:
        return self.bits == 0

    def is_const1(self) -> bool:
        return self.bits == _full_mask(self.num_vars)

    def count_ones(self) -> int:
        return bin(self.bits).count("1")

    def evaluate(self, assignment: Sequence[int]) -> bool:
        """Output for an assignment (x0, x1, ..., x_{n-1})."""
        if len(assignment) != self.num_vars:
            raise ValueError(
                f"Expected {self.num_vars} input values, got {len(assignment)}"
            )
        return bool((self.bits >> bits_to_minterm(assignment)) & 1)

    def minterms(self) -> Iterator[int]:
        """Minterm indices of the on-set in increasing order."""
        for m in range(1 << self.num_vars):
            if (self.bits >> m) & 1:
                yield m

    def to_binary(self) -> str:
        return format(self.bits, f"0{1 << self.num_vars}b")

    def to_hex(self) -> str:
        digits = max(1, (1 << self.num_vars) // 4)
        return format(self.bits, f"0{digits}x")

    def __str__(self):
        return self.to_binary()
