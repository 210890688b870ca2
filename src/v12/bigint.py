"""
Arbitrary-precision signed integers.

Every V12 integer is a BigInt: a sign plus a magnitude stored as a tuple of
base 10**9 limbs, least significant limb first. Values are immutable and
kept in canonical form (no leading zero limbs, zero is ``BigInt(0, (0,))``),
so structural equality is value equality and BigInts can be hashed.

Arithmetic never overflows: magnitudes grow limb by limb as needed. Only
individual limbs (and limb products, below 10**18) are held in native
integers.

Usage:
    from v12.bigint import parse_integer, add, to_decimal_string

    total = add(parse_integer("999999999999999999"), parse_integer("1"))
    to_decimal_string(total)   # '1000000000000000000'
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Sequence, Tuple

from .errors import error_malformed_literal, error_division_by_zero

BASE_DIGITS = 9
BASE = 10 ** BASE_DIGITS

_DECIMAL_DIGITS = frozenset("0123456789")


class Ordering(Enum):
    """Result of comparing two integers."""
    LESS = -1
    EQUAL = 0
    GREATER = 1


@dataclass(frozen=True)
class BigInt:
    """
    An arbitrary-precision signed integer.

    Construct through ``parse_integer`` or ``from_int`` rather than directly;
    the constructor rejects non-canonical sign/limb combinations.
    """
    sign: int                   # -1, 0 or 1
    limbs: Tuple[int, ...]      # least significant limb first

    def __post_init__(self):
        if self.sign not in (-1, 0, 1):
            raise ValueError(f"invalid sign {self.sign!r}")
        if not self.limbs:
            raise ValueError("magnitude must have at least one limb")
        if self.sign == 0:
            if self.limbs != (0,):
                raise ValueError("zero must be represented as a single zero limb")
        elif self.limbs[-1] == 0:
            raise ValueError("magnitude has a leading zero limb")

    @property
    def is_zero(self) -> bool:
        return self.sign == 0

    @property
    def is_negative(self) -> bool:
        return self.sign < 0

    def __str__(self) -> str:
        return to_decimal_string(self)

    def __repr__(self) -> str:
        return f"BigInt({to_decimal_string(self)})"

    def __neg__(self) -> "BigInt":
        return negate(self)

    def __add__(self, other):
        if not isinstance(other, BigInt):
            return NotImplemented
        return add(self, other)

    def __sub__(self, other):
        if not isinstance(other, BigInt):
            return NotImplemented
        return subtract(self, other)

    def __mul__(self, other):
        if not isinstance(other, BigInt):
            return NotImplemented
        return multiply(self, other)

    def __floordiv__(self, other):
        # Truncates toward zero, unlike Python's int floor division
        if not isinstance(other, BigInt):
            return NotImplemented
        return divide(self, other)

    def __mod__(self, other):
        if not isinstance(other, BigInt):
            return NotImplemented
        return remainder(self, other)

    def __lt__(self, other):
        if not isinstance(other, BigInt):
            return NotImplemented
        return compare(self, other) is Ordering.LESS

    def __le__(self, other):
        if not isinstance(other, BigInt):
            return NotImplemented
        return compare(self, other) is not Ordering.GREATER

    def __gt__(self, other):
        if not isinstance(other, BigInt):
            return NotImplemented
        return compare(self, other) is Ordering.GREATER

    def __ge__(self, other):
        if not isinstance(other, BigInt):
            return NotImplemented
        return compare(self, other) is not Ordering.LESS


ZERO = BigInt(0, (0,))
ONE = BigInt(1, (1,))


# --- Construction and rendering ---

def parse_integer(literal: str) -> BigInt:
    """
    Parse a decimal literal into a BigInt.

    A single leading '-' is the only sign accepted. Leading zeros are
    allowed and dropped. There is no limit on the number of digits.

    Raises:
        MalformedLiteralError: if the text is empty or holds anything
            other than decimal digits after the optional '-'.
    """
    if not isinstance(literal, str):
        raise error_malformed_literal(repr(literal))

    negative = literal.startswith("-")
    digits = literal[1:] if negative else literal
    if not digits or not _DECIMAL_DIGITS.issuperset(digits):
        raise error_malformed_literal(literal)

    limbs = []
    for end in range(len(digits), 0, -BASE_DIGITS):
        start = max(0, end - BASE_DIGITS)
        limbs.append(int(digits[start:end]))
    return _normalize(-1 if negative else 1, limbs)


def from_int(n: int) -> BigInt:
    """Build a BigInt from a Python integer via its decimal text."""
    return parse_integer(str(n))


def to_decimal_string(a: BigInt) -> str:
    """Render the canonical decimal form, with '-' for negative values."""
    parts = [str(a.limbs[-1])]
    parts.extend(f"{limb:0{BASE_DIGITS}d}" for limb in reversed(a.limbs[:-1]))
    text = "".join(parts)
    return "-" + text if a.sign < 0 else text


# --- Comparison ---

def compare_magnitude(a: BigInt, b: BigInt) -> Ordering:
    """Compare absolute values: limb count first, then most significant limb first."""
    return _ORDERINGS[_cmp_mag(a.limbs, b.limbs)]


def compare(a: BigInt, b: BigInt) -> Ordering:
    """Signed comparison."""
    if a.sign != b.sign:
        return Ordering.LESS if a.sign < b.sign else Ordering.GREATER
    if a.sign == 0:
        return Ordering.EQUAL
    return _ORDERINGS[a.sign * _cmp_mag(a.limbs, b.limbs)]


# --- Arithmetic ---

def negate(a: BigInt) -> BigInt:
    if a.sign == 0:
        return a
    return BigInt(-a.sign, a.limbs)


def add(a: BigInt, b: BigInt) -> BigInt:
    """
    Exact sum of two BigInts.

    Matching signs add magnitudes with carry propagation. Differing signs
    subtract the smaller magnitude from the larger; the result takes the
    sign of the larger-magnitude operand.
    """
    if a.sign == 0:
        return b
    if b.sign == 0:
        return a
    if a.sign == b.sign:
        return _normalize(a.sign, _add_mag(a.limbs, b.limbs))

    order = _cmp_mag(a.limbs, b.limbs)
    if order == 0:
        return ZERO
    if order > 0:
        return _normalize(a.sign, _sub_mag(a.limbs, b.limbs))
    return _normalize(b.sign, _sub_mag(b.limbs, a.limbs))


def subtract(a: BigInt, b: BigInt) -> BigInt:
    """Exact difference a - b."""
    return add(a, negate(b))


def multiply(a: BigInt, b: BigInt) -> BigInt:
    """Exact product using grade-school limb convolution."""
    if a.sign == 0 or b.sign == 0:
        return ZERO
    return _normalize(a.sign * b.sign, _mul_mag(a.limbs, b.limbs))


def divide(a: BigInt, b: BigInt) -> BigInt:
    """
    Quotient a / b truncated toward zero.

    Raises:
        DivisionByZeroError: if b is zero.
    """
    if b.sign == 0:
        raise error_division_by_zero()
    if a.sign == 0:
        return ZERO
    quotient, _ = _divmod_mag(a.limbs, b.limbs)
    return _normalize(a.sign * b.sign, quotient)


def remainder(a: BigInt, b: BigInt) -> BigInt:
    """
    Remainder of a / b; the result carries the sign of the dividend.

    Raises:
        DivisionByZeroError: if b is zero.
    """
    if b.sign == 0:
        raise error_division_by_zero()
    if a.sign == 0:
        return ZERO
    _, rem = _divmod_mag(a.limbs, b.limbs)
    return _normalize(a.sign, rem)


# --- Magnitude helpers (limb sequences, least significant first) ---

_ORDERINGS = {-1: Ordering.LESS, 0: Ordering.EQUAL, 1: Ordering.GREATER}


def _normalize(sign: int, limbs: List[int]) -> BigInt:
    limbs = _strip(limbs)
    if len(limbs) == 1 and limbs[0] == 0:
        return ZERO
    return BigInt(sign, tuple(limbs))


def _strip(limbs: Sequence[int]) -> List[int]:
    result = list(limbs)
    while len(result) > 1 and result[-1] == 0:
        result.pop()
    return result or [0]


def _cmp_mag(a: Sequence[int], b: Sequence[int]) -> int:
    if len(a) != len(b):
        return -1 if len(a) < len(b) else 1
    for i in range(len(a) - 1, -1, -1):
        if a[i] != b[i]:
            return -1 if a[i] < b[i] else 1
    return 0


def _add_mag(a: Sequence[int], b: Sequence[int]) -> List[int]:
    if len(a) < len(b):
        a, b = b, a
    result = []
    carry = 0
    for i in range(len(a)):
        total = a[i] + (b[i] if i < len(b) else 0) + carry
        if total >= BASE:
            result.append(total - BASE)
            carry = 1
        else:
            result.append(total)
            carry = 0
    if carry:
        result.append(carry)
    return result


def _sub_mag(a: Sequence[int], b: Sequence[int]) -> List[int]:
    # Requires |a| >= |b|
    result = []
    borrow = 0
    for i in range(len(a)):
        diff = a[i] - (b[i] if i < len(b) else 0) - borrow
        if diff < 0:
            result.append(diff + BASE)
            borrow = 1
        else:
            result.append(diff)
            borrow = 0
    return _strip(result)


def _mul_mag(a: Sequence[int], b: Sequence[int]) -> List[int]:
    result = [0] * (len(a) + len(b))
    for i, ai in enumerate(a):
        if ai == 0:
            continue
        carry = 0
        for j, bj in enumerate(b):
            cur = result[i + j] + ai * bj + carry
            result[i + j] = cur % BASE
            carry = cur // BASE
        k = i + len(b)
        while carry:
            cur = result[k] + carry
            result[k] = cur % BASE
            carry = cur // BASE
            k += 1
    return _strip(result)


def _mul_small(a: Sequence[int], m: int) -> List[int]:
    # m is a single limb value, 0 <= m < BASE
    if m == 0:
        return [0]
    result = []
    carry = 0
    for limb in a:
        cur = limb * m + carry
        result.append(cur % BASE)
        carry = cur // BASE
    if carry:
        result.append(carry)
    return result


def _divmod_mag(a: Sequence[int], b: Sequence[int]) -> Tuple[List[int], List[int]]:
    """Schoolbook long division of magnitudes; b must be non-zero."""
    if _cmp_mag(a, b) < 0:
        return [0], list(a)

    if len(b) == 1:
        divisor = b[0]
        quotient = [0] * len(a)
        rem = 0
        for i in range(len(a) - 1, -1, -1):
            cur = rem * BASE + a[i]
            quotient[i] = cur // divisor
            rem = cur % divisor
        return _strip(quotient), [rem]

    quotient = [0] * len(a)
    rem: List[int] = [0]
    for i in range(len(a) - 1, -1, -1):
        # rem = rem * BASE + a[i]
        rem = _strip([a[i]] + rem)
        if _cmp_mag(rem, b) < 0:
            continue
        # Largest digit q with b * q <= rem
        lo, hi = 1, BASE - 1
        while lo < hi:
            mid = (lo + hi + 1) // 2
            if _cmp_mag(_mul_small(b, mid), rem) <= 0:
                lo = mid
            else:
                hi = mid - 1
        quotient[i] = lo
        rem = _sub_mag(rem, _mul_small(b, lo))
    return _strip(quotient), rem
