"""
Copyright (c) 2020, the Decred developers
See LICENSE for details

Integer arithmetic modulo the Mersenne prime p = 2^61 - 1.

The functions in this module work on plain integers confined to 64 bits and
take advantage of the special form of the prime to allow lazy reduction:
  + Sums of 4 partially reduced values can be formed before reduction.
  + Products of partially reduced values need only a partial reduction.
"""

import enum
from typing import Callable, Dict, NewType, Tuple

from fp61 import Fp61Error
from fp61.util import helpers


log = helpers.getLogger("FIELD")

# p = 2^61 - 1
PRIME = (1 << 61) - 1

MASK32 = (1 << 32) - 1
MASK61 = PRIME
MASK62 = (1 << 62) - 1
# All bits set except #63.
MASK63 = (1 << 63) - 1
MASK64 = (1 << 64) - 1

# The largest value that fits in the field, p - 1, is also used as a
# placeholder for the 61-bit pattern of all ones (p itself) by the byte codec.
AMBIGUITY = PRIME - 1

# The one partially reduced bit pattern that finalize does not handle.
# partialReduce never produces it.
FINALIZE_EXCLUDED = 0x3FFFFFFFFFFFFFFE

# Representation states. These carry no runtime cost and exist for static
# type checkers. See FieldVal for a checked alternative.
Raw = NewType("Raw", int)  # any 64-bit value
Partial = NewType("Partial", int)  # bits #63 and #62 clear
Canonical = NewType("Canonical", int)  # less than p


def mul128Native(x: int, y: int) -> Tuple[int, int]:
    """
    64x64->128 multiply using the arbitrary precision integer product.

    Args:
        x (int): 64-bit operand.
        y (int): 64-bit operand.

    Returns:
        tuple(int, int): The high and low 64-bit words of the product.
    """
    w = x * y
    return w >> 64, w & MASK64


def mul128Schoolbook(x: int, y: int) -> Tuple[int, int]:
    """
    64x64->128 multiply from four 32x32->64 partial products, the way it is
    done without a wide multiplier.

    Args:
        x (int): 64-bit operand.
        y (int): 64-bit operand.

    Returns:
        tuple(int, int): The high and low 64-bit words of the product.
    """
    x0, x1 = x & MASK32, x >> 32
    y0, y1 = y & MASK32, y >> 32

    p00 = x0 * y0
    p01 = x0 * y1
    p10 = x1 * y0
    p11 = x1 * y1

    # Sum of the middle terms and the carry out of the low term. At most
    # 3 * (2^32 - 1), so it fits in 34 bits.
    mid = (p00 >> 32) + (p01 & MASK32) + (p10 & MASK32)

    lo = ((mid & MASK32) << 32) | (p00 & MASK32)
    hi = p11 + (p01 >> 32) + (p10 >> 32) + (mid >> 32)
    return hi & MASK64, lo


def mul128Karatsuba(x: int, y: int) -> Tuple[int, int]:
    """
    64x64->128 multiply using three 33-bit products (Karatsuba).

    Args:
        x (int): 64-bit operand.
        y (int): 64-bit operand.

    Returns:
        tuple(int, int): The high and low 64-bit words of the product.
    """
    x0, x1 = x & MASK32, x >> 32
    y0, y1 = y & MASK32, y >> 32

    lo = x0 * y0
    hi = x1 * y1
    # (x0 + x1)(y0 + y1) - x0*y0 - x1*y1 = x0*y1 + x1*y0, up to 65 bits.
    mid = (x0 + x1) * (y0 + y1) - lo - hi

    t = lo + ((mid & MASK32) << 32)
    r_lo = t & MASK64
    r_hi = hi + (mid >> 32) + (t >> 64)
    return r_hi & MASK64, r_lo


MULTIPLIERS: Dict[str, Callable[[int, int], Tuple[int, int]]] = {
    "native": mul128Native,
    "schoolbook": mul128Schoolbook,
    "karatsuba": mul128Karatsuba,
}

DEFAULT_MULTIPLIER = "native"

_multiplierName = DEFAULT_MULTIPLIER
mul128 = MULTIPLIERS[DEFAULT_MULTIPLIER]


def setMultiplier(name: str) -> None:
    """
    Select the 64x64->128 multiply used by multiply. All implementations give
    identical results.

    Args:
        name (str): A key of MULTIPLIERS.

    Raises:
        Fp61Error: The name is not a known multiplier.
    """
    global mul128, _multiplierName
    if name not in MULTIPLIERS:
        raise Fp61Error(
            f"unknown multiplier {name!r}, expected one of {sorted(MULTIPLIERS)}"
        )
    if name != _multiplierName:
        log.debug(f"switching multiplier from {_multiplierName} to {name}")
    mul128 = MULTIPLIERS[name]
    _multiplierName = name


def getMultiplier() -> str:
    """
    The name of the selected 64x64->128 multiply.
    """
    return _multiplierName


def negate(x: int) -> int:
    """
    x = -x (without reduction modulo p)

    Preconditions: x <= p
    Output: <= p
    """
    return PRIME - x


def partialReduce(x: Raw) -> Partial:
    """
    Partially reduce a value modulo p. This clears bits #63 and #62, so the
    result can be passed directly to add4 or multiply.

    Preconditions: x < 2^64
    Output: <= 2^62 - 1, congruent to x. Not necessarily less than p.
    """
    # Eliminate bits #63 to #61, which may carry back up into bit #61,
    # so only #63 and #62 are definitely cleared.
    return Partial((x & PRIME) + (x >> 61))


def finalize(x: Partial) -> Canonical:
    """
    Finalize reduction of a partially reduced value.

    Preconditions: bits #63 and #62 are clear, and x is not
        FINALIZE_EXCLUDED. Any output of partialReduce qualifies.
    Output: < p
    """
    # Eliminate #61. The +1 also handles the case where x = p.
    return Canonical((x + ((x + 1) >> 61)) & PRIME)


def reduce(x: Raw) -> Canonical:
    """
    Fully reduce any 64-bit value modulo p.

    Output: < p
    """
    return finalize(partialReduce(x))


def add4(x: Partial, y: Partial, z: Partial, w: Partial) -> Partial:
    """
    x + y + z + w (without full reduction modulo p). Four values of 62 bits
    cannot overflow 64 bits, so this is the largest sum that can be formed
    without an intermediate reduction.

    For subtraction, use negate and add4.

    Preconditions: x, y, z, w < 2^62
    Output: < 2^62
    """
    return partialReduce(Raw(x + y + z + w))


def multiply(x: int, y: int) -> Partial:
    """
    x * y (without full reduction modulo p).

    Preconditions: The bit lengths of x and y sum to at most 124, so the
        product has at most 124 bits.

        If both inputs are partially reduced (62 bits), up to 2 values can
        be accumulated in each with add4 before multiplying.

        The input can also be balanced differently. If x <= 2^61 - 1, then y
        can be up to 2^63 - 1, so up to 4 values can be accumulated in y.

    Output: < 2^62. Call finalize to reduce the result below p.
    """
    p_hi, p_lo = mul128(x, y)

    # Eliminate bits #63 to #61 of the low word first, so that folding the
    # high word in cannot carry past bit #63.
    r = (p_lo & PRIME) + (p_lo >> 61)

    # 2^64 = 8 (mod p), so the high word folds in shifted up by 3. Bits #124
    # and up would land at #63 or above, which the precondition rules out.
    r += (p_hi << 3) & MASK63

    return partialReduce(Raw(r))


def inverse(x: Raw) -> Canonical:
    """
    x^-1 (mod p), or 0 if x = 0 (mod p) and no inverse exists.

    Uses the extended Euclidean algorithm specialized to p. This operation is
    not constant-time.

    Preconditions: x < 2^64
    Output: < p
    """
    u = reduce(x)
    if u == 0:
        return Canonical(0)

    # Invariant: s0 * u = r0 and s1 * u = r1 (mod p), with |s| <= p.
    r0, r1 = PRIME, u
    s0, s1 = 0, 1
    while r1 != 1:
        q = r0 // r1
        r0, r1 = r1, r0 - q * r1
        s0, s1 = s1, s0 - q * s1

    if s1 < 0:
        s1 += PRIME
    return Canonical(s1)


class Rep(enum.IntEnum):
    """
    The representation states of a FieldVal, from loosest to tightest.
    """

    RAW = 0
    PARTIAL = 1
    CANONICAL = 2


def _classify(v: int) -> Rep:
    if v < PRIME:
        return Rep.CANONICAL
    if v <= MASK62:
        return Rep.PARTIAL
    return Rep.RAW


class FieldVal:
    """
    FieldVal is a checked counterpart to the functions in this module. Each
    value tracks which representation state it is known to be in, and every
    method verifies its documented preconditions, raising Fp61Error instead of
    silently producing a wrong answer.

    The states are ordered: a CANONICAL value is also PARTIAL, and a PARTIAL
    value is also RAW. Operations that produce partially reduced results mark
    the result PARTIAL even when the value happens to be smaller than p, so
    that code which forgets to finalize fails consistently rather than only
    for some inputs.

    Most methods return the object itself to support chaining, enabling
    syntax like:
        f = FieldVal.fromInt(2).mul(g).add(h).finalize()
    """

    __slots__ = ("v", "rep")

    def __init__(self):
        """
        Set the newly created field value to zero.
        """
        self.v = 0
        self.rep = Rep.CANONICAL

    @staticmethod
    def fromInt(i):
        """
        Create a field value from a 64-bit integer. The state is the tightest
        one that the integer satisfies.

        Args:
            i (int): The integer, 0 <= i < 2^64.

        Returns:
            FieldVal: The created object.
        """
        return FieldVal().setInt(i)

    def setInt(self, i):
        """
        Set the field value to the passed integer.

        Args:
            i (int): The integer, 0 <= i < 2^64.

        Returns:
            FieldVal: The object itself.
        """
        if i < 0 or i > MASK64:
            raise Fp61Error(f"value {i:#x} is not a 64-bit unsigned integer")
        self.v = i
        self.rep = _classify(i)
        return self

    def set(self, f):
        """
        Copy the value and state of another field value.

        Args:
            f (FieldVal): The value to copy.

        Returns:
            FieldVal: The object itself.
        """
        self.v = f.v
        self.rep = f.rep
        return self

    def copy(self):
        return FieldVal().set(self)

    def _require(self, rep, op):
        if self.rep < rep:
            raise Fp61Error(
                f"{op} requires a {rep.name.lower()} value, "
                f"got {self.rep.name.lower()} {self.v:#x}"
            )

    def partialReduce(self):
        """
        Clear bits #63 and #62.

        Preconditions: None
        Output State: PARTIAL, or unchanged if already tighter.

        Returns:
            FieldVal: The object itself.
        """
        if self.rep < Rep.PARTIAL:
            self.v = partialReduce(self.v)
            self.rep = Rep.PARTIAL
        return self

    def finalize(self):
        """
        Reduce below p.

        Preconditions: PARTIAL
        Output State: CANONICAL

        Returns:
            FieldVal: The object itself.
        """
        self._require(Rep.PARTIAL, "finalize")
        if self.v == FINALIZE_EXCLUDED:
            raise Fp61Error(f"finalize cannot reduce {self.v:#x}")
        self.v = finalize(self.v)
        self.rep = Rep.CANONICAL
        return self

    def add(self, *vals):
        """
        Add 1 to 3 other field values with a single partial reduction.

        Preconditions: All values PARTIAL.
        Output State: PARTIAL

        Args:
            *vals (FieldVal): The values to add.

        Returns:
            FieldVal: The object itself.
        """
        if not 1 <= len(vals) <= 3:
            raise Fp61Error(f"add accepts 1 to 3 values, got {len(vals)}")
        self._require(Rep.PARTIAL, "add")
        for f in vals:
            f._require(Rep.PARTIAL, "add")
        terms = [f.v for f in vals] + [0] * (3 - len(vals))
        self.v = add4(self.v, *terms)
        self.rep = Rep.PARTIAL
        return self

    def mul(self, f):
        """
        Multiply by another field value.

        Preconditions: The bit lengths of the two values sum to at most 124.
            Two PARTIAL values always qualify.
        Output State: PARTIAL

        Args:
            f (FieldVal): The multiplier.

        Returns:
            FieldVal: The object itself.
        """
        bits = self.v.bit_length() + f.v.bit_length()
        if bits > 124:
            raise Fp61Error(f"multiply operands span {bits} bits, more than 124")
        self.v = multiply(self.v, f.v)
        self.rep = Rep.PARTIAL
        return self

    def negate(self):
        """
        Negate without reduction.

        Preconditions: value <= p
        Output State: PARTIAL if the value was zero (the result is p),
            otherwise CANONICAL.

        Returns:
            FieldVal: The object itself.
        """
        if self.v > PRIME:
            raise Fp61Error(f"negate requires a value <= p, got {self.v:#x}")
        self.v = negate(self.v)
        self.rep = _classify(self.v)
        return self

    def inverse(self):
        """
        Replace the value with its multiplicative inverse.

        Preconditions: CANONICAL and nonzero.
        Output State: CANONICAL

        Returns:
            FieldVal: The object itself.
        """
        self._require(Rep.CANONICAL, "inverse")
        if self.v == 0:
            raise Fp61Error("zero has no multiplicative inverse")
        self.v = inverse(self.v)
        return self

    def isZero(self):
        """
        Preconditions: CANONICAL

        Returns:
            bool: True if the field value is zero.
        """
        self._require(Rep.CANONICAL, "isZero")
        return self.v == 0

    def equals(self, f):
        """
        Preconditions: Both values CANONICAL.

        Args:
            f (FieldVal): The value to compare.

        Returns:
            bool: True if the values are the same field element.
        """
        self._require(Rep.CANONICAL, "equals")
        f._require(Rep.CANONICAL, "equals")
        return self.v == f.v

    def int(self):
        """
        The underlying integer, in whatever state it is in.
        """
        return self.v

    def __repr__(self):
        return f"FieldVal({self.v:#x}, {self.rep.name})"
