"""Commutative ring backends for the determinant engine.

The engine treats the scalar ring as an opaque structure exposing ``+``,
``*``, ``0``, ``1`` and equality, plus inverses of non-zero elements when
the ring is a field.  This module supplies that interface for the rings
the library and its tests work over:

* ``ZZ``                 -- Python ``int``
* ``QQ``                 -- ``fractions.Fraction``
* ``IntegersModN(n)``    -- ``Z/nZ`` (zero divisors allowed, ``n = 1`` is the trivial ring)
* ``GaloisField(order)`` -- ``galois.GF(order)`` scalars, prime or prime-power order

Elements are plain Python/galois objects; all arithmetic goes through the
ring object so that normalisation (e.g. reduction mod ``n``) is never
forgotten.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from fractions import Fraction
from typing import Any, Iterable

import galois
import numpy as _np

from .errors import NotAUnitError, RingError


# ---------------------------------------------------------------------------
# Abstract interface
# ---------------------------------------------------------------------------


class CommutativeRing(ABC):
    """Commutative ring with identity."""

    name: str = "R"
    is_field: bool = False

    @abstractmethod
    def zero(self) -> Any:
        raise NotImplementedError

    @abstractmethod
    def one(self) -> Any:
        raise NotImplementedError

    @abstractmethod
    def add(self, a, b):
        raise NotImplementedError

    @abstractmethod
    def mul(self, a, b):
        raise NotImplementedError

    @abstractmethod
    def neg(self, a):
        raise NotImplementedError

    @abstractmethod
    def eq(self, a, b) -> bool:
        raise NotImplementedError

    @abstractmethod
    def coerce(self, x) -> Any:
        """Map an integer (or a native element) into the ring."""
        raise NotImplementedError

    @abstractmethod
    def is_unit(self, a) -> bool:
        raise NotImplementedError

    @abstractmethod
    def _unit_inverse(self, a):
        raise NotImplementedError

    @property
    @abstractmethod
    def characteristic(self) -> int:
        raise NotImplementedError

    def sub(self, a, b):
        return self.add(a, self.neg(b))

    def is_zero(self, a) -> bool:
        return self.eq(a, self.zero())

    def is_one(self, a) -> bool:
        return self.eq(a, self.one())

    def is_trivial(self) -> bool:
        """True iff ``0 = 1``; every identity then holds vacuously."""
        return self.eq(self.zero(), self.one())

    def unit_inverse(self, a):
        if not self.is_unit(a):
            raise NotAUnitError(a, self.name)
        return self._unit_inverse(a)

    def inverse(self, a):
        """Field inverse; over a non-field only units are invertible."""
        return self.unit_inverse(a)

    def pow(self, a, n: int):
        if n < 0:
            return self.pow(self.unit_inverse(a), -n)
        result = self.one()
        base = a
        while n > 0:
            if n & 1:
                result = self.mul(result, base)
            base = self.mul(base, base)
            n >>= 1
        return result

    def sum(self, items: Iterable) -> Any:
        acc = self.zero()
        for x in items:
            acc = self.add(acc, x)
        return acc

    def prod(self, items: Iterable) -> Any:
        acc = self.one()
        for x in items:
            acc = self.mul(acc, x)
        return acc

    def sign(self, parity: int):
        """``(-1)^parity`` as a ring element."""
        return self.neg(self.one()) if parity % 2 else self.one()

    def __repr__(self) -> str:
        return self.name


# ---------------------------------------------------------------------------
# Integers and rationals
# ---------------------------------------------------------------------------


class IntegerRing(CommutativeRing):
    name = "ZZ"
    is_field = False

    def zero(self) -> int:
        return 0

    def one(self) -> int:
        return 1

    def add(self, a, b):
        return a + b

    def mul(self, a, b):
        return a * b

    def neg(self, a):
        return -a

    def eq(self, a, b) -> bool:
        return a == b

    def coerce(self, x) -> int:
        if isinstance(x, Fraction):
            if x.denominator != 1:
                raise RingError(f"{x} is not an integer")
            return int(x.numerator)
        return int(x)

    def is_unit(self, a) -> bool:
        return a in (1, -1)

    def _unit_inverse(self, a):
        return a

    @property
    def characteristic(self) -> int:
        return 0


class RationalField(CommutativeRing):
    name = "QQ"
    is_field = True

    def zero(self) -> Fraction:
        return Fraction(0)

    def one(self) -> Fraction:
        return Fraction(1)

    def add(self, a, b):
        return a + b

    def mul(self, a, b):
        return a * b

    def neg(self, a):
        return -a

    def eq(self, a, b) -> bool:
        return a == b

    def coerce(self, x) -> Fraction:
        return Fraction(x)

    def is_unit(self, a) -> bool:
        return a != 0

    def _unit_inverse(self, a):
        return 1 / Fraction(a)

    @property
    def characteristic(self) -> int:
        return 0


ZZ = IntegerRing()
QQ = RationalField()


# ---------------------------------------------------------------------------
# Z/nZ
# ---------------------------------------------------------------------------


def _is_prime(p: int) -> bool:
    if p <= 1:
        return False
    if p <= 3:
        return True
    if p % 2 == 0:
        return False
    r = int(math.isqrt(p))
    f = 3
    while f <= r:
        if p % f == 0:
            return False
        f += 2
    return True


class IntegersModN(CommutativeRing):
    """
    Z/nZ with canonical representatives in [0, n-1].

    - n >= 1; n = 1 is the trivial ring (0 = 1)
    - is a field iff n is prime
    """

    def __init__(self, n: int):
        if not isinstance(n, int) or isinstance(n, bool) or n < 1:
            raise ValueError(f"modulus must be int >= 1, got {n!r}")
        self.n = n
        self.name = f"Z/{n}Z"
        self.is_field = _is_prime(n)

    def normalize(self, x: int) -> int:
        return int(x % self.n)

    def zero(self) -> int:
        return 0

    def one(self) -> int:
        return 1 % self.n

    def add(self, a, b):
        return (a + b) % self.n

    def mul(self, a, b):
        return (a * b) % self.n

    def neg(self, a):
        return (-a) % self.n

    def eq(self, a, b) -> bool:
        return (a - b) % self.n == 0

    def coerce(self, x) -> int:
        if isinstance(x, Fraction):
            return self.mul(self.coerce(x.numerator), self.unit_inverse(self.coerce(x.denominator)))
        return self.normalize(int(x))

    def is_unit(self, a) -> bool:
        return math.gcd(int(a), self.n) == 1

    def _unit_inverse(self, a):
        if self.n == 1:
            return 0
        return pow(int(a), -1, self.n)

    @property
    def characteristic(self) -> int:
        return self.n

    def __eq__(self, other) -> bool:
        return isinstance(other, IntegersModN) and other.n == self.n

    def __hash__(self) -> int:
        return hash(("Z/nZ", self.n))


# ---------------------------------------------------------------------------
# Galois fields (galois.GF)
# ---------------------------------------------------------------------------


class GaloisField(CommutativeRing):
    """
    GF(p^k) backed by ``galois.GF``.

    Elements are 0-d ``galois.FieldArray`` scalars.  Integers coerce through
    the prime subfield: ``coerce(n) = n * 1``.
    """

    is_field = True

    def __init__(self, order: int):
        self.gf = galois.GF(order)
        self.order = int(self.gf.order)
        self.name = f"GF({self.order})"

    def zero(self):
        return self.gf(0)

    def one(self):
        return self.gf(1)

    def add(self, a, b):
        return a + b

    def mul(self, a, b):
        return a * b

    def neg(self, a):
        return -a

    def eq(self, a, b) -> bool:
        return bool(_np.all(a == b))

    def coerce(self, x):
        if isinstance(x, galois.FieldArray):
            return self.gf(x)
        if isinstance(x, Fraction):
            return self.coerce(x.numerator) * self.unit_inverse(self.coerce(x.denominator))
        return self.gf(int(x) % self.characteristic)

    def from_int_repr(self, x: int):
        """Element whose galois integer representation is ``x`` (polynomial basis)."""
        return self.gf(int(x))

    def is_unit(self, a) -> bool:
        return not self.is_zero(a)

    def _unit_inverse(self, a):
        return self.gf(a) ** -1

    @property
    def characteristic(self) -> int:
        return int(self.gf.characteristic)

    def array(self, rows):
        """Lift nested element lists into a ``galois.FieldArray``."""
        return self.gf([[int(x) for x in row] for row in rows])

    def __eq__(self, other) -> bool:
        return isinstance(other, GaloisField) and other.order == self.order

    def __hash__(self) -> int:
        return hash(("GF", self.order))


def is_galois_field(ring: CommutativeRing) -> bool:
    return isinstance(ring, GaloisField)
