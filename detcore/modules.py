"""Modules over a commutative ring.

Every module exposes ``find_basis()``, the basis oracle: it returns some
finite ``BasisWitness`` or ``None`` when the module has no finite basis.

* ``FreeModule``        -- R^labels, coordinate tuples; standard witness by default
* ``ZeroModule``        -- the zero module (empty witness)
* ``InfiniteDirectSum`` -- finitely supported sequences N -> R; no finite basis
* ``DirectSum``         -- M x N; witness is the disjoint union of the factors' witnesses

Module instances compare by identity.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Hashable, Iterable, Mapping, Optional, Sequence, Tuple

from .basis import BasisWitness
from .errors import ModuleMismatchError, ShapeError
from .matrices import IndexedMatrix, inverse
from .ring_backend import CommutativeRing

Label = Hashable


class Module(ABC):
    """R-module: additive group with a scalar action."""

    def __init__(self, ring: CommutativeRing):
        self.ring = ring

    @abstractmethod
    def zero(self):
        raise NotImplementedError

    @abstractmethod
    def add(self, u, v):
        raise NotImplementedError

    @abstractmethod
    def smul(self, c, v):
        raise NotImplementedError

    @abstractmethod
    def eq(self, u, v) -> bool:
        raise NotImplementedError

    @abstractmethod
    def find_basis(self) -> Optional[BasisWitness]:
        raise NotImplementedError

    def neg(self, v):
        return self.smul(self.ring.neg(self.ring.one()), v)

    def sub(self, u, v):
        return self.add(u, self.neg(v))

    def sum(self, vs: Iterable):
        acc = self.zero()
        for v in vs:
            acc = self.add(acc, v)
        return acc

    def is_zero(self, v) -> bool:
        return self.eq(v, self.zero())


# ---------------------------------------------------------------------------
# Free modules
# ---------------------------------------------------------------------------


class FreeModule(Module):
    """
    R^labels with elements stored as coordinate tuples aligned with ``labels``.

    basis_oracle: optional ``module -> Optional[BasisWitness]`` replacing the
    standard witness (e.g. to hand out a different basis on every call).
    """

    def __init__(
        self,
        ring: CommutativeRing,
        labels,
        *,
        basis_oracle: Optional[Callable[["FreeModule"], Optional[BasisWitness]]] = None,
        name: Optional[str] = None,
    ):
        super().__init__(ring)
        if isinstance(labels, int):
            labels = range(labels)
        self.labels: Tuple[Label, ...] = tuple(labels)
        if len(set(self.labels)) != len(self.labels):
            raise ShapeError("free module labels must be unique")
        self._pos = {l: k for k, l in enumerate(self.labels)}
        self.basis_oracle = basis_oracle
        self.name = name or f"{ring.name}^{len(self.labels)}"

    @property
    def rank(self) -> int:
        return len(self.labels)

    def vector(self, *coeffs) -> Tuple[Any, ...]:
        if len(coeffs) == 1 and isinstance(coeffs[0], (list, tuple)):
            coeffs = tuple(coeffs[0])
        if len(coeffs) != self.rank:
            raise ShapeError(f"expected {self.rank} coordinates, got {len(coeffs)}")
        return tuple(self.ring.coerce(c) for c in coeffs)

    def from_mapping(self, coeffs: Mapping[Label, Any]) -> Tuple[Any, ...]:
        return tuple(coeffs.get(l, self.ring.zero()) for l in self.labels)

    def component(self, v, label: Label):
        return v[self._pos[label]]

    def zero(self):
        return tuple(self.ring.zero() for _ in self.labels)

    def add(self, u, v):
        return tuple(self.ring.add(a, b) for a, b in zip(u, v))

    def smul(self, c, v):
        return tuple(self.ring.mul(c, a) for a in v)

    def eq(self, u, v) -> bool:
        return len(u) == len(v) and all(self.ring.eq(a, b) for a, b in zip(u, v))

    def standard_basis(self) -> BasisWitness:
        one, zero = self.ring.one(), self.ring.zero()
        vectors = [tuple(one if k == j else zero for k in range(self.rank)) for j in range(self.rank)]
        return BasisWitness(self, self.labels, vectors, lambda v: tuple(v))

    def witness_from_matrix(self, P: IndexedMatrix) -> BasisWitness:
        """
        Basis given by the columns of an invertible P (rows = module labels,
        cols = the new index labels); coordinates are P^{-1} v.
        """
        if set(P.rows) != set(self.labels):
            raise ShapeError("matrix rows must be labelled by the module labels")
        ring = self.ring
        P_inv = inverse(P)
        vectors = [tuple(P.entry(l, j) for l in self.labels) for j in P.cols]
        index = P.cols
        labels = self.labels
        pos = self._pos

        def coords(v):
            return tuple(ring.sum(ring.mul(P_inv.entry(j, l), v[pos[l]]) for l in labels) for j in index)

        return BasisWitness(self, index, vectors, coords)

    def find_basis(self) -> Optional[BasisWitness]:
        if self.basis_oracle is not None:
            return self.basis_oracle(self)
        return self.standard_basis()

    def __repr__(self) -> str:
        return f"FreeModule({self.name})"


class ZeroModule(FreeModule):
    def __init__(self, ring: CommutativeRing, **kwargs):
        kwargs.setdefault("name", "0")
        super().__init__(ring, (), **kwargs)


# ---------------------------------------------------------------------------
# Infinite direct sum
# ---------------------------------------------------------------------------


class InfiniteDirectSum(Module):
    """
    The direct sum of countably many copies of R: finitely supported maps
    N -> R, stored as sorted tuples of (position, non-zero coefficient).
    Admits no finite basis.
    """

    def __init__(self, ring: CommutativeRing, name: Optional[str] = None):
        super().__init__(ring)
        self.name = name or f"{ring.name}^(N)"

    def element(self, coeffs: Mapping[int, Any]) -> Tuple[Tuple[int, Any], ...]:
        return self._normalize({int(k): self.ring.coerce(v) for k, v in coeffs.items()})

    def _normalize(self, d: Mapping[int, Any]) -> Tuple[Tuple[int, Any], ...]:
        return tuple((k, d[k]) for k in sorted(d) if not self.ring.is_zero(d[k]))

    def coefficient(self, v, k: int):
        return dict(v).get(k, self.ring.zero())

    def zero(self):
        return ()

    def add(self, u, v):
        acc: Dict[int, Any] = dict(u)
        for k, c in v:
            acc[k] = self.ring.add(acc[k], c) if k in acc else c
        return self._normalize(acc)

    def smul(self, c, v):
        return self._normalize({k: self.ring.mul(c, x) for k, x in v})

    def eq(self, u, v) -> bool:
        return self.is_zero_element(self.sub(u, v))

    def is_zero_element(self, v) -> bool:
        return all(self.ring.is_zero(c) for _, c in v)

    def find_basis(self) -> Optional[BasisWitness]:
        return None

    def __repr__(self) -> str:
        return f"InfiniteDirectSum({self.name})"


# ---------------------------------------------------------------------------
# Binary direct sum
# ---------------------------------------------------------------------------


class DirectSum(Module):
    """M x N with elements (m, n)."""

    def __init__(self, first: Module, second: Module):
        if first.ring is not second.ring and first.ring != second.ring:
            raise ModuleMismatchError("direct sum factors must share a ring")
        super().__init__(first.ring)
        self.first = first
        self.second = second

    def zero(self):
        return (self.first.zero(), self.second.zero())

    def add(self, u, v):
        return (self.first.add(u[0], v[0]), self.second.add(u[1], v[1]))

    def smul(self, c, v):
        return (self.first.smul(c, v[0]), self.second.smul(c, v[1]))

    def eq(self, u, v) -> bool:
        return self.first.eq(u[0], v[0]) and self.second.eq(u[1], v[1])

    def find_basis(self) -> Optional[BasisWitness]:
        w1 = self.first.find_basis()
        w2 = self.second.find_basis()
        if w1 is None or w2 is None:
            return None
        index = tuple(("fst", i) for i in w1.index) + tuple(("snd", j) for j in w2.index)
        z1, z2 = self.first.zero(), self.second.zero()
        vectors = tuple((b, z2) for b in w1.vectors) + tuple((z1, b) for b in w2.vectors)

        def coords(v):
            return tuple(w1.coords(v[0])) + tuple(w2.coords(v[1]))

        return BasisWitness(self, index, vectors, coords)

    def __repr__(self) -> str:
        return f"DirectSum({self.first!r}, {self.second!r})"
