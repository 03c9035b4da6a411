"""Linear maps and linear equivalences between modules.

``f * g`` is composition ``f ∘ g`` (apply ``g`` first), so ``End(M)`` is a
monoid under ``*`` with ``identity(M)`` as unit.
"""

from __future__ import annotations

from typing import Any, Callable, Optional

from .basis import BasisWitness
from .errors import ModuleMismatchError
from .modules import DirectSum, Module


class LinearMap:
    """R-linear map ``domain -> codomain`` given by a Python callable."""

    __slots__ = ("domain", "codomain", "fn", "name")

    def __init__(self, domain: Module, codomain: Module, fn: Callable[[Any], Any], name: Optional[str] = None):
        self.domain = domain
        self.codomain = codomain
        self.fn = fn
        self.name = name or "f"

    @property
    def ring(self):
        return self.domain.ring

    def is_endomorphism(self) -> bool:
        return self.domain is self.codomain

    def __call__(self, v):
        return self.fn(v)

    def compose(self, other: "LinearMap") -> "LinearMap":
        """self ∘ other"""
        if other.codomain is not self.domain:
            raise ModuleMismatchError(f"cannot compose {self.name} ∘ {other.name}: modules do not line up")
        f, g = self.fn, other.fn
        return LinearMap(other.domain, self.codomain, lambda v: f(g(v)), name=f"{self.name}∘{other.name}")

    __mul__ = compose

    def __add__(self, other: "LinearMap") -> "LinearMap":
        if other.domain is not self.domain or other.codomain is not self.codomain:
            raise ModuleMismatchError("cannot add maps between different modules")
        N = self.codomain
        f, g = self.fn, other.fn
        return LinearMap(self.domain, N, lambda v: N.add(f(v), g(v)), name=f"({self.name}+{other.name})")

    def smul(self, c) -> "LinearMap":
        N = self.codomain
        f = self.fn
        return LinearMap(self.domain, N, lambda v: N.smul(c, f(v)), name=f"{c!r}•{self.name}")

    def __neg__(self) -> "LinearMap":
        return self.smul(self.ring.neg(self.ring.one()))

    def pow(self, n: int) -> "LinearMap":
        if not self.is_endomorphism():
            raise ModuleMismatchError("only endomorphisms have powers")
        if n < 0:
            raise ValueError(f"negative power {n} of {self.name}; invert through DeterminantEngine.inverse")
        result = identity(self.domain)
        for _ in range(n):
            result = self * result
        return result

    def __repr__(self) -> str:
        return f"LinearMap({self.name}: {self.domain!r} -> {self.codomain!r})"


def identity(M: Module) -> LinearMap:
    return LinearMap(M, M, lambda v: v, name="id")


def zero_map(M: Module, N: Optional[Module] = None) -> LinearMap:
    N = M if N is None else N
    return LinearMap(M, N, lambda v: N.zero(), name="0")


class LinearEquiv:
    """
    A linear isomorphism ``domain ≃ codomain`` given by mutually inverse maps.

    The two maps are trusted to be inverse; ``check`` verifies them on a
    family of sample vectors.
    """

    __slots__ = ("forward", "backward", "name")

    def __init__(self, forward: LinearMap, backward: LinearMap, name: Optional[str] = None):
        if backward.domain is not forward.codomain or backward.codomain is not forward.domain:
            raise ModuleMismatchError("inverse map has the wrong domain/codomain")
        self.forward = forward
        self.backward = backward
        self.name = name or forward.name

    @property
    def domain(self) -> Module:
        return self.forward.domain

    @property
    def codomain(self) -> Module:
        return self.forward.codomain

    def __call__(self, v):
        return self.forward(v)

    def symm(self) -> "LinearEquiv":
        return LinearEquiv(self.backward, self.forward, name=f"{self.name}⁻¹")

    def trans(self, other: "LinearEquiv") -> "LinearEquiv":
        """other ∘ self"""
        return LinearEquiv(other.forward * self.forward, self.backward * other.backward)

    def conj(self, f: LinearMap) -> LinearMap:
        """e ∘ f ∘ e⁻¹ as an endomorphism of the codomain."""
        if f.domain is not self.domain or f.codomain is not self.domain:
            raise ModuleMismatchError("conj expects an endomorphism of the equivalence's domain")
        return self.forward * f * self.backward

    def check(self, samples_domain, samples_codomain=()) -> bool:
        M, N = self.domain, self.codomain
        return all(M.eq(self.backward(self.forward(v)), v) for v in samples_domain) and all(
            N.eq(self.forward(self.backward(w)), w) for w in samples_codomain
        )

    @classmethod
    def refl(cls, M: Module) -> "LinearEquiv":
        return cls(identity(M), identity(M), name="id")

    def __repr__(self) -> str:
        return f"LinearEquiv({self.name}: {self.domain!r} ≃ {self.codomain!r})"


def prod_map(f: LinearMap, g: LinearMap, module: Optional[DirectSum] = None) -> LinearMap:
    """f × g on M x N; pass ``module`` to reuse an existing DirectSum instance."""
    if not (f.is_endomorphism() and g.is_endomorphism()):
        raise ModuleMismatchError("prod_map expects two endomorphisms")
    S = module if module is not None else DirectSum(f.domain, g.domain)
    if S.first is not f.domain or S.second is not g.domain:
        raise ModuleMismatchError("direct sum factors do not match the maps")
    return LinearMap(S, S, lambda v: (f(v[0]), g(v[1])), name=f"{f.name}×{g.name}")


def transport_witness(w: BasisWitness, e: LinearEquiv) -> BasisWitness:
    """The basis e(b_i) of the codomain, with coordinates coords_w(e⁻¹ v)."""
    if w.module is not e.domain:
        raise ModuleMismatchError("witness does not belong to the equivalence's domain")
    back = e.backward
    base = w.coords
    return BasisWitness(e.codomain, w.index, tuple(e.forward(b) for b in w.vectors), lambda v: base(back(v)))
