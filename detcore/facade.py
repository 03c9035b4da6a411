"""
Algebraic views of the determinant.

* ``DetMonoidHom``   -- det: End(M) -> R, multiplicative and unit preserving
* ``DetGroupHom``    -- det: Aut(M) -> R^x via ``equiv_det``
* ``det_conj_equiv`` -- det(e ∘ f ∘ e⁻¹) = det(f) for e: M ≃ N
* ``basis_det``      -- the alternating multilinear form v -> det(coords_e(v))
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Hashable, Iterable, Mapping, Optional, Sequence

from .basis import BasisWitness
from .determinant import DeterminantEngine, default_engine
from .errors import HomomorphismLawViolation, LawViolation, ModuleMismatchError, NotAUnitError, ShapeError
from .linear_maps import LinearEquiv, LinearMap, transport_witness
from .matrices import inverse as matrix_inverse, matrix_det
from .matrix_view import as_family, coordinates_matrix
from .modules import Module
from .ring_backend import CommutativeRing

_logger = logging.getLogger(__name__)

Label = Hashable


# ---------------------------------------------------------------------------
# det as a monoid homomorphism End(M) -> R
# ---------------------------------------------------------------------------


class DetMonoidHom:
    """det: (End(M), ∘, id) -> (R, ×, 1)."""

    def __init__(self, engine: Optional[DeterminantEngine] = None):
        self.engine = engine or default_engine()

    def __call__(self, f: LinearMap):
        return self.engine.det(f)

    def map_one(self, M: Module):
        value = self.engine.det_id(M)
        if not M.ring.is_one(value):
            raise HomomorphismLawViolation("map_one", f"det(id) = {value!r}")
        return value

    def map_mul(self, f: LinearMap, g: LinearMap):
        ring = f.ring
        value = self.engine.det(f * g)
        expected = ring.mul(self.engine.det(f), self.engine.det(g))
        if not ring.eq(value, expected):
            raise HomomorphismLawViolation("map_mul", f"det(f∘g) = {value!r} != {expected!r}")
        return value


def det_monoid_hom(engine: Optional[DeterminantEngine] = None) -> DetMonoidHom:
    return DetMonoidHom(engine)


# ---------------------------------------------------------------------------
# Units and det on automorphisms
# ---------------------------------------------------------------------------


@dataclass(frozen=True, eq=False)
class Unit:
    """Element of R^x carried with its inverse."""

    ring: CommutativeRing
    value: Any
    inverse: Any

    def __post_init__(self) -> None:
        if not self.ring.is_one(self.ring.mul(self.value, self.inverse)):
            raise NotAUnitError(self.value, self.ring.name)

    @classmethod
    def of(cls, ring: CommutativeRing, a) -> "Unit":
        return cls(ring, a, ring.unit_inverse(a))

    @classmethod
    def one(cls, ring: CommutativeRing) -> "Unit":
        return cls(ring, ring.one(), ring.one())

    def __mul__(self, other: "Unit") -> "Unit":
        r = self.ring
        return Unit(r, r.mul(self.value, other.value), r.mul(self.inverse, other.inverse))

    def inv(self) -> "Unit":
        return Unit(self.ring, self.inverse, self.value)

    def eq(self, other: "Unit") -> bool:
        return self.ring.eq(self.value, other.value)

    def __repr__(self) -> str:
        return f"Unit({self.value!r})"


def equiv_det(e: LinearEquiv, engine: Optional[DeterminantEngine] = None) -> Unit:
    """det of a linear automorphism as a unit: det(e⁻¹) is its inverse."""
    if e.domain is not e.codomain:
        raise ModuleMismatchError("equiv_det needs an automorphism (domain is codomain)")
    engine = engine or default_engine()
    d = engine.det(e.forward)
    d_inv = engine.det(e.backward)
    try:
        return Unit(e.domain.ring, d, d_inv)
    except NotAUnitError as exc:
        raise HomomorphismLawViolation("unit", f"det(e) det(e⁻¹) != 1 for {e.name}") from exc


def det_equiv_symm(e: LinearEquiv, engine: Optional[DeterminantEngine] = None) -> Unit:
    """det(e⁻¹) = det(e)⁻¹."""
    return equiv_det(e.symm(), engine)


class DetGroupHom:
    """det: (Aut(M), ∘) -> R^x."""

    def __init__(self, engine: Optional[DeterminantEngine] = None):
        self.engine = engine or default_engine()

    def __call__(self, e: LinearEquiv) -> Unit:
        return equiv_det(e, self.engine)

    def map_mul(self, e1: LinearEquiv, e2: LinearEquiv) -> Unit:
        """det(e2 ∘ e1) = det(e2) det(e1)."""
        value = self(e1.trans(e2))
        expected = self(e2) * self(e1)
        if not value.eq(expected):
            raise HomomorphismLawViolation("map_mul", f"{value!r} != {expected!r}")
        return value

    def map_inv(self, e: LinearEquiv) -> Unit:
        value = self(e.symm())
        if not value.eq(self(e).inv()):
            raise HomomorphismLawViolation("map_inv", f"det(e⁻¹) = {value!r} is not det(e)⁻¹")
        return value


def det_conj_equiv(f: LinearMap, e: LinearEquiv, engine: Optional[DeterminantEngine] = None):
    """
    det(e ∘ f ∘ e⁻¹) for e: M ≃ N, equal to det(f).

    The witness of M transported along e gives to_matrix(e f e⁻¹, e(w)) =
    to_matrix(f, w); N's own witness is related to it by det_independent.
    """
    engine = engine or default_engine()
    conj = e.conj(f)
    value = engine.det(conj)
    if engine.config.validate_laws:
        w = engine.witness(e.domain)
        wN = engine.witness(e.codomain)
        expected = engine.det(f)
        if w is not None and wN is not None:
            engine.det_independent(conj, transport_witness(w, e), wN)
        if (w is None) == (wN is None) and not f.ring.eq(value, expected):
            raise HomomorphismLawViolation("conjugation", f"det(e f e⁻¹) = {value!r} != det(f) = {expected!r}")
    return value


def of_is_unit_det(f: LinearMap, engine: Optional[DeterminantEngine] = None) -> LinearEquiv:
    """The automorphism underlying an endomorphism with unit determinant."""
    engine = engine or default_engine()
    inv = engine.inverse(f)
    return LinearEquiv(f, inv, name=f.name)


# ---------------------------------------------------------------------------
# basis_det: alternating multilinear forms
# ---------------------------------------------------------------------------


class AlternatingForm:
    """
    phi: M^index -> R, linear in each argument and zero on families with a
    repeated vector.  Families are mappings label -> vector (or sequences
    aligned with ``index``).
    """

    def __init__(self, module: Module, index: Sequence[Label], fn: Callable[[Dict[Label, Any]], Any], name: str = "φ"):
        self.module = module
        self.index = tuple(index)
        self.fn = fn
        self.name = name

    @property
    def ring(self) -> CommutativeRing:
        return self.module.ring

    def _family(self, family) -> Dict[Label, Any]:
        if isinstance(family, Mapping):
            fam = dict(family)
        else:
            family = list(family)
            if len(family) != len(self.index):
                raise ShapeError(f"expected {len(self.index)} vectors, got {len(family)}")
            fam = dict(zip(self.index, family))
        if set(fam) != set(self.index):
            raise ShapeError("family labels do not match the form's index")
        return fam

    def __call__(self, family):
        return self.fn(self._family(family))

    def smul(self, c) -> "AlternatingForm":
        ring = self.ring
        fn = self.fn
        return AlternatingForm(self.module, self.index, lambda fam: ring.mul(c, fn(fam)), name=f"{c!r}•{self.name}")

    def __add__(self, other: "AlternatingForm") -> "AlternatingForm":
        if other.module is not self.module or set(other.index) != set(self.index):
            raise ModuleMismatchError("forms live on different module powers")
        ring = self.ring
        f, g = self.fn, other.fn
        return AlternatingForm(self.module, self.index, lambda fam: ring.add(f(fam), g(fam)), name=f"{self.name}+{other.name}")

    def is_linear_at(self, family, label: Label, u, v, c) -> bool:
        """phi(..., u + c v, ...) = phi(..., u, ...) + c phi(..., v, ...) at slot ``label``."""
        M, ring = self.module, self.ring
        fam = self._family(family)
        lhs = self.fn({**fam, label: M.add(u, M.smul(c, v))})
        rhs = ring.add(self.fn({**fam, label: u}), ring.mul(c, self.fn({**fam, label: v})))
        return ring.eq(lhs, rhs)

    def vanishes_on_repeat(self, family, i: Label, j: Label) -> bool:
        """phi(v) = 0 once v(j) is replaced by v(i), i != j."""
        if i == j:
            raise ValueError("alternating check needs two distinct slots")
        fam = self._family(family)
        return self.ring.is_zero(self.fn({**fam, j: fam[i]}))


def basis_det(e: BasisWitness, backend: str = "AUTO") -> AlternatingForm:
    """basis_det(e)(v) = matrix_det of the coordinates of v in e."""

    def fn(fam: Dict[Label, Any]):
        return matrix_det(coordinates_matrix(e, fam), backend)

    return AlternatingForm(e.module, e.index, fn, name="basis_det")


def basis_det_self(e: BasisWitness, backend: str = "AUTO"):
    """basis_det(e)(e) = 1."""
    value = basis_det(e, backend)(e.vectors)
    if not e.ring.is_one(value):
        raise HomomorphismLawViolation("basis_det(e)(e) = 1", f"got {value!r}")
    return value


def is_basis_iff_det(e: BasisWitness, family, backend: str = "AUTO") -> bool:
    """A family is a basis iff its basis_det is a unit."""
    return e.ring.is_unit(basis_det(e, backend)(family))


def basis_of_unit_det(e: BasisWitness, family, backend: str = "AUTO") -> BasisWitness:
    """The witness formed by ``family`` when basis_det(e)(family) is a unit."""
    fam = as_family(e, family)
    P = coordinates_matrix(e, fam)
    P_inv = matrix_inverse(P, backend)
    ring = e.ring
    index = P.cols
    base = e.coords
    e_index = e.index

    def coords(v):
        c = dict(zip(e_index, base(v)))
        return tuple(ring.sum(ring.mul(P_inv.entry(j, i), c[i]) for i in e_index) for j in index)

    return BasisWitness(e.module, index, tuple(fam[j] for j in index), coords)


def eq_smul_basis_det(phi: AlternatingForm, e: BasisWitness, samples: Iterable = (), backend: str = "AUTO"):
    """
    phi = phi(e) • basis_det(e) for an alternating form over an index of size
    finrank(M).  Returns phi(e); checks the identity on ``samples``.
    """
    if len(phi.index) != e.size:
        raise ShapeError("uniqueness needs an index of the same size as the basis")
    fam_e = dict(zip(phi.index, e.vectors))
    c = phi(fam_e)
    scaled = basis_det(e, backend).smul(c)
    ring = e.ring
    for sample in samples:
        fam = phi._family(sample)
        lhs = phi(fam)
        rhs = scaled(dict(zip(e.index, (fam[i] for i in phi.index))))
        if not ring.eq(lhs, rhs):
            raise LawViolation("alternating uniqueness", f"phi(v) = {lhs!r} != phi(e)·basis_det(e)(v) = {rhs!r}")
    return c


def basis_det_reindex(e: BasisWitness, sigma: Mapping[Label, Label], family, backend: str = "AUTO"):
    """basis_det(e.reindex(sigma))(v ∘ sigma⁻¹) = basis_det(e)(v)."""
    fam = as_family(e, family)
    value = basis_det(e, backend)(fam)
    reindexed = basis_det(e.reindex(sigma), backend)({sigma[i]: fam[i] for i in e.index})
    if not e.ring.eq(value, reindexed):
        raise LawViolation("basis_det reindex", f"{reindexed!r} != {value!r}")
    return value


def basis_det_units_smul(e: BasisWitness, w: Mapping[Label, Any], backend: str = "AUTO") -> AlternatingForm:
    """basis_det(w • e) = (∏ w_i)⁻¹ • basis_det(e)."""
    ring = e.ring
    factor = ring.unit_inverse(ring.prod(w[i] for i in e.index))
    scaled = basis_det(e.units_smul(w), backend)
    _logger.debug("units_smul: scaling factor %r", factor)
    expected = basis_det(e, backend).smul(factor)
    return AlternatingForm(e.module, e.index, lambda fam: _agree(ring, scaled.fn(fam), expected.fn(fam)), name="basis_det(w•e)")


def _agree(ring: CommutativeRing, a, b):
    if not ring.eq(a, b):
        raise LawViolation("basis_det units_smul", f"{a!r} != {b!r}")
    return a
