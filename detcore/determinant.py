#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Basis-independent determinant of module endomorphisms.

det(f) dispatches on whether the module has a finite basis:

    NO_BASIS   -> 1 (the ring's multiplicative identity)
    HAS_BASIS  -> matrix_det(to_matrix(f, w)) for the cached witness w

The NO_BASIS value is a convention, not a dimension-carrying quantity: it
keeps det(id) = 1 and det(f ∘ g) = det(f) det(g) intact for modules with no
finite basis.  Callers that need to tell the two branches apart use
``has_finite_basis``.

For HAS_BASIS, any other witness w' gives the same value: with
P = basis_to_matrix(w, w') and Q = basis_to_matrix(w', w),
to_matrix(f, w') = Q to_matrix(f, w) P and det(Q A P) = det(A)
(``conjugation.det_conj``).  Hence det depends on (f, M) only, and the
witness cache is free to hand out any witness.

Field-only corollaries (kernel, rank, inverse) raise FieldRequiredError over
general rings.
"""

from __future__ import annotations

import logging
from enum import Enum, auto
from typing import Any, Dict, List, Optional

from .basis import BasisCache, BasisWitness
from .config import EngineConfig
from .conjugation import det_conj, witness_change
from .errors import (
    FieldRequiredError,
    HomomorphismLawViolation,
    ModuleMismatchError,
    NoFiniteBasisError,
    NotAUnitError,
)
from .linear_maps import LinearMap, identity, zero_map
from .matrices import IndexedMatrix, inverse as matrix_inverse, matrix_det, nullspace, rank as matrix_rank
from .matrix_view import to_lin, to_matrix
from .modules import Module

_logger = logging.getLogger(__name__)


class DetCase(Enum):
    NO_BASIS = auto()
    HAS_BASIS = auto()


class DeterminantEngine:
    """
    Computes det over a shared witness cache.

    config: EngineConfig (backend, law validation, witness checks, caching)
    cache:  BasisCache; a fresh one is built from config when omitted
    """

    def __init__(self, config: Optional[EngineConfig] = None, cache: Optional[BasisCache] = None):
        self.config = config or EngineConfig()
        if cache is None:
            cache = BasisCache(enabled=self.config.cache_witnesses, check=self.config.check_witnesses)
        self.cache = cache

    # ------------------------------------------------------------------
    # witness access
    # ------------------------------------------------------------------

    def witness(self, M: Module) -> Optional[BasisWitness]:
        return self.cache.try_get_witness(M)

    def classify(self, M: Module) -> DetCase:
        return DetCase.NO_BASIS if self.witness(M) is None else DetCase.HAS_BASIS

    def has_finite_basis(self, M: Module) -> bool:
        return self.classify(M) is DetCase.HAS_BASIS

    def finrank(self, M: Module) -> int:
        """Size of any witness; 0 when the module has no finite basis."""
        w = self.witness(M)
        return 0 if w is None else w.size

    # ------------------------------------------------------------------
    # det
    # ------------------------------------------------------------------

    def det_with_witness(self, f: LinearMap, w: BasisWitness):
        return matrix_det(to_matrix(f, w), self.config.det_backend)

    def det(self, f: LinearMap):
        if not f.is_endomorphism():
            raise ModuleMismatchError(f"det needs an endomorphism, got {f!r}")
        w = self.witness(f.domain)
        if w is None:
            _logger.debug("det(%s): no finite basis for %r, returning 1", f.name, f.domain)
            return f.ring.one()
        return self.det_with_witness(f, w)

    __call__ = det

    def det_independent(self, f: LinearMap, w1: BasisWitness, w2: BasisWitness):
        """
        det computed in w1, proven equal to the value in w2 through the
        change-of-basis pair; raises ConjugationLawViolation on mismatch.
        """
        A1 = to_matrix(f, w1)
        P, Q = witness_change(w1, w2)
        value = det_conj(Q, A1, P, backend=self.config.det_backend, validate=True)
        A2 = to_matrix(f, w2)
        if not f.ring.eq(value, matrix_det(A2, self.config.det_backend)):
            raise HomomorphismLawViolation(
                "basis independence", f"det in {w1.index!r} differs from det in {w2.index!r}"
            )
        return value

    # ------------------------------------------------------------------
    # homomorphism laws
    # ------------------------------------------------------------------

    def det_id(self, M: Module):
        value = self.det(identity(M))
        if self.config.validate_laws and not M.ring.is_one(value):
            raise HomomorphismLawViolation("identity", f"det(id) = {value!r}")
        return value

    def det_comp(self, f: LinearMap, g: LinearMap):
        """det(f ∘ g) = det(f) det(g), computed from one witness."""
        ring = f.ring
        value = self.det(f * g)
        if self.config.validate_laws:
            expected = ring.mul(self.det(f), self.det(g))
            if not ring.eq(value, expected):
                raise HomomorphismLawViolation("multiplicativity", f"det(f∘g) = {value!r} != {expected!r}")
        return value

    def det_zero(self, M: Module):
        """det(0) = 0^finrank(M): 1 on the zero module and without a finite basis."""
        ring = M.ring
        value = self.det(zero_map(M))
        if self.config.validate_laws:
            expected = ring.pow(ring.zero(), self.finrank(M))
            if not ring.eq(value, expected):
                raise HomomorphismLawViolation("det(0)", f"{value!r} != 0^{self.finrank(M)}")
        return value

    def det_smul(self, c, f: LinearMap):
        """det(c f) = c^finrank(M) det(f)."""
        ring = f.ring
        value = self.det(f.smul(c))
        if self.config.validate_laws:
            expected = ring.mul(ring.pow(c, self.finrank(f.domain)), self.det(f))
            if not ring.eq(value, expected):
                raise HomomorphismLawViolation("det(c•f)", f"{value!r} != {expected!r}")
        return value

    def det_prod_map(self, f: LinearMap, g: LinearMap, fg: LinearMap):
        """det(f × g) = det(f) det(g) for ``fg = prod_map(f, g)``."""
        ring = f.ring
        value = self.det(fg)
        if self.config.validate_laws and self.has_finite_basis(fg.domain):
            expected = ring.mul(self.det(f), self.det(g))
            if not ring.eq(value, expected):
                raise HomomorphismLawViolation("det(f×g)", f"{value!r} != {expected!r}")
        return value

    def det_to_lin(self, A: IndexedMatrix, w: BasisWitness):
        """det(to_lin(A, w)) = matrix_det(A)."""
        return self.det_with_witness(to_lin(A, w), w)

    # ------------------------------------------------------------------
    # units and invertibility
    # ------------------------------------------------------------------

    def is_unit_det(self, f: LinearMap, f_inv: LinearMap) -> bool:
        """For f with two-sided inverse f_inv: det(f) det(f_inv) = 1, so det(f) is a unit."""
        ring = f.ring
        d, d_inv = self.det(f), self.det(f_inv)
        if not ring.is_one(ring.mul(d, d_inv)):
            raise HomomorphismLawViolation("unit", f"det(f) det(f⁻¹) = {ring.mul(d, d_inv)!r}")
        return ring.is_unit(d)

    def _field_witness(self, f: LinearMap, operation: str) -> BasisWitness:
        ring = f.ring
        if not ring.is_field:
            raise FieldRequiredError(operation, ring.name)
        if not f.is_endomorphism():
            raise ModuleMismatchError(f"{operation} needs an endomorphism")
        w = self.witness(f.domain)
        if w is None:
            raise NoFiniteBasisError(f"{operation} needs a finite basis of {f.domain!r}")
        return w

    def is_invertible(self, f: LinearMap) -> bool:
        """Over a field: f invertible iff det(f) != 0."""
        self._field_witness(f, "is_invertible")
        return not f.ring.is_zero(self.det(f))

    def inverse(self, f: LinearMap) -> LinearMap:
        """f⁻¹ from the inverse of its matrix; needs det(f) to be a unit."""
        w = self.witness(f.domain)
        if w is None:
            raise NoFiniteBasisError(f"inverse needs a finite basis of {f.domain!r}")
        A = to_matrix(f, w)
        d = matrix_det(A, self.config.det_backend)
        if not f.ring.is_unit(d):
            raise NotAUnitError(d, f.ring.name)
        inv = to_lin(matrix_inverse(A, self.config.det_backend), w)
        inv.name = f"{f.name}⁻¹"
        return inv

    def rank(self, f: LinearMap) -> int:
        w = self._field_witness(f, "rank")
        return matrix_rank(to_matrix(f, w))

    def kernel(self, f: LinearMap) -> List[Any]:
        """Basis of ker f as module elements (empty iff f is injective)."""
        w = self._field_witness(f, "kernel")
        vectors: List[Dict[Any, Any]] = nullspace(to_matrix(f, w))
        return [w.combine(c) for c in vectors]

    def is_injective(self, f: LinearMap) -> bool:
        return not self.kernel(f)

    def is_surjective(self, f: LinearMap) -> bool:
        return self.rank(f) == self.finrank(f.domain)


_default_engine: Optional[DeterminantEngine] = None


def default_engine() -> DeterminantEngine:
    global _default_engine
    if _default_engine is None:
        _default_engine = DeterminantEngine(EngineConfig.from_env())
    return _default_engine


def set_default_engine(engine: Optional[DeterminantEngine]) -> None:
    global _default_engine
    _default_engine = engine


def det(f: LinearMap):
    """Basis-independent determinant of an endomorphism (default engine)."""
    return default_engine().det(f)


def has_finite_basis(M: Module) -> bool:
    return default_engine().has_finite_basis(M)


def finrank(M: Module) -> int:
    return default_engine().finrank(M)
