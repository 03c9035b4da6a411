#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Strict validation suite for the determinant engine.

Acceptance criteria (every item must hold exactly, no tolerance):
1. matrix_det backends agree with each other on every test ring
2. det(id) = 1, det(f ∘ g) = det(f) det(g)
3. basis independence: two witnesses with different label sets give one det
4. det(0) = 0^d, det(c f) = c^d det(f)
5. automorphisms have unit determinant, det(e⁻¹) = det(e)⁻¹
6. basis_det is alternating, basis_det(e)(e) = 1, swapping two vectors negates it
7. degenerate cases: zero module, trivial ring, module without finite basis

Rings: ZZ, QQ, Z/6Z (zero divisors), Z/1Z (trivial), GF(2), GF(5), GF(4).
"""

from __future__ import annotations

import itertools
import logging
from fractions import Fraction
from typing import Callable, Dict, List

from .config import EngineConfig
from .determinant import DeterminantEngine
from .errors import DeterminantError
from .facade import DetGroupHom, basis_det, basis_det_self, det_conj_equiv, is_basis_iff_det
from .linear_maps import LinearEquiv, LinearMap, identity, zero_map
from .matrices import IndexedMatrix, matrix_det
from .matrix_view import to_lin
from .modules import FreeModule, InfiniteDirectSum, ZeroModule
from .ring_backend import QQ, ZZ, CommutativeRing, GaloisField, IntegersModN

_logger = logging.getLogger(__name__)

_SAMPLE = [[2, 0, 1], [1, 3, 0], [4, 1, 5]]
_OTHER = [[1, 1, 0], [0, 1, 2], [3, 0, 1]]
# upper unitriangular, so invertible over every ring
_CHANGE = [[1, 2, 3], [0, 1, 4], [0, 0, 1]]


def _test_rings() -> List[CommutativeRing]:
    return [ZZ, QQ, IntegersModN(6), IntegersModN(1), GaloisField(2), GaloisField(5), GaloisField(4)]


class _Tally:
    def __init__(self, suite: str):
        self.suite = suite
        self.passed = 0
        self.failed = 0

    def record(self, name: str, check: Callable[[], bool]) -> None:
        try:
            ok = bool(check())
            detail = ""
        except DeterminantError as exc:
            ok = False
            detail = str(exc)
        if ok:
            self.passed += 1
            _logger.debug("[%s] %s: PASS", self.suite, name)
        else:
            self.failed += 1
            _logger.warning("[%s] %s: FAIL %s", self.suite, name, detail)

    @property
    def ok(self) -> bool:
        return self.failed == 0

    def summary(self) -> bool:
        _logger.info("%s: %d passed, %d failed", self.suite, self.passed, self.failed)
        return self.ok


def _endo(M: FreeModule, rows) -> LinearMap:
    w = M.standard_basis()
    return to_lin(IndexedMatrix.from_rows(M.ring, rows, labels=M.labels), w)


def strict_backend_validation() -> bool:
    tally = _Tally("matrix_det backends")
    for ring in _test_rings():
        A = IndexedMatrix.from_rows(ring, _SAMPLE)
        values: Dict[str, object] = {}
        backends = ["BERKOWITZ", "LEIBNIZ"]
        if ring.is_field:
            backends.append("GAUSS")
        if isinstance(ring, GaloisField):
            backends.append("GALOIS")
        for b in backends:
            values[b] = matrix_det(A, b)
        ref = values["LEIBNIZ"]
        for b, v in values.items():
            tally.record(f"{ring.name} {b}", lambda v=v: ring.eq(v, ref))
        tally.record(f"{ring.name} empty", lambda: ring.is_one(matrix_det(IndexedMatrix.identity(ring, ()))))
    return tally.summary()


def strict_homomorphism_validation() -> bool:
    tally = _Tally("homomorphism laws")
    for ring in _test_rings():
        engine = DeterminantEngine(EngineConfig(validate_laws=True))
        M = FreeModule(ring, 3)
        f, g = _endo(M, _SAMPLE), _endo(M, _OTHER)
        tally.record(f"{ring.name} det(id)", lambda: ring.is_one(engine.det_id(M)))
        tally.record(
            f"{ring.name} det(f∘g)",
            lambda: ring.eq(engine.det_comp(f, g), ring.mul(engine.det(f), engine.det(g))),
        )
        c = ring.coerce(2)
        tally.record(f"{ring.name} det(c•f)", lambda: ring.eq(engine.det_smul(c, f), ring.mul(ring.pow(c, 3), engine.det(f))))
        tally.record(f"{ring.name} det(0)", lambda: ring.eq(engine.det_zero(M), ring.pow(ring.zero(), 3)))
    return tally.summary()


def strict_basis_independence_validation() -> bool:
    tally = _Tally("basis independence")
    for ring in _test_rings():
        engine = DeterminantEngine()
        M = FreeModule(ring, 3)
        f = _endo(M, _SAMPLE)
        w1 = M.standard_basis()
        P = IndexedMatrix.from_rows(ring, _CHANGE, labels=M.labels, col_labels=("u", "v", "w"))
        w2 = M.witness_from_matrix(P)
        tally.record(
            f"{ring.name} det in e vs det in (u, v, w)",
            lambda: ring.eq(engine.det_independent(f, w1, w2), engine.det_with_witness(f, w2)),
        )
        N = FreeModule(ring, ("a", "b", "c"))
        fwd = LinearMap(M, N, lambda v: tuple(v), name="e")
        bwd = LinearMap(N, M, lambda v: tuple(v), name="e⁻¹")
        e = LinearEquiv(fwd, bwd)
        tally.record(
            f"{ring.name} det(e f e⁻¹)",
            lambda: ring.eq(det_conj_equiv(f, e, DeterminantEngine(EngineConfig(validate_laws=True))), engine.det(f)),
        )
    return tally.summary()


def strict_unit_validation() -> bool:
    tally = _Tally("units")
    for ring in _test_rings():
        engine = DeterminantEngine()
        M = FreeModule(ring, 3)
        u = _endo(M, _CHANGE)
        e = LinearEquiv(u, engine.inverse(u))
        hom = DetGroupHom(engine)
        tally.record(f"{ring.name} det(e) unit", lambda: ring.is_unit(hom(e).value))
        tally.record(f"{ring.name} det(e⁻¹) = det(e)⁻¹", lambda: hom.map_inv(e) is not None)
    return tally.summary()


def strict_alternating_validation() -> bool:
    tally = _Tally("basis_det")
    for ring in _test_rings():
        M = FreeModule(ring, 3)
        e = M.standard_basis()
        form = basis_det(e)
        fam = [M.vector(row) for row in _SAMPLE]
        tally.record(f"{ring.name} basis_det(e)(e) = 1", lambda: ring.is_one(basis_det_self(e)))
        for i, j in itertools.combinations(e.index, 2):
            tally.record(f"{ring.name} repeat {i},{j}", lambda i=i, j=j: form.vanishes_on_repeat(fam, i, j))
        swapped = [e.vectors[1], e.vectors[0], e.vectors[2]]
        tally.record(f"{ring.name} swap", lambda: ring.eq(form(swapped), ring.neg(ring.one())))
        tally.record(f"{ring.name} e is a basis", lambda: is_basis_iff_det(e, e.vectors))
    return tally.summary()


def strict_degenerate_validation() -> bool:
    tally = _Tally("degenerate cases")
    for ring in (ZZ, QQ, GaloisField(2)):
        engine = DeterminantEngine()
        Z = ZeroModule(ring)
        tally.record(f"{ring.name} det(0) on zero module", lambda: ring.is_one(engine.det(zero_map(Z))))
        V = InfiniteDirectSum(ring)
        shift = LinearMap(V, V, lambda v: tuple((k + 1, c) for k, c in v), name="shift")
        tally.record(f"{ring.name} no basis", lambda: not engine.has_finite_basis(V))
        tally.record(f"{ring.name} det(shift) = 1", lambda: ring.is_one(engine.det(shift)))
        tally.record(f"{ring.name} det(0) = 1 without basis", lambda: ring.is_one(engine.det(zero_map(V))))
    trivial = IntegersModN(1)
    M = FreeModule(trivial, 2)
    tally.record("Z/1Z det(id)", lambda: trivial.is_one(DeterminantEngine().det(identity(M))))
    tally.record("QQ det(1/2 id) on QQ^2", lambda: DeterminantEngine().det_smul(Fraction(1, 2), identity(FreeModule(QQ, 2))) == Fraction(1, 4))
    return tally.summary()


def run_strict_validation_suite() -> bool:
    """All sub-suites must pass."""
    results = {
        "backends": strict_backend_validation(),
        "homomorphism": strict_homomorphism_validation(),
        "basis_independence": strict_basis_independence_validation(),
        "units": strict_unit_validation(),
        "alternating": strict_alternating_validation(),
        "degenerate": strict_degenerate_validation(),
    }
    for name, ok in results.items():
        _logger.info("%-20s %s", name, "PASS" if ok else "FAIL")
    return all(results.values())


def _configure_smoke_logging() -> None:
    """Install a default handler only when the host has none."""
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(
            level=logging.INFO,
            format="[%(levelname)s] %(name)s: %(message)s",
        )
    root.setLevel(logging.INFO)


if __name__ == "__main__":
    import sys

    _configure_smoke_logging()
    sys.exit(0 if run_strict_validation_suite() else 1)
