"""Tests for the basis-independent determinant."""

import itertools
from fractions import Fraction

import pytest

from detcore import (
    QQ,
    ZZ,
    BasisCache,
    DetCase,
    DeterminantEngine,
    DirectSum,
    EngineConfig,
    FieldRequiredError,
    FreeModule,
    GaloisField,
    IndexedMatrix,
    InfiniteDirectSum,
    IntegersModN,
    LinearMap,
    ModuleMismatchError,
    NoFiniteBasisError,
    NotAUnitError,
    ZeroModule,
    det,
    finrank,
    has_finite_basis,
    identity,
    prod_map,
    set_default_engine,
    zero_map,
)
from conftest import endo


def _shift(V):
    return LinearMap(V, V, lambda v: tuple((k + 1, c) for k, c in v), name="shift")


class TestFiniteBasis:
    def test_two_by_two_over_integers(self, engine):
        M = FreeModule(ZZ, 2)
        assert engine.det(endo(M, [[2, 0], [1, 3]])) == 6

    @pytest.mark.parametrize("ring", [ZZ, QQ, GaloisField(7), IntegersModN(6)], ids=str)
    def test_two_by_two_any_ring(self, ring):
        M = FreeModule(ring, ("x", "y"))
        value = DeterminantEngine().det(endo(M, [[2, 0], [1, 3]]))
        assert ring.eq(value, ring.coerce(6))

    def test_zero_map_on_three_dim_space(self):
        for ring in (QQ, GaloisField(5)):
            M = FreeModule(ring, 3)
            assert ring.is_zero(DeterminantEngine().det(zero_map(M)))

    def test_zero_module(self, ring):
        Z = ZeroModule(ring)
        engine = DeterminantEngine()
        assert engine.has_finite_basis(Z)
        assert engine.finrank(Z) == 0
        assert ring.is_one(engine.det(zero_map(Z)))
        assert ring.is_one(engine.det(identity(Z)))

    def test_identity(self, ring, engine):
        assert ring.is_one(engine.det_id(FreeModule(ring, 4)))

    def test_multiplicative(self, ring, engine):
        M = FreeModule(ring, 3)
        f = endo(M, [[2, 0, 1], [1, 3, 0], [4, 1, 5]])
        g = endo(M, [[1, 1, 0], [0, 1, 2], [3, 0, 1]])
        assert ring.eq(engine.det_comp(f, g), ring.mul(engine.det(f), engine.det(g)))

    def test_scalar_multiple(self, ring, engine):
        M = FreeModule(ring, 3)
        f = endo(M, [[2, 0, 1], [1, 3, 0], [4, 1, 5]])
        c = ring.coerce(2)
        assert ring.eq(engine.det_smul(c, f), ring.mul(ring.pow(c, 3), engine.det(f)))

    def test_det_zero_law(self, ring, engine):
        assert ring.eq(engine.det_zero(FreeModule(ring, 2)), ring.pow(ring.zero(), 2))

    def test_zero_divisor_scalars(self):
        R = IntegersModN(6)
        M = FreeModule(R, 2)
        engine = DeterminantEngine()
        assert engine.det(identity(M).smul(2)) == 4
        assert engine.det(identity(M).smul(3)) == 3

    def test_trivial_ring(self):
        R = IntegersModN(1)
        M = FreeModule(R, 3)
        engine = DeterminantEngine(EngineConfig(validate_laws=True))
        assert R.is_one(engine.det(zero_map(M)))
        assert R.is_zero(engine.det_id(M))

    def test_non_endomorphism_rejected(self, engine):
        M, N = FreeModule(QQ, 2), FreeModule(QQ, 2)
        with pytest.raises(ModuleMismatchError):
            engine.det(LinearMap(M, N, lambda v: v))

    def test_every_backend(self):
        M = FreeModule(GaloisField(5), 3)
        rows = [[2, 0, 1], [1, 3, 0], [4, 1, 5]]
        for backend in ("AUTO", "BERKOWITZ", "LEIBNIZ", "GAUSS", "GALOIS"):
            engine = DeterminantEngine(EngineConfig(det_backend=backend))
            assert M.ring.eq(engine.det(endo(M, rows)), M.ring.coerce(19)), backend


class TestNoFiniteBasis:
    def test_classification(self):
        V = InfiniteDirectSum(QQ)
        engine = DeterminantEngine()
        assert engine.classify(V) is DetCase.NO_BASIS
        assert not engine.has_finite_basis(V)
        assert engine.finrank(V) == 0
        assert engine.classify(FreeModule(QQ, 1)) is DetCase.HAS_BASIS

    @pytest.mark.parametrize("ring", [ZZ, QQ, GaloisField(2)], ids=str)
    def test_det_is_one(self, ring):
        V = InfiniteDirectSum(ring)
        engine = DeterminantEngine(EngineConfig(validate_laws=True))
        assert ring.is_one(engine.det(_shift(V)))
        assert ring.is_one(engine.det(zero_map(V)))
        assert ring.is_one(engine.det_zero(V))
        assert ring.is_one(engine.det(identity(V).smul(ring.coerce(5))))

    def test_laws_hold_with_fallback(self):
        V = InfiniteDirectSum(QQ)
        engine = DeterminantEngine(EngineConfig(validate_laws=True))
        shift = _shift(V)
        assert engine.det_comp(shift, zero_map(V)) == 1
        assert engine.det_smul(Fraction(1, 2), shift) == 1

    def test_shift_acts_on_elements(self):
        V = InfiniteDirectSum(QQ)
        v = V.element({0: 1, 3: 2})
        assert V.coefficient(_shift(V)(v), 4) == 2

    def test_field_operations_need_a_basis(self):
        V = InfiniteDirectSum(QQ)
        engine = DeterminantEngine()
        with pytest.raises(NoFiniteBasisError):
            engine.kernel(_shift(V))
        with pytest.raises(NoFiniteBasisError):
            engine.inverse(_shift(V))


class TestBasisIndependence:
    def _rotating_module(self, ring):
        counter = itertools.count()

        def oracle(M):
            if next(counter) % 2 == 0:
                return M.standard_basis()
            P = IndexedMatrix.from_rows(ring, [[1, 1], [0, 1]], labels=M.labels, col_labels=("p", "q"))
            return M.witness_from_matrix(P)

        return FreeModule(ring, 2, basis_oracle=oracle)

    def test_oracle_handing_out_different_witnesses(self, ring):
        M = self._rotating_module(ring)
        f = endo(M, [[2, 0], [1, 3]])
        engine = DeterminantEngine(EngineConfig(cache_witnesses=False))
        values = [engine.det(f) for _ in range(4)]
        assert engine.cache.lookups == 4
        assert all(ring.eq(v, ring.coerce(6)) for v in values)

    def test_det_independent(self, ring, engine):
        M = FreeModule(ring, 3)
        f = endo(M, [[2, 0, 1], [1, 3, 0], [4, 1, 5]])
        P = IndexedMatrix.from_rows(ring, [[1, 2, 3], [0, 1, 4], [0, 0, 1]], labels=M.labels, col_labels=("u", "v", "w"))
        w2 = M.witness_from_matrix(P)
        value = engine.det_independent(f, M.standard_basis(), w2)
        assert ring.eq(value, engine.det_with_witness(f, w2))

    def test_cache_is_consulted_once(self):
        calls = []

        def oracle(M):
            calls.append(1)
            return M.standard_basis()

        M = FreeModule(QQ, 2, basis_oracle=oracle)
        engine = DeterminantEngine()
        f = endo(M, [[1, 2], [3, 4]])
        assert engine.det(f) == engine.det(f) == -2
        assert len(calls) == 1
        engine.cache.invalidate(M)
        assert engine.det(f) == -2
        assert len(calls) == 2

    def test_shared_cache_between_engines(self):
        cache = BasisCache()
        M = FreeModule(QQ, 2)
        DeterminantEngine(cache=cache).det(identity(M))
        assert DeterminantEngine(cache=cache).cache is cache
        assert M in cache

    def test_to_lin_round_trip(self, engine):
        M = FreeModule(QQ, 2)
        w = M.standard_basis()
        A = IndexedMatrix.from_rows(QQ, [[Fraction(1, 2), 3], [1, 4]], labels=M.labels)
        assert engine.det_to_lin(A, w) == Fraction(-1)


class TestProductMap:
    def test_det_of_product(self, engine):
        M, N = FreeModule(QQ, 2), FreeModule(QQ, 1)
        f = endo(M, [[2, 0], [1, 3]])
        g = endo(N, [[5]])
        fg = prod_map(f, g)
        assert engine.det_prod_map(f, g, fg) == 30
        assert engine.finrank(fg.domain) == 3

    def test_product_with_infinite_factor(self, engine):
        M, V = FreeModule(QQ, 2), InfiniteDirectSum(QQ)
        f = endo(M, [[2, 0], [1, 3]])
        fg = prod_map(f, _shift(V))
        assert not engine.has_finite_basis(fg.domain)
        assert engine.det_prod_map(f, _shift(V), fg) == 1

    def test_reuse_direct_sum(self, engine):
        M, N = FreeModule(ZZ, 1), FreeModule(ZZ, 1)
        S = DirectSum(M, N)
        fg = prod_map(endo(M, [[-1]]), endo(N, [[3]]), module=S)
        assert fg.domain is S
        assert engine.det(fg) == -3


class TestFieldCorollaries:
    def test_singular_map(self):
        M = FreeModule(QQ, 2)
        f = endo(M, [[1, 2], [2, 4]])
        engine = DeterminantEngine()
        assert engine.det(f) == 0
        assert not engine.is_invertible(f)
        assert engine.rank(f) == 1
        kernel = engine.kernel(f)
        assert len(kernel) == 1
        assert M.is_zero(f(kernel[0]))
        assert not engine.is_injective(f)
        assert not engine.is_surjective(f)

    def test_invertible_map(self):
        M = FreeModule(GaloisField(5), 2)
        f = endo(M, [[2, 0], [1, 3]])
        engine = DeterminantEngine()
        assert engine.is_invertible(f)
        assert engine.is_injective(f)
        assert engine.is_surjective(f)
        f_inv = engine.inverse(f)
        v = M.vector(1, 4)
        assert M.eq(f_inv(f(v)), v)
        assert M.eq(f(f_inv(v)), v)

    def test_field_required(self):
        f = endo(FreeModule(ZZ, 2), [[2, 0], [1, 3]])
        with pytest.raises(FieldRequiredError):
            DeterminantEngine().kernel(f)

    def test_inverse_over_integers_needs_unit_det(self):
        M = FreeModule(ZZ, 2)
        engine = DeterminantEngine()
        with pytest.raises(NotAUnitError):
            engine.inverse(endo(M, [[2, 0], [1, 3]]))
        u = endo(M, [[2, 1], [1, 1]])
        assert engine.is_unit_det(u, engine.inverse(u))


class TestModuleLevelFunctions:
    def test_default_engine(self):
        M = FreeModule(QQ, 2)
        assert det(endo(M, [[2, 0], [1, 3]])) == 6
        assert has_finite_basis(M)
        assert finrank(M) == 2
        assert not has_finite_basis(InfiniteDirectSum(QQ))

    def test_set_default_engine(self):
        engine = DeterminantEngine(EngineConfig(det_backend="LEIBNIZ"))
        set_default_engine(engine)
        M = FreeModule(ZZ, 2)
        det(identity(M))
        assert M in engine.cache
