"""Tests for basis witnesses and the witness cache."""

import gc
import itertools

import pytest

from detcore import (
    QQ,
    ZZ,
    BasisCache,
    BasisWitness,
    FreeModule,
    IndexedMatrix,
    InfiniteDirectSum,
    InvalidWitnessError,
    ModuleMismatchError,
    NotAUnitError,
    check_witness,
)


def _counting_oracle(calls):
    def oracle(M):
        calls.append(M)
        return M.standard_basis()

    return oracle


class TestBasisWitness:
    def test_standard_basis(self):
        M = FreeModule(ZZ, ("x", "y"))
        w = M.standard_basis()
        assert w.index == ("x", "y")
        assert len(w) == 2
        assert w.vector("y") == (0, 1)
        assert w.coordinates((3, 4)) == {"x": 3, "y": 4}
        assert not hasattr(w, "coord")
        assert w.combine({"x": 3, "y": 4}) == (3, 4)
        check_witness(w)

    def test_duplicate_labels_rejected(self):
        M = FreeModule(ZZ, 2)
        with pytest.raises(InvalidWitnessError):
            BasisWitness(M, (0, 0), [(1, 0), (0, 1)], tuple)

    def test_length_mismatch_rejected(self):
        M = FreeModule(ZZ, 2)
        with pytest.raises(InvalidWitnessError):
            BasisWitness(M, (0, 1), [(1, 0)], tuple)

    def test_witness_from_matrix(self):
        M = FreeModule(ZZ, 2)
        P = IndexedMatrix.from_rows(ZZ, [[1, 1], [0, 1]], labels=M.labels, col_labels=("p", "q"))
        w = M.witness_from_matrix(P)
        assert w.index == ("p", "q")
        assert w.vector("q") == (1, 1)
        # (3, 5) = -2 * (1, 0) + 5 * (1, 1)
        assert w.coordinates((3, 5)) == {"p": -2, "q": 5}
        check_witness(w)

    def test_witness_from_non_invertible_matrix(self):
        M = FreeModule(ZZ, 2)
        P = IndexedMatrix.from_rows(ZZ, [[2, 0], [0, 1]], labels=M.labels)
        with pytest.raises(NotAUnitError):
            M.witness_from_matrix(P)

    def test_reindex(self):
        M = FreeModule(QQ, 2)
        w = M.standard_basis().reindex({0: "a", 1: "b"})
        assert w.index == ("a", "b")
        assert w.coordinates(M.vector(1, 2)) == {"a": 1, "b": 2}
        with pytest.raises(InvalidWitnessError):
            M.standard_basis().reindex({0: "a", 1: "a"})

    def test_units_smul(self):
        M = FreeModule(ZZ, 2)
        w = M.standard_basis().units_smul({0: -1, 1: 1})
        assert w.vector(0) == (-1, 0)
        assert w.coordinates((3, 4)) == {0: -3, 1: 4}
        check_witness(w)
        with pytest.raises(NotAUnitError):
            M.standard_basis().units_smul({0: 2, 1: 1})

    def test_check_witness_detects_bad_coordinates(self):
        M = FreeModule(ZZ, 2)
        bad = BasisWitness(M, (0, 1), [(1, 0), (0, 1)], lambda v: (v[1], v[0]))
        with pytest.raises(InvalidWitnessError):
            check_witness(bad)


class TestBasisCache:
    def test_memoises_per_module(self):
        calls = []
        M = FreeModule(QQ, 2, basis_oracle=_counting_oracle(calls))
        cache = BasisCache()
        w1 = cache.try_get_witness(M)
        w2 = cache.try_get_witness(M)
        assert w1 is w2
        assert len(calls) == 1
        assert M in cache

    def test_caches_absence_of_basis(self):
        V = InfiniteDirectSum(QQ)
        cache = BasisCache()
        assert cache.try_get_witness(V) is None
        assert cache.try_get_witness(V) is None
        assert cache.lookups == 1

    def test_invalidate_allows_a_different_witness(self):
        counter = itertools.count()

        def rotating(M):
            if next(counter) % 2 == 0:
                return M.standard_basis()
            return M.standard_basis().reindex({0: "a", 1: "b"})

        M = FreeModule(QQ, 2, basis_oracle=rotating)
        cache = BasisCache()
        assert cache.try_get_witness(M).index == (0, 1)
        cache.invalidate(M)
        assert M not in cache
        assert cache.try_get_witness(M).index == ("a", "b")

    def test_disabled_cache_asks_every_time(self):
        calls = []
        M = FreeModule(QQ, 2, basis_oracle=_counting_oracle(calls))
        cache = BasisCache(enabled=False)
        cache.try_get_witness(M)
        cache.try_get_witness(M)
        assert len(calls) == 2
        assert len(cache) == 0

    def test_rejects_witness_of_another_module(self):
        other = FreeModule(QQ, 2)
        M = FreeModule(QQ, 2, basis_oracle=lambda _: other.standard_basis())
        with pytest.raises(ModuleMismatchError):
            BasisCache().try_get_witness(M)

    def test_check_mode_validates_oracle_output(self):
        M = FreeModule(ZZ, 2, basis_oracle=lambda m: BasisWitness(m, (0, 1), [(1, 0), (0, 1)], lambda v: (0, 0)))
        assert BasisCache().try_get_witness(M) is not None
        with pytest.raises(InvalidWitnessError):
            BasisCache(check=True).try_get_witness(M)

    def test_entries_are_weak(self):
        cache = BasisCache()
        M = FreeModule(QQ, 3)
        cache.try_get_witness(M)
        assert len(cache) == 1
        del M
        gc.collect()
        assert len(cache) == 0

    def test_clear(self):
        cache = BasisCache()
        M = FreeModule(QQ, 1)
        cache.try_get_witness(M)
        cache.clear()
        assert M not in cache
