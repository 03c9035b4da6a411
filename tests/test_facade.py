"""Tests for the algebraic views of det: homomorphisms, units, alternating forms."""

from fractions import Fraction

import pytest

from detcore import (
    QQ,
    ZZ,
    AlternatingForm,
    DetGroupHom,
    DeterminantEngine,
    EngineConfig,
    FreeModule,
    GaloisField,
    IndexedMatrix,
    InfiniteDirectSum,
    LawViolation,
    LinearEquiv,
    LinearMap,
    ModuleMismatchError,
    NotAUnitError,
    Unit,
    ZeroModule,
    basis_det,
    basis_det_reindex,
    basis_det_self,
    basis_det_units_smul,
    basis_of_unit_det,
    check_witness,
    det_conj_equiv,
    det_equiv_symm,
    det_monoid_hom,
    eq_smul_basis_det,
    equiv_det,
    is_basis_iff_det,
    of_is_unit_det,
)
from conftest import endo


@pytest.fixture
def strict():
    return DeterminantEngine(EngineConfig(validate_laws=True))


class TestMonoidHom:
    def test_map_one_and_mul(self, ring, strict):
        hom = det_monoid_hom(strict)
        M = FreeModule(ring, 2)
        f, g = endo(M, [[2, 0], [1, 3]]), endo(M, [[1, 1], [0, 1]])
        assert ring.is_one(hom.map_one(M))
        assert ring.eq(hom.map_mul(f, g), ring.mul(hom(f), hom(g)))

    def test_uses_default_engine(self):
        M = FreeModule(ZZ, 2)
        assert det_monoid_hom()(endo(M, [[2, 0], [1, 3]])) == 6


class TestUnits:
    def test_unit_of(self):
        u = Unit.of(QQ, Fraction(2))
        assert u.inverse == Fraction(1, 2)
        assert (u * u.inv()).eq(Unit.one(QQ))

    def test_non_unit_rejected(self):
        with pytest.raises(NotAUnitError):
            Unit(ZZ, 2, 1)
        with pytest.raises(NotAUnitError):
            Unit.of(ZZ, 2)

    def test_equiv_det(self, strict):
        M = FreeModule(QQ, 2)
        e = of_is_unit_det(endo(M, [[2, 0], [0, 1]]), strict)
        u = equiv_det(e, strict)
        assert u.value == 2
        assert u.inverse == Fraction(1, 2)
        assert det_equiv_symm(e, strict).value == Fraction(1, 2)

    def test_of_is_unit_det_over_integers(self, strict):
        M = FreeModule(ZZ, 2)
        e = of_is_unit_det(endo(M, [[2, 1], [1, 1]]), strict)
        assert e.check([M.vector(3, -4), M.vector(1, 0)], [M.vector(5, 7)])
        with pytest.raises(NotAUnitError):
            of_is_unit_det(endo(M, [[2, 0], [0, 1]]), strict)

    def test_equiv_det_needs_automorphism(self, strict):
        M, N = FreeModule(QQ, 1), FreeModule(QQ, 1)
        e = LinearEquiv(LinearMap(M, N, lambda v: v), LinearMap(N, M, lambda v: v))
        with pytest.raises(ModuleMismatchError):
            equiv_det(e, strict)

    def test_group_hom(self, strict):
        M = FreeModule(ZZ, 2)
        e1 = of_is_unit_det(endo(M, [[2, 1], [1, 1]]), strict)
        e2 = of_is_unit_det(endo(M, [[0, 1], [1, 0]]), strict)
        hom = DetGroupHom(strict)
        assert hom(e1).value == 1
        assert hom(e2).value == -1
        assert hom.map_mul(e1, e2).value == -1
        assert hom.map_inv(e2).value == -1

    def test_group_hom_over_galois_field(self, strict):
        F = GaloisField(4)
        M = FreeModule(F, 2)
        alpha = F.from_int_repr(2)
        f = LinearMap(M, M, lambda v: (F.mul(alpha, v[0]), v[1]), name="alpha")
        e = of_is_unit_det(f, strict)
        u = DetGroupHom(strict)(e)
        assert F.eq(u.value, alpha)
        assert F.eq(F.mul(u.value, u.inverse), F.one())


class TestConjugationByEquivalence:
    def test_det_conj_equiv(self, strict):
        M = FreeModule(QQ, 2)
        N = FreeModule(QQ, ("x", "y"))
        fwd = LinearMap(M, N, lambda v: (v[1], 2 * v[0]))
        bwd = LinearMap(N, M, lambda v: (v[1] / 2, v[0]))
        e = LinearEquiv(fwd, bwd)
        f = endo(M, [[2, 0], [1, 3]])
        assert det_conj_equiv(f, e, strict) == 6

    def test_det_conj_equiv_without_basis(self, strict):
        V, W = InfiniteDirectSum(QQ), InfiniteDirectSum(QQ)
        e = LinearEquiv(LinearMap(V, W, lambda v: v), LinearMap(W, V, lambda v: v))
        shift = LinearMap(V, V, lambda v: tuple((k + 1, c) for k, c in v))
        assert det_conj_equiv(shift, e, strict) == 1


class TestBasisDet:
    def test_swap_negates(self):
        for ring in (QQ, GaloisField(5)):
            e = FreeModule(ring, 2).standard_basis()
            value = basis_det(e)([e.vectors[1], e.vectors[0]])
            assert ring.eq(value, ring.neg(ring.one()))

    def test_swap_in_characteristic_two(self):
        F = GaloisField(2)
        e = FreeModule(F, 2).standard_basis()
        assert F.is_one(basis_det(e)([e.vectors[1], e.vectors[0]]))

    def test_self_is_one(self, ring):
        assert ring.is_one(basis_det_self(FreeModule(ring, 3).standard_basis()))

    def test_empty_index(self, ring):
        e = ZeroModule(ring).standard_basis()
        assert ring.is_one(basis_det(e)(()))

    def test_alternating_and_multilinear(self):
        M = FreeModule(QQ, 3)
        form = basis_det(M.standard_basis())
        fam = [M.vector(2, 0, 1), M.vector(1, 3, 0), M.vector(4, 1, 5)]
        assert form(fam) == 19
        assert form.vanishes_on_repeat(fam, 0, 2)
        assert form.is_linear_at(fam, 1, M.vector(1, 1, 1), M.vector(0, 2, 7), Fraction(3, 4))
        with pytest.raises(ValueError):
            form.vanishes_on_repeat(fam, 1, 1)

    def test_form_algebra(self):
        M = FreeModule(QQ, 2)
        form = basis_det(M.standard_basis())
        fam = [M.vector(1, 2), M.vector(3, 4)]
        assert (form + form.smul(2))(fam) == -6
        assert isinstance(form.smul(2), AlternatingForm)
        assert not hasattr(form, "eq_on")

    def test_is_basis_iff_det(self):
        fam = [(2, 0), (0, 1)]
        assert not is_basis_iff_det(FreeModule(ZZ, 2).standard_basis(), fam)
        M = FreeModule(QQ, 2)
        assert is_basis_iff_det(M.standard_basis(), [M.vector(v) for v in fam])

    def test_basis_of_unit_det(self):
        M = FreeModule(ZZ, 2)
        w = basis_of_unit_det(M.standard_basis(), [(2, 1), (1, 1)])
        check_witness(w)
        assert w.coordinates((3, 2)) == {0: 1, 1: 1}

    def test_basis_of_non_unit_det(self):
        with pytest.raises(NotAUnitError):
            basis_of_unit_det(FreeModule(ZZ, 2).standard_basis(), [(2, 0), (0, 1)])

    def test_uniqueness_up_to_scalar(self):
        M = FreeModule(QQ, 2)
        e = M.standard_basis()
        P = IndexedMatrix.from_rows(QQ, [[1, 1], [0, 1]], labels=M.labels, col_labels=("p", "q"))
        w = M.witness_from_matrix(P)
        samples = [[M.vector(1, 2), M.vector(3, 4)], [M.vector(0, 5), M.vector(7, 1)]]
        assert eq_smul_basis_det(basis_det(e).smul(3), e, samples) == 3
        assert eq_smul_basis_det(basis_det(w), e, samples) == 1

    def test_uniqueness_detects_non_alternating_form(self):
        M = FreeModule(QQ, 2)
        e = M.standard_basis()
        not_alternating = AlternatingForm(M, e.index, lambda fam: fam[0][0] * fam[1][1])
        with pytest.raises(LawViolation):
            eq_smul_basis_det(not_alternating, e, [[M.vector(1, 2), M.vector(3, 4)]])

    def test_reindex(self):
        M = FreeModule(ZZ, 2)
        e = M.standard_basis()
        assert basis_det_reindex(e, {0: "x", 1: "y"}, [(2, 0), (1, 3)]) == 6

    def test_units_smul(self):
        M = FreeModule(ZZ, 2)
        e = M.standard_basis()
        form = basis_det_units_smul(e, {0: -1, 1: 1})
        assert form([(2, 0), (1, 3)]) == -6
        with pytest.raises(NotAUnitError):
            basis_det_units_smul(e, {0: 2, 1: 1})
