"""Basis-independent determinants of module endomorphisms over commutative rings."""

from .basis import BasisCache, BasisWitness, check_witness
from .config import EngineConfig
from .conjugation import (
    IndexBijection,
    det_conj,
    det_mul_comm,
    det_mul_comm_of_inverse,
    index_bijection,
    reindex,
    witness_change,
)
from .determinant import DetCase, DeterminantEngine, default_engine, det, finrank, has_finite_basis, set_default_engine
from .errors import (
    ConjugationLawViolation,
    DeterminantError,
    FieldRequiredError,
    HomomorphismLawViolation,
    IndexMismatchError,
    InvalidWitnessError,
    LawViolation,
    ModuleMismatchError,
    NoFiniteBasisError,
    NotAUnitError,
    RingError,
    ShapeError,
    TrivialRingError,
)
from .facade import (
    AlternatingForm,
    DetGroupHom,
    DetMonoidHom,
    Unit,
    basis_det,
    basis_det_reindex,
    basis_det_self,
    basis_det_units_smul,
    basis_of_unit_det,
    det_conj_equiv,
    det_equiv_symm,
    det_monoid_hom,
    eq_smul_basis_det,
    equiv_det,
    is_basis_iff_det,
    of_is_unit_det,
)
from .linear_maps import LinearEquiv, LinearMap, identity, prod_map, transport_witness, zero_map
from .matrices import IndexedMatrix, adjugate, inverse, matrix_det, nullspace, rank
from .matrix_view import basis_to_matrix, coordinates_matrix, to_lin, to_matrix, to_matrix_between
from .modules import DirectSum, FreeModule, InfiniteDirectSum, Module, ZeroModule
from .ring_backend import QQ, ZZ, CommutativeRing, GaloisField, IntegerRing, IntegersModN, RationalField

__all__ = [
    # ═══ rings ═══
    "CommutativeRing",
    "IntegerRing",
    "RationalField",
    "IntegersModN",
    "GaloisField",
    "ZZ",
    "QQ",
    # ═══ matrices ═══
    "IndexedMatrix",
    "matrix_det",
    "adjugate",
    "inverse",
    "rank",
    "nullspace",
    # ═══ modules / maps ═══
    "Module",
    "FreeModule",
    "ZeroModule",
    "InfiniteDirectSum",
    "DirectSum",
    "LinearMap",
    "LinearEquiv",
    "identity",
    "zero_map",
    "prod_map",
    "transport_witness",
    # ═══ witnesses ═══
    "BasisWitness",
    "BasisCache",
    "check_witness",
    # ═══ matrix view ═══
    "to_matrix",
    "to_matrix_between",
    "to_lin",
    "basis_to_matrix",
    "coordinates_matrix",
    # ═══ conjugation invariance ═══
    "IndexBijection",
    "index_bijection",
    "reindex",
    "det_mul_comm",
    "det_mul_comm_of_inverse",
    "det_conj",
    "witness_change",
    # ═══ determinant core ═══
    "EngineConfig",
    "DetCase",
    "DeterminantEngine",
    "default_engine",
    "set_default_engine",
    "det",
    "finrank",
    "has_finite_basis",
    # ═══ algebraic facade ═══
    "DetMonoidHom",
    "det_monoid_hom",
    "DetGroupHom",
    "Unit",
    "equiv_det",
    "det_equiv_symm",
    "det_conj_equiv",
    "of_is_unit_det",
    "AlternatingForm",
    "basis_det",
    "basis_det_self",
    "is_basis_iff_det",
    "basis_of_unit_det",
    "eq_smul_basis_det",
    "basis_det_reindex",
    "basis_det_units_smul",
    # ═══ errors ═══
    "DeterminantError",
    "RingError",
    "NotAUnitError",
    "FieldRequiredError",
    "ShapeError",
    "ModuleMismatchError",
    "NoFiniteBasisError",
    "InvalidWitnessError",
    "IndexMismatchError",
    "TrivialRingError",
    "LawViolation",
    "ConjugationLawViolation",
    "HomomorphismLawViolation",
]
