"""Exception hierarchy for the determinant engine.

Every operation is total over well-typed inputs; these exceptions signal
misuse (shape/label mismatches, field-only operations on a general ring)
or a broken external collaborator (an invalid basis witness).
"""

from __future__ import annotations


class DeterminantError(RuntimeError):
    """Base class for determinant engine failures (must interrupt, never silenced)."""


class RingError(DeterminantError):
    """Ring operation outside its domain."""


class NotAUnitError(RingError):
    """Multiplicative inverse requested for a non-unit."""

    def __init__(self, element, ring_name: str):
        self.element = element
        self.ring_name = ring_name
        super().__init__(f"{element!r} is not a unit of {ring_name}")


class FieldRequiredError(RingError):
    """Operation only defined over a field."""

    def __init__(self, operation: str, ring_name: str):
        self.operation = operation
        self.ring_name = ring_name
        super().__init__(f"{operation} requires a field, got {ring_name}")


class ShapeError(DeterminantError):
    """Matrix row/column labels do not fit the requested operation."""


class ModuleMismatchError(DeterminantError):
    """Linear maps or vectors belong to incompatible modules."""


class NoFiniteBasisError(DeterminantError):
    """Operation needs a finite basis (kernel, rank, inverse) but the module has none."""


class InvalidWitnessError(DeterminantError):
    """A basis witness failed verification (coordinate map inconsistent with its vectors)."""


class IndexMismatchError(DeterminantError):
    """Two index sets cannot be put in bijection: the matrices are not two-sided inverses."""

    def __init__(self, m_size: int, n_size: int):
        self.m_size = m_size
        self.n_size = n_size
        super().__init__(
            f"index sets of size {m_size} and {n_size} admit no bijection; "
            "the change-of-basis pair is not a two-sided inverse"
        )


class TrivialRingError(DeterminantError):
    """Cardinality arguments are unavailable over the trivial ring (0 = 1)."""


class LawViolation(DeterminantError):
    """An algebraic law computed on concrete values failed."""

    def __init__(self, law: str, details: str):
        self.law = law
        self.details = details
        super().__init__(f"{law} law violated: {details}")


class ConjugationLawViolation(LawViolation):
    """matrix_det(M N) != matrix_det(N M) or matrix_det(M N M^-1) != matrix_det(N)."""


class HomomorphismLawViolation(LawViolation):
    """det failed to be multiplicative / identity preserving / unit valued."""
