"""Conjugation invariance of ``matrix_det`` across index sets.

Two witnesses of one module may be indexed by unrelated label sets ``m``
and ``n``.  Their change-of-basis matrices ``P: m x n`` and ``Q: n x m``
are two-sided inverses, which over a non-trivial commutative ring forces
``|m| = |n|``; the resulting bijection ``e: m ≃ n`` lets an ``n x n`` matrix
be transported to ``m x m`` without changing its determinant.  From that
and ``det(AB) = det(BA)`` for same-shape squares follow

    det(M N) = det(N M)          (M: m x n invertible, N: n x m)
    det(M N M⁻¹) = det(N)

which is exactly what makes ``det`` independent of the chosen witness.

Over the trivial ring (0 = 1) the cardinality argument is unavailable but
every identity holds since all elements coincide; the law functions
special-case it instead of building a bijection.

Each law function returns the common value.  With ``validate=True`` both
sides are computed and a mismatch raises ``ConjugationLawViolation``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Hashable, Tuple

from .basis import BasisWitness
from .errors import ConjugationLawViolation, IndexMismatchError, ShapeError, TrivialRingError
from .matrices import IndexedMatrix, matrix_det
from .matrix_view import basis_to_matrix

_logger = logging.getLogger(__name__)

Label = Hashable


@dataclass(frozen=True)
class IndexBijection:
    """e: m ≃ n between two finite label tuples."""

    domain: Tuple[Label, ...]
    codomain: Tuple[Label, ...]
    forward: Dict[Label, Label]
    backward: Dict[Label, Label]

    def __call__(self, i: Label) -> Label:
        return self.forward[i]

    def symm(self) -> "IndexBijection":
        return IndexBijection(self.codomain, self.domain, self.backward, self.forward)

    def __len__(self) -> int:
        return len(self.domain)


def _require_two_sided_inverse(P: IndexedMatrix, Q: IndexedMatrix) -> None:
    PQ = P @ Q
    QP = Q @ P
    if not PQ.is_identity():
        raise ConjugationLawViolation("two-sided inverse", "P @ Q is not the identity on the row index of P")
    if not QP.is_identity():
        raise ConjugationLawViolation("two-sided inverse", "Q @ P is not the identity on the column index of P")


def index_bijection(P: IndexedMatrix, Q: IndexedMatrix, *, check: bool = True) -> IndexBijection:
    """
    Bijection ``m ≃ n`` from ``P: m x n``, ``Q: n x m`` with ``P Q = I_m``, ``Q P = I_n``.

    The pairing follows positional order; any bijection serves since
    ``matrix_det`` is invariant under simultaneous relabelling of rows and
    columns.

    Raises:
        ShapeError: P and Q are not shaped m x n / n x m
        ConjugationLawViolation: check=True and P, Q are not two-sided inverses
        TrivialRingError: sizes differ over the trivial ring
        IndexMismatchError: sizes differ over a non-trivial ring
    """
    if set(P.cols) != set(Q.rows) or set(P.rows) != set(Q.cols):
        raise ShapeError("P must be m x n and Q must be n x m")
    if check:
        _require_two_sided_inverse(P, Q)
    m, n = P.rows, P.cols
    if len(m) != len(n):
        if P.ring.is_trivial():
            raise TrivialRingError(
                f"no index bijection between sizes {len(m)} and {len(n)} over the trivial ring"
            )
        raise IndexMismatchError(len(m), len(n))
    forward = dict(zip(m, n))
    backward = dict(zip(n, m))
    return IndexBijection(m, n, forward, backward)


def reindex(N: IndexedMatrix, e: IndexBijection) -> IndexedMatrix:
    """Transport ``N: n x n`` to ``m x m``: ``N'[i][j] = N[e(i)][e(j)]``."""
    if set(N.rows) != set(e.codomain) or set(N.cols) != set(e.codomain):
        raise ShapeError("matrix must be square over the bijection's codomain")
    return N.relabel(e.domain, e.domain, e, e)


def _check_equal(law: str, ring, lhs, rhs) -> None:
    if not ring.eq(lhs, rhs):
        raise ConjugationLawViolation(law, f"{lhs!r} != {rhs!r}")


def det_mul_comm(A: IndexedMatrix, B: IndexedMatrix, *, backend: str = "AUTO", validate: bool = True):
    """det(A B) = det(B A) for A, B square over one index set."""
    if not (A.has_square_index() and B.has_square_index() and set(A.rows) == set(B.rows)):
        raise ShapeError("det_mul_comm needs two square matrices over the same index set")
    value = matrix_det(A @ B, backend)
    if validate:
        _check_equal("det(AB) = det(BA)", A.ring, value, matrix_det(B @ A, backend))
    return value


def det_mul_comm_of_inverse(
    M: IndexedMatrix,
    N: IndexedMatrix,
    M_inv: IndexedMatrix,
    *,
    backend: str = "AUTO",
    validate: bool = True,
):
    """
    det(M N) = det(N M) for M: m x n with two-sided inverse M_inv and N: n x m.

    Transport along e = index_bijection(M, M_inv):
        M_t[i][k] = M[i][e(k)]   (m x m)
        N_t[k][j] = N[e(k)][j]   (m x m)
    so M N = M_t N_t and reindex(N M, e) = N_t M_t.
    """
    if set(N.rows) != set(M.cols) or set(N.cols) != set(M.rows):
        raise ShapeError("N must be n x m when M is m x n")
    ring = M.ring
    if ring.is_trivial():
        return ring.one()
    e = index_bijection(M, M_inv, check=validate)
    M_t = M.relabel(M.rows, e.domain, lambda i: i, e)
    N_t = N.relabel(e.domain, N.cols, e, lambda j: j)
    value = det_mul_comm(N_t, M_t, backend=backend, validate=validate)
    if validate:
        _check_equal("det(MN) = det(NM)", ring, matrix_det(M @ N, backend), matrix_det(N @ M, backend))
        _check_equal("det(NM) = det(reindex(NM))", ring, matrix_det(N @ M, backend), value)
    return value


def det_conj(
    M: IndexedMatrix,
    N: IndexedMatrix,
    M_inv: IndexedMatrix,
    *,
    backend: str = "AUTO",
    validate: bool = True,
):
    """
    det(M N M⁻¹) = det(N) for M: m x n, N: n x n, M_inv: n x m.

    det(M (N M⁻¹)) = det((N M⁻¹) M) = det(N).
    """
    if not N.has_square_index() or set(N.rows) != set(M.cols):
        raise ShapeError("N must be square over the column index of M")
    ring = M.ring
    value = matrix_det(N, backend)
    if validate and not ring.is_trivial():
        conj = det_mul_comm_of_inverse(M, N @ M_inv, M_inv, backend=backend, validate=True)
        _check_equal("det(M N M⁻¹) = det(N)", ring, conj, value)
    return value


def witness_change(w1: BasisWitness, w2: BasisWitness) -> Tuple[IndexedMatrix, IndexedMatrix]:
    """
    (P, Q) with P = basis_to_matrix(w1, w2): w1.index x w2.index and
    Q = basis_to_matrix(w2, w1); ``to_matrix(f, w2) = Q @ to_matrix(f, w1) @ P``.
    """
    P = basis_to_matrix(w1, w2)
    Q = basis_to_matrix(w2, w1)
    _logger.debug("witness change %d -> %d labels", len(w1.index), len(w2.index))
    return P, Q
