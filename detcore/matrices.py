"""Index-labelled matrices over a commutative ring and the ``matrix_det`` primitive.

Rows and columns are labelled by arbitrary hashable index labels rather than
``0..n-1``: two bases of the same module may be indexed by unrelated label
sets, and a change-of-basis matrix then has rows from one and columns from
the other.  Positional order is only an internal detail.

``matrix_det`` backends:

* BERKOWITZ -- division free, valid over every commutative ring
* LEIBNIZ   -- permutation expansion (reference, small n)
* GAUSS     -- pivoted elimination, fields only
* GALOIS    -- ``numpy.linalg.det`` on ``galois.FieldArray``
* AUTO      -- GALOIS for Galois fields, GAUSS for other fields, BERKOWITZ otherwise

The 0x0 matrix has determinant 1 on every backend.  Over Galois fields,
``rref`` / ``rank`` / ``nullspace`` go through galois as well.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Hashable, List, Sequence, Tuple

import numpy as np

from .errors import FieldRequiredError, NotAUnitError, ShapeError
from .ring_backend import CommutativeRing, is_galois_field

_logger = logging.getLogger(__name__)

Label = Hashable


class IndexedMatrix:
    """Immutable matrix whose rows/columns carry index labels."""

    __slots__ = ("ring", "rows", "cols", "_data", "_row_pos", "_col_pos")

    def __init__(self, ring: CommutativeRing, rows: Sequence[Label], cols: Sequence[Label], data):
        self.ring = ring
        self.rows = tuple(rows)
        self.cols = tuple(cols)
        if len(set(self.rows)) != len(self.rows) or len(set(self.cols)) != len(self.cols):
            raise ShapeError("row and column labels must be unique")
        data = tuple(tuple(row) for row in data)
        if len(data) != len(self.rows) or any(len(row) != len(self.cols) for row in data):
            raise ShapeError(
                f"data shape does not match labels ({len(self.rows)}x{len(self.cols)})"
            )
        self._data = data
        self._row_pos = {r: k for k, r in enumerate(self.rows)}
        self._col_pos = {c: k for k, c in enumerate(self.cols)}

    # ------------------------------------------------------------------
    # constructors
    # ------------------------------------------------------------------

    @classmethod
    def from_function(cls, ring: CommutativeRing, rows, cols, fn: Callable[[Label, Label], Any]) -> "IndexedMatrix":
        rows = tuple(rows)
        cols = tuple(cols)
        return cls(ring, rows, cols, [[fn(i, j) for j in cols] for i in rows])

    @classmethod
    def from_rows(cls, ring: CommutativeRing, rows: Sequence[Sequence[Any]], labels=None, col_labels=None) -> "IndexedMatrix":
        """Positional construction; entries are coerced into ``ring``."""
        n_rows = len(rows)
        n_cols = len(rows[0]) if rows else 0
        row_labels = tuple(labels) if labels is not None else tuple(range(n_rows))
        if col_labels is None:
            col_labels = row_labels if labels is not None and n_rows == n_cols else tuple(range(n_cols))
        return cls(ring, row_labels, col_labels, [[ring.coerce(x) for x in row] for row in rows])

    @classmethod
    def identity(cls, ring: CommutativeRing, index: Sequence[Label]) -> "IndexedMatrix":
        one, zero = ring.one(), ring.zero()
        return cls.from_function(ring, index, index, lambda i, j: one if i == j else zero)

    # ------------------------------------------------------------------
    # access
    # ------------------------------------------------------------------

    @property
    def shape(self) -> Tuple[int, int]:
        return len(self.rows), len(self.cols)

    def entry(self, i: Label, j: Label):
        try:
            return self._data[self._row_pos[i]][self._col_pos[j]]
        except KeyError as e:
            raise ShapeError(f"no entry labelled ({i!r}, {j!r})") from e

    def __getitem__(self, key):
        i, j = key
        return self.entry(i, j)

    def row(self, i: Label) -> Tuple[Any, ...]:
        return self._data[self._row_pos[i]]

    def column(self, j: Label) -> Tuple[Any, ...]:
        k = self._col_pos[j]
        return tuple(row[k] for row in self._data)

    def to_lists(self) -> List[List[Any]]:
        return [list(row) for row in self._data]

    def has_square_index(self) -> bool:
        """Rows and columns are labelled by the same index set."""
        return set(self.rows) == set(self.cols)

    # ------------------------------------------------------------------
    # algebra
    # ------------------------------------------------------------------

    def __matmul__(self, other: "IndexedMatrix") -> "IndexedMatrix":
        if set(self.cols) != set(other.rows) or len(self.cols) != len(other.rows):
            raise ShapeError(
                f"cannot multiply: inner labels {self.cols!r} vs {other.rows!r}"
            )
        ring = self.ring
        inner = self.cols
        data = []
        for i in self.rows:
            left = self.row(i)
            out_row = []
            for j in other.cols:
                out_row.append(ring.sum(ring.mul(left[k], other.entry(l, j)) for k, l in enumerate(inner)))
            data.append(out_row)
        return IndexedMatrix(ring, self.rows, other.cols, data)

    def __add__(self, other: "IndexedMatrix") -> "IndexedMatrix":
        if set(self.rows) != set(other.rows) or set(self.cols) != set(other.cols):
            raise ShapeError("cannot add matrices with different labels")
        ring = self.ring
        return IndexedMatrix.from_function(ring, self.rows, self.cols, lambda i, j: ring.add(self.entry(i, j), other.entry(i, j)))

    def scale(self, c) -> "IndexedMatrix":
        ring = self.ring
        return IndexedMatrix(ring, self.rows, self.cols, [[ring.mul(c, x) for x in row] for row in self._data])

    def transpose(self) -> "IndexedMatrix":
        return IndexedMatrix(self.ring, self.cols, self.rows, [list(col) for col in zip(*self._data)] if self._data else [[] for _ in self.cols])

    def reorder(self, rows: Sequence[Label], cols: Sequence[Label]) -> "IndexedMatrix":
        """Same labels, different positional order."""
        return IndexedMatrix.from_function(self.ring, rows, cols, self.entry)

    def relabel(self, rows: Sequence[Label], cols: Sequence[Label], row_of: Callable, col_of: Callable) -> "IndexedMatrix":
        """New matrix with ``out[i][j] = self[row_of(i)][col_of(j)]``."""
        return IndexedMatrix.from_function(self.ring, rows, cols, lambda i, j: self.entry(row_of(i), col_of(j)))

    def equals(self, other: "IndexedMatrix") -> bool:
        if set(self.rows) != set(other.rows) or set(self.cols) != set(other.cols):
            return False
        return all(
            self.ring.eq(self.entry(i, j), other.entry(i, j)) for i in self.rows for j in self.cols
        )

    def is_identity(self) -> bool:
        return self.has_square_index() and self.equals(IndexedMatrix.identity(self.ring, self.rows))

    def __repr__(self) -> str:
        return f"IndexedMatrix(rows={self.rows!r}, cols={self.cols!r}, data={self.to_lists()!r})"


# ---------------------------------------------------------------------------
# matrix_det backends (positional, on square lists)
# ---------------------------------------------------------------------------


def _det_leibniz(M: List[List[Any]], ring: CommutativeRing):
    n = len(M)
    total = ring.zero()
    for perm in itertools.permutations(range(n)):
        inversions = sum(1 for a in range(n) for b in range(a + 1, n) if perm[a] > perm[b])
        term = ring.prod(M[i][perm[i]] for i in range(n))
        total = ring.add(total, ring.mul(ring.sign(inversions), term))
    return total


def _berkowitz_vector(M: List[List[Any]], ring: CommutativeRing) -> List[Any]:
    """
    Coefficients [1, c_1, ..., c_n] of det(xI - M) = x^n + c_1 x^{n-1} + ... + c_n.

    M = [[a, R], [C, A]]; the vector of M is T(M) @ vector(A) with T the
    (n+1) x n lower-triangular Toeplitz matrix built from 1, -a, -R A^k C.
    """
    n = len(M)
    if n == 0:
        return [ring.one()]
    if n == 1:
        return [ring.one(), ring.neg(M[0][0])]
    a = M[0][0]
    R = M[0][1:]
    C = [M[i][0] for i in range(1, n)]
    A = [row[1:] for row in M[1:]]

    diags = [ring.one(), ring.neg(a)]
    v = C
    for _ in range(n - 1):
        diags.append(ring.neg(ring.sum(ring.mul(r, x) for r, x in zip(R, v))))
        v = [ring.sum(ring.mul(A[i][k], v[k]) for k in range(n - 1)) for i in range(n - 1)]

    sub = _berkowitz_vector(A, ring)
    out = []
    for i in range(n + 1):
        out.append(ring.sum(ring.mul(diags[i - j], sub[j]) for j in range(min(i, n - 1) + 1) if i - j < len(diags)))
    return out


def _det_berkowitz(M: List[List[Any]], ring: CommutativeRing):
    vec = _berkowitz_vector(M, ring)
    return ring.mul(ring.sign(len(M)), vec[-1])


def _det_gauss(M: List[List[Any]], ring: CommutativeRing):
    if not ring.is_field:
        raise FieldRequiredError("GAUSS determinant", ring.name)
    A = [list(row) for row in M]
    n = len(A)
    det = ring.one()
    for c in range(n):
        pivot = None
        for r in range(c, n):
            if not ring.is_zero(A[r][c]):
                pivot = r
                break
        if pivot is None:
            return ring.zero()
        if pivot != c:
            A[c], A[pivot] = A[pivot], A[c]
            det = ring.neg(det)
        det = ring.mul(det, A[c][c])
        inv = ring.inverse(A[c][c])
        for r in range(c + 1, n):
            factor = ring.mul(A[r][c], inv)
            if ring.is_zero(factor):
                continue
            A[r] = [ring.sub(A[r][k], ring.mul(factor, A[c][k])) for k in range(n)]
    return det


def _det_galois(M: List[List[Any]], ring: CommutativeRing):
    if not is_galois_field(ring):
        raise FieldRequiredError("GALOIS determinant (galois.GF)", ring.name)
    if len(M) == 1:
        return ring.coerce(M[0][0])
    return ring.coerce(np.linalg.det(ring.array(M)))


_BACKENDS: Dict[str, Callable[[List[List[Any]], CommutativeRing], Any]] = {
    "BERKOWITZ": _det_berkowitz,
    "LEIBNIZ": _det_leibniz,
    "GAUSS": _det_gauss,
    "GALOIS": _det_galois,
}


def resolve_backend(ring: CommutativeRing, backend: str = "AUTO") -> str:
    backend = str(backend).upper()
    if backend != "AUTO":
        if backend not in _BACKENDS:
            raise ValueError(f"unknown determinant backend {backend!r}")
        return backend
    if is_galois_field(ring):
        return "GALOIS"
    if ring.is_field:
        return "GAUSS"
    return "BERKOWITZ"


def _det_positional(M: List[List[Any]], ring: CommutativeRing, backend: str = "AUTO"):
    if not M:
        return ring.one()
    return _BACKENDS[resolve_backend(ring, backend)](M, ring)


def matrix_det(A: IndexedMatrix, backend: str = "AUTO"):
    """Determinant of a matrix whose rows and columns share one index set."""
    if not A.has_square_index():
        raise ShapeError(
            f"matrix_det needs rows and columns over the same index set, got {A.rows!r} / {A.cols!r}"
        )
    M = [[A.entry(i, j) for j in A.rows] for i in A.rows]
    return _det_positional(M, A.ring, backend)


# ---------------------------------------------------------------------------
# adjugate / inverse over any commutative ring
# ---------------------------------------------------------------------------


def _positional(A: IndexedMatrix) -> List[List[Any]]:
    return A.to_lists()


def adjugate(A: IndexedMatrix, backend: str = "AUTO") -> IndexedMatrix:
    """
    adj(A) with A @ adj(A) = det(A) I, for A with len(rows) == len(cols).

    Labels: adj(A) has rows A.cols and cols A.rows, so it composes with A on
    both sides even when the two label sets differ.
    """
    n, m = A.shape
    if n != m:
        raise ShapeError(f"adjugate needs a square shape, got {n}x{m}")
    ring = A.ring
    M = _positional(A)
    data = [[ring.zero()] * n for _ in range(n)]
    for i in range(n):
        for j in range(n):
            sub = [[M[r][c] for c in range(n) if c != j] for r in range(n) if r != i]
            cof = ring.mul(ring.sign(i + j), _det_positional(sub, ring, backend))
            data[j][i] = cof
    return IndexedMatrix(ring, A.cols, A.rows, data)


def positional_det(A: IndexedMatrix, backend: str = "AUTO"):
    """Determinant of the positional array, ignoring labels (n x n shape required)."""
    n, m = A.shape
    if n != m:
        raise ShapeError(f"determinant needs a square shape, got {n}x{m}")
    return _det_positional(_positional(A), A.ring, backend)


def inverse(A: IndexedMatrix, backend: str = "AUTO") -> IndexedMatrix:
    """Two-sided inverse ``adj(A) / det(A)``; the determinant must be a unit."""
    ring = A.ring
    d = positional_det(A, backend)
    if not ring.is_unit(d):
        raise NotAUnitError(d, ring.name)
    return adjugate(A, backend).scale(ring.unit_inverse(d))


# ---------------------------------------------------------------------------
# field linear algebra: RREF / rank / nullspace
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Rref:
    """
    RREF over a field:
      - rows: non-zero rows of the reduced matrix (len = rank)
      - pivot_cols: pivot column positions
      - cols: column labels of the source matrix
    """

    rows: Tuple[Tuple[Any, ...], ...]
    pivot_cols: Tuple[int, ...]
    cols: Tuple[Label, ...]

    @property
    def rank(self) -> int:
        return len(self.pivot_cols)


def _uses_galois(A: IndexedMatrix) -> bool:
    n_rows, n_cols = A.shape
    return is_galois_field(A.ring) and n_rows > 0 and n_cols > 0


def _rref_galois(A: IndexedMatrix) -> Rref:
    ring = A.ring
    reduced = ring.array(_positional(A)).row_reduce()
    rows, pivot_cols = [], []
    for row in reduced:
        nonzero = np.flatnonzero(row.view(np.ndarray))
        if nonzero.size == 0:
            break
        pivot_cols.append(int(nonzero[0]))
        rows.append(tuple(ring.coerce(x) for x in row))
    return Rref(rows=tuple(rows), pivot_cols=tuple(pivot_cols), cols=A.cols)


def rref(A: IndexedMatrix) -> Rref:
    ring = A.ring
    if not ring.is_field:
        raise FieldRequiredError("row reduction", ring.name)
    if _uses_galois(A):
        return _rref_galois(A)
    M = _positional(A)
    n_rows, n_cols = A.shape
    pivot_cols: List[int] = []
    r = 0
    for c in range(n_cols):
        pivot = None
        for rr in range(r, n_rows):
            if not ring.is_zero(M[rr][c]):
                pivot = rr
                break
        if pivot is None:
            continue
        if pivot != r:
            M[r], M[pivot] = M[pivot], M[r]
        inv = ring.inverse(M[r][c])
        M[r] = [ring.mul(inv, v) for v in M[r]]
        for rr in range(n_rows):
            if rr == r:
                continue
            factor = M[rr][c]
            if ring.is_zero(factor):
                continue
            M[rr] = [ring.sub(M[rr][k], ring.mul(factor, M[r][k])) for k in range(n_cols)]
        pivot_cols.append(c)
        r += 1
        if r == n_rows:
            break
    return Rref(rows=tuple(tuple(row) for row in M[:r]), pivot_cols=tuple(pivot_cols), cols=A.cols)


def rank(A: IndexedMatrix) -> int:
    if _uses_galois(A):
        return int(np.linalg.matrix_rank(A.ring.array(_positional(A))))
    return rref(A).rank


def nullspace(A: IndexedMatrix) -> List[Dict[Label, Any]]:
    """Basis of {x : A x = 0}, each vector keyed by A's column labels."""
    ring = A.ring
    if _uses_galois(A):
        # rows of null_space() span the right null space
        basis = [
            {label: ring.coerce(x) for label, x in zip(A.cols, vec)}
            for vec in ring.array(_positional(A)).null_space()
        ]
        _logger.debug("nullspace: %d vectors from galois over %s", len(basis), ring.name)
        return basis
    red = rref(A)
    pivots = set(red.pivot_cols)
    free = [c for c in range(len(A.cols)) if c not in pivots]
    basis = []
    for f in free:
        vec = [ring.zero()] * len(A.cols)
        vec[f] = ring.one()
        for row, pc in zip(red.rows, red.pivot_cols):
            vec[pc] = ring.neg(row[f])
        basis.append({A.cols[k]: vec[k] for k in range(len(A.cols))})
    _logger.debug("nullspace: %d free columns over %s", len(free), ring.name)
    return basis
