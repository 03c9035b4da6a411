"""Matrix representations of linear maps relative to basis witnesses.

Pure data transforms: ``to_matrix(f, w)[i][j]`` is the ``b_i`` coordinate of
``f(b_j)``.  Nothing here reasons about determinants.
"""

from __future__ import annotations

from typing import Any, Dict, Hashable, Mapping, Sequence, Union

from .basis import BasisWitness
from .errors import ModuleMismatchError, ShapeError
from .linear_maps import LinearMap
from .matrices import IndexedMatrix

Label = Hashable


def to_matrix_between(f: LinearMap, w_src: BasisWitness, w_dst: BasisWitness) -> IndexedMatrix:
    """Matrix of ``f: M -> N`` with rows labelled by ``w_dst`` and columns by ``w_src``."""
    if w_src.module is not f.domain or w_dst.module is not f.codomain:
        raise ModuleMismatchError("witnesses do not belong to the map's domain/codomain")
    columns = [tuple(w_dst.coords(f(b))) for b in w_src.vectors]
    data = [[columns[j][i] for j in range(len(w_src.index))] for i in range(len(w_dst.index))]
    return IndexedMatrix(f.ring, w_dst.index, w_src.index, data)


def to_matrix(f: LinearMap, witness: BasisWitness) -> IndexedMatrix:
    """Square matrix of an endomorphism in one witness."""
    if not f.is_endomorphism():
        raise ModuleMismatchError(f"{f.name} is not an endomorphism")
    return to_matrix_between(f, witness, witness)


def to_lin(A: IndexedMatrix, witness: BasisWitness) -> LinearMap:
    """
    The endomorphism whose matrix in ``witness`` is ``A`` (inverse of ``to_matrix``):
    v -> sum_i (sum_j A[i][j] c_j) b_i with c = coords(v).
    """
    if set(A.rows) != set(witness.index) or set(A.cols) != set(witness.index):
        raise ShapeError("matrix labels must match the witness index")
    M = witness.module
    ring = M.ring
    index = witness.index

    def apply(v):
        c = witness.coordinates(v)
        out = {i: ring.sum(ring.mul(A.entry(i, j), c[j]) for j in index) for i in index}
        return witness.combine(out)

    return LinearMap(M, M, apply, name="to_lin(A)")


def basis_to_matrix(w1: BasisWitness, w2: BasisWitness) -> IndexedMatrix:
    """
    Change-of-basis matrix with column ``j`` = ``coords_w1(b2_j)``
    (rows labelled by w1.index, columns by w2.index).

    ``basis_to_matrix(w1, w2) @ basis_to_matrix(w2, w1) = I`` and
    ``to_matrix(f, w2) = basis_to_matrix(w2, w1) @ to_matrix(f, w1) @ basis_to_matrix(w1, w2)``.
    """
    if w1.module is not w2.module:
        raise ModuleMismatchError("witnesses belong to different modules")
    return coordinates_matrix(w1, dict(zip(w2.index, w2.vectors)))


def coordinates_matrix(witness: BasisWitness, family: Union[Mapping[Label, Any], Sequence[Any]]) -> IndexedMatrix:
    """
    Matrix whose column ``j`` holds the coordinates of ``family[j]``.

    ``family`` is a mapping label -> vector, or a sequence aligned with
    ``witness.index``.
    """
    fam = as_family(witness, family)
    cols = tuple(fam)
    columns = [tuple(witness.coords(fam[j])) for j in cols]
    data = [[columns[k][i] for k in range(len(cols))] for i in range(len(witness.index))]
    return IndexedMatrix(witness.module.ring, witness.index, cols, data)


def as_family(witness: BasisWitness, family) -> Dict[Label, Any]:
    if isinstance(family, Mapping):
        return dict(family)
    family = list(family)
    if len(family) != len(witness.index):
        raise ShapeError(f"family of {len(family)} vectors does not match index of size {len(witness.index)}")
    return dict(zip(witness.index, family))
