"""Basis witnesses and the per-module witness cache.

A witness is *some* finite basis of a module: an index tuple, the basis
vectors, and the coordinate map.  Which witness a module's oracle hands
out is immaterial; the determinant computed from any of them agrees
(see ``conjugation``).  The cache therefore only remembers that a witness
was found (and one such witness), never a determinant value.
"""

from __future__ import annotations

import logging
import weakref
from dataclasses import dataclass
from typing import Any, Callable, Dict, Hashable, Mapping, Optional, Sequence, Tuple

from .errors import InvalidWitnessError, ModuleMismatchError, NotAUnitError

_logger = logging.getLogger(__name__)

Label = Hashable


@dataclass(frozen=True, eq=False)
class BasisWitness:
    """
    (index, vectors, coords) for a module:
      - index: finite tuple of distinct hashable labels
      - vectors[k]: basis vector labelled index[k]
      - coords(v): coordinates of v aligned with index
    """

    module: Any
    index: Tuple[Label, ...]
    vectors: Tuple[Any, ...]
    coords: Callable[[Any], Sequence[Any]]

    def __post_init__(self) -> None:
        object.__setattr__(self, "index", tuple(self.index))
        object.__setattr__(self, "vectors", tuple(self.vectors))
        if len(set(self.index)) != len(self.index):
            raise InvalidWitnessError(f"duplicate labels in witness index {self.index!r}")
        if len(self.index) != len(self.vectors):
            raise InvalidWitnessError(
                f"witness has {len(self.index)} labels but {len(self.vectors)} vectors"
            )

    @property
    def ring(self):
        return self.module.ring

    @property
    def size(self) -> int:
        return len(self.index)

    def __len__(self) -> int:
        return len(self.index)

    def vector(self, label: Label):
        return self.vectors[self.index.index(label)]

    def coordinates(self, v) -> Dict[Label, Any]:
        return dict(zip(self.index, self.coords(v)))

    def combine(self, coeffs: Mapping[Label, Any]):
        """sum_i coeffs[i] * b_i"""
        M = self.module
        acc = M.zero()
        for label, b in zip(self.index, self.vectors):
            c = coeffs.get(label, M.ring.zero())
            if not M.ring.is_zero(c):
                acc = M.add(acc, M.smul(c, b))
        return acc

    def reindex(self, sigma: Mapping[Label, Label]) -> "BasisWitness":
        """Relabel: the vector labelled ``i`` gets label ``sigma[i]``."""
        new_index = tuple(sigma[i] for i in self.index)
        if len(set(new_index)) != len(new_index):
            raise InvalidWitnessError("reindexing map is not injective")
        return BasisWitness(self.module, new_index, self.vectors, self.coords)

    def units_smul(self, w: Mapping[Label, Any]) -> "BasisWitness":
        """Scale basis vector ``i`` by the unit ``w[i]``; coordinates scale by ``w[i]^-1``."""
        ring = self.module.ring
        inv = {}
        for i in self.index:
            u = w[i]
            if not ring.is_unit(u):
                raise NotAUnitError(u, ring.name)
            inv[i] = ring.unit_inverse(u)
        M = self.module
        vectors = tuple(M.smul(w[i], b) for i, b in zip(self.index, self.vectors))
        base = self.coords
        index = self.index

        def coords(v):
            return tuple(ring.mul(inv[i], c) for i, c in zip(index, base(v)))

        return BasisWitness(M, index, vectors, coords)


def check_witness(witness: BasisWitness) -> None:
    """
    Verify coords(b_i) = e_i for every basis vector and that each b_i is
    rebuilt by ``combine``.  Only run on request: witness validity is the
    oracle's contract.
    """
    ring = witness.module.ring
    M = witness.module
    for i, b in zip(witness.index, witness.vectors):
        c = witness.coordinates(b)
        if set(c) != set(witness.index):
            raise InvalidWitnessError(f"coordinates of b[{i!r}] are not indexed by the witness labels")
        for j, x in c.items():
            expected = ring.one() if i == j else ring.zero()
            if not ring.eq(x, expected):
                raise InvalidWitnessError(f"coords(b[{i!r}])[{j!r}] = {x!r}, expected {expected!r}")
        if not M.eq(witness.combine(c), b):
            raise InvalidWitnessError(f"combine(coords(b[{i!r}])) does not rebuild b[{i!r}]")


_MISSING = object()
_SLOT = "_witness_cache"


class BasisCache:
    """
    Memoises ``Module.find_basis()`` per module instance.

    A witness refers back to its module, so entries live on the module
    itself (keyed weakly by cache) and the cache only tracks modules in a
    ``WeakSet``; modules stay collectable.  Entries are set once and never
    mutated; ``invalidate``/``clear`` drop them, after which the oracle may
    return a different witness.  Concurrent callers may discover a witness
    twice; any of them is correct.
    """

    def __init__(self, *, enabled: bool = True, check: bool = False):
        self.enabled = enabled
        self.check = check
        self._modules: "weakref.WeakSet[Any]" = weakref.WeakSet()
        self.lookups = 0

    def _entries(self, module) -> "weakref.WeakKeyDictionary[BasisCache, Optional[BasisWitness]]":
        return vars(module).setdefault(_SLOT, weakref.WeakKeyDictionary())

    def try_get_witness(self, module) -> Optional[BasisWitness]:
        if self.enabled:
            cached = self._entries(module).get(self, _MISSING)
            if cached is not _MISSING:
                return cached
        witness = module.find_basis()
        self.lookups += 1
        if witness is not None:
            if witness.module is not module:
                raise ModuleMismatchError("find_basis returned a witness for a different module")
            if self.check:
                check_witness(witness)
            _logger.debug("witness found for %r: %d basis vectors", module, witness.size)
        else:
            _logger.debug("no finite basis for %r", module)
        if self.enabled:
            self._entries(module)[self] = witness
            self._modules.add(module)
        return witness

    def invalidate(self, module) -> None:
        vars(module).get(_SLOT, {}).pop(self, None)
        self._modules.discard(module)

    def clear(self) -> None:
        for module in list(self._modules):
            self.invalidate(module)

    def __contains__(self, module) -> bool:
        return module in self._modules

    def __len__(self) -> int:
        return len(self._modules)
