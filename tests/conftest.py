"""Shared fixtures for the determinant engine tests."""

import pytest

from detcore import (
    DeterminantEngine,
    EngineConfig,
    FreeModule,
    IndexedMatrix,
    QQ,
    ZZ,
    GaloisField,
    IntegersModN,
    set_default_engine,
    to_lin,
)

RING_FACTORIES = {
    "ZZ": lambda: ZZ,
    "QQ": lambda: QQ,
    "Z6": lambda: IntegersModN(6),
    "Z1": lambda: IntegersModN(1),
    "GF2": lambda: GaloisField(2),
    "GF5": lambda: GaloisField(5),
    "GF4": lambda: GaloisField(4),
}


@pytest.fixture(params=sorted(RING_FACTORIES))
def ring(request):
    return RING_FACTORIES[request.param]()


@pytest.fixture
def engine():
    return DeterminantEngine(EngineConfig(validate_laws=True))


@pytest.fixture(autouse=True)
def _reset_default_engine():
    set_default_engine(None)
    yield
    set_default_engine(None)


def endo(M: FreeModule, rows):
    """Endomorphism of M whose matrix in the standard basis is ``rows``."""
    A = IndexedMatrix.from_rows(M.ring, rows, labels=M.labels)
    return to_lin(A, M.standard_basis())
