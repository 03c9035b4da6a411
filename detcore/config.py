"""Engine configuration.

All knobs are explicit fields of a frozen dataclass; environment overrides
are parsed strictly (an invalid value is a deployment error and raises).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Tuple

DET_BACKENDS: Tuple[str, ...] = ("AUTO", "BERKOWITZ", "LEIBNIZ", "GAUSS", "GALOIS")

_TRUE = ("1", "TRUE", "YES", "ON")
_FALSE = ("0", "FALSE", "NO", "OFF")


def _env_strict_enum(name: str, *, allowed: Tuple[str, ...], default: str) -> str:
    """
    Read an env var as an enum-like string with strict validation.

    No silent downgrade: invalid values must raise.
    """
    raw = os.getenv(name)
    if raw is None or not str(raw).strip():
        return str(default)
    val = str(raw).strip().upper()
    if val not in allowed:
        raise ValueError(f"{name} must be one of {list(allowed)}, got {raw!r}")
    return val


def _env_bool(name: str, *, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not str(raw).strip():
        return bool(default)
    val = str(raw).strip().upper()
    if val in _TRUE:
        return True
    if val in _FALSE:
        return False
    raise ValueError(f"{name} must be a boolean ({'/'.join(_TRUE + _FALSE)}), got {raw!r}")


@dataclass(frozen=True)
class EngineConfig:
    """
    det_backend:     matrix determinant primitive (AUTO picks per ring)
    validate_laws:   compute both sides of every law and raise on mismatch
    check_witnesses: verify basis witnesses returned by module oracles
    cache_witnesses: memoise the witness lookup per module instance
    """

    det_backend: str = "AUTO"
    validate_laws: bool = False
    check_witnesses: bool = False
    cache_witnesses: bool = True

    def __post_init__(self) -> None:
        backend = str(self.det_backend).upper()
        if backend not in DET_BACKENDS:
            raise ValueError(f"det_backend must be one of {list(DET_BACKENDS)}, got {self.det_backend!r}")
        object.__setattr__(self, "det_backend", backend)

    @classmethod
    def from_env(cls) -> "EngineConfig":
        return cls(
            det_backend=_env_strict_enum("DETCORE_DET_BACKEND", allowed=DET_BACKENDS, default="AUTO"),
            validate_laws=_env_bool("DETCORE_VALIDATE_LAWS", default=False),
            check_witnesses=_env_bool("DETCORE_CHECK_WITNESSES", default=False),
            cache_witnesses=_env_bool("DETCORE_CACHE_WITNESSES", default=True),
        )
