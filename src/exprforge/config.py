"""Engine configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_DOMAIN = "float"
DEFAULT_MAX_DEPTH = 64
DEFAULT_DECIMAL_PRECISION = 28


@dataclass(frozen=True)
class EngineConfig:
    """Settings shared by every expression build.

    Attributes:
        domain: Name of the numeric domain used when none is given explicitly
        max_depth: Maximum nesting depth accepted by the parser
        decimal_precision: Significant digits for the ``decimal`` domain
    """

    domain: str = DEFAULT_DOMAIN
    max_depth: int = DEFAULT_MAX_DEPTH
    decimal_precision: int = DEFAULT_DECIMAL_PRECISION

    def __post_init__(self) -> None:
        if self.max_depth < 1:
            raise ValueError(f"max_depth must be positive, got {self.max_depth}")
        if self.decimal_precision < 1:
            raise ValueError(
                f"decimal_precision must be positive, got {self.decimal_precision}"
            )

    @classmethod
    def from_env(cls) -> EngineConfig:
        """Create config from environment variables.

        Reads:
        1. EXPRFORGE_DOMAIN (default: float)
        2. EXPRFORGE_MAX_DEPTH (default: 64)
        3. EXPRFORGE_DECIMAL_PRECISION (default: 28)
        """
        return cls(
            domain=os.environ.get("EXPRFORGE_DOMAIN", DEFAULT_DOMAIN),
            max_depth=_int_from_env("EXPRFORGE_MAX_DEPTH", DEFAULT_MAX_DEPTH),
            decimal_precision=_int_from_env(
                "EXPRFORGE_DECIMAL_PRECISION", DEFAULT_DECIMAL_PRECISION
            ),
        )


def _int_from_env(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None
