"""
Auth domain types - no dependencies on other auth modules.

NOTE: Keep this minimal. Only add types here if they are:
1. Used by 3+ auth submodules, AND
2. Would otherwise cause circular imports
"""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class PrincipalKind(str, Enum):
    """The two kinds of authenticated actor."""
    ADMIN = "admin"
    CLIENT = "client"


@dataclass(frozen=True)
class PrincipalRef:
    """Identity resolved from a verified token (immutable)."""
    kind: PrincipalKind
    id: str


@dataclass(frozen=True)
class TokenPayload:
    """Decoded JWT payload (immutable)."""
    kind: PrincipalKind
    sub: str  # principal id
    iat: datetime
    exp: datetime

    @property
    def principal(self) -> PrincipalRef:
        return PrincipalRef(kind=self.kind, id=self.sub)
