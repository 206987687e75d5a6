"""
Velora Games — ORM model registry.

Importing every model here ensures that Alembic (and any other tool that
inspects ``Base.metadata``) discovers all tables automatically.
"""

from app.models.user import User
from app.models.match import Match
from app.models.session import (
    DreamBoardSessionRow,
    IntimacySpectrumSessionRow,
    NeverHaveIEverSessionRow,
    TwoTruthsLieSessionRow,
    WhatWouldYouDoSessionRow,
    WouldYouRatherSessionRow,
)
from app.models.compatibility import CoupleCompatibility

__all__ = [
    "User",
    "Match",
    "TwoTruthsLieSessionRow",
    "WouldYouRatherSessionRow",
    "IntimacySpectrumSessionRow",
    "NeverHaveIEverSessionRow",
    "WhatWouldYouDoSessionRow",
    "DreamBoardSessionRow",
    "CoupleCompatibility",
]
