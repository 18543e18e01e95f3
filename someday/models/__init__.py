"""
Someday — ORM model registry.

Importing every model here ensures that Alembic (and any other tool that
inspects ``Base.metadata``) discovers all tables automatically.
"""

from someday.models.profile import Profile
from someday.models.match import LastSwipe, Match, Swipe

__all__ = [
    "Profile",
    "Swipe",
    "LastSwipe",
    "Match",
]
