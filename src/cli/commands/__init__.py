"""CLI command modules."""

from .analysis import contributions, skills
from .recommend import recommend, trending

__all__ = [
    "skills",
    "contributions",
    "recommend",
    "trending",
]
