"""Input loading, team key normalization and payload validation."""

from .loader import DataLoader
from .normalize import normalize_team_key

__all__ = ["DataLoader", "normalize_team_key"]
