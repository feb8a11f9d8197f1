"""Canonical team keys shared by every loader."""

from __future__ import annotations

import html
import re
import unicodedata
from typing import Optional

KNOWN_LEAGUES = ("nba", "nhl", "ncaam", "ncaab")

# Provider ids carry the league in front: "nba-bos", "nhl:tor", "ncaam_duke"
_PREFIX_SEPARATORS = "-:_/"
_NON_KEY = re.compile(r"[^a-z0-9]+")


def _ascii_fold(text: str) -> str:
    return unicodedata.normalize("NFKD", text).encode("ascii", "ignore").decode("ascii")


def _strip_league_prefix(text: str, league: Optional[str]) -> str:
    prefixes = (league,) if league else KNOWN_LEAGUES
    for prefix in prefixes:
        if len(text) > len(prefix) + 1 and text.startswith(prefix) and text[len(prefix)] in _PREFIX_SEPARATORS:
            return text[len(prefix) + 1:]
    return text


def normalize_team_key(name, league: Optional[str] = None) -> str:
    """
    Canonical key for a team within a league.

    Abbreviations and names from any provider map onto one lowercase,
    underscore-delimited key: ``BOS``, ``nba-bos`` and ``Nba:BOS`` all read
    ``bos``. A leading league prefix is dropped (only ``league``'s own prefix
    when it is given), accents are folded to ASCII, HTML entities decoded and
    every run of other characters becomes one underscore.

    Args:
        name: Team abbreviation, provider id or display name
        league: League the key belongs to, when known

    Returns:
        The canonical key, or "" when nothing usable remains
    """
    if name is None:
        return ""
    text = _ascii_fold(html.unescape(str(name))).strip().lower()
    text = _strip_league_prefix(text, normalize_league(league) if league else None)
    return _NON_KEY.sub("_", text).strip("_")


def normalize_league(league) -> str:
    return str(league or "").strip().lower()
