"""Team name normalization for potdraw.

- Display names keep their accents (NFC), trimmed, whitespace collapsed
- Blank names fall back to a placeholder derived from the pot label
- Team ids are ASCII slugs, transliterated with unidecode
"""

from __future__ import annotations

import re
import unicodedata

from unidecode import unidecode


def placeholder_name(group_label: str, index: int) -> str:
    """Placeholder for the team at 0-based index in a pot."""
    return f"{group_label} Team {index + 1}"


def normalize_team_name(raw: str | None, group_label: str, index: int) -> str:
    """Clean a team display name, or build a placeholder if it is blank.

    Examples:
        "  Real   Madrid " → "Real Madrid"
        "" (in "Pot 2", index 3) → "Pot 2 Team 4"
    """
    if raw is None or not raw.strip():
        return placeholder_name(group_label, index)
    name = unicodedata.normalize("NFC", raw.strip())
    return re.sub(r"\s+", " ", name)


def slugify_team_id(name: str) -> str:
    """ASCII, lowercase, hyphen-separated id for a team name.

    Examples:
        "Atlético Madrid" → "atletico-madrid"
        "Paris Saint-Germain" → "paris-saint-germain"
    """
    ascii_name = unidecode(name).lower()
    slug = re.sub(r"[^a-z0-9]+", "-", ascii_name).strip("-")
    if not slug:
        raise ValueError(f"Cannot derive a team id from {name!r}")
    return slug
