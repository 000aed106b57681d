"""
geo.py — Geography lookup helpers.

Used by the pipeline to resolve CoC numbers ("MA-500") to the state they
belong to, and to tidy the state names carried by the external datasets.

Usage:
    from pitcount_shared.geo import coc_region_code, region_name_for_code

    coc_region_code("MA-500")          # "MA"
    region_name_for_code("MA")         # "Massachusetts"
    state_name_to_code("massachusets") # "MA"  (fuzzy)
"""

from __future__ import annotations

from difflib import get_close_matches

from pitcount_shared.constants import STATE_NAME_TO_CODE, STATES

_NAME_ALIASES: dict[str, str] = {
    **{name.lower(): code for name, code in STATE_NAME_TO_CODE.items()},
    **{code.lower(): code for code in STATES},
    "washington dc": "DC",
    "washington, d.c.": "DC",
    "d.c.": "DC",
    "u.s. virgin islands": "VI",
    "us virgin islands": "VI",
}


def coc_region_code(coc_number: str | None) -> str | None:
    """Return the two-character region prefix of a CoC number, upper-cased."""
    if not coc_number:
        return None
    prefix = coc_number.strip()[:2]
    return prefix.upper() if len(prefix) == 2 else None


def region_name_for_code(code: str | None) -> str | None:
    """Map a USPS code to its state/territory name; None when unknown."""
    if not code:
        return None
    return STATES.get(code.strip().upper())


def state_name_to_code(name: str | None) -> str | None:
    """
    Resolve a state name or USPS code to a USPS code.

    Performs an exact match first, then falls back to fuzzy matching.

    Args:
        name: State name or code (e.g. "Ohio", "OH", "Washington DC").

    Returns:
        Two-letter code, or None if no match found.
    """
    if not name:
        return None

    key = name.strip().lower()
    if key in _NAME_ALIASES:
        return _NAME_ALIASES[key]

    matches = get_close_matches(key, list(_NAME_ALIASES), n=1, cutoff=0.85)
    if matches:
        return _NAME_ALIASES[matches[0]]
    return None


def canonical_region_name(name: str | None) -> str | None:
    """Return the canonical state name for a free-form name, or the input stripped."""
    if name is None:
        return None
    code = state_name_to_code(name)
    return STATES[code] if code else name.strip()

