"""Address canonicalization for identity lookups."""

import re
from typing import Final

_WHITESPACE_RE: Final = re.compile(r"\s+")
_PUNCTUATION_RE: Final = re.compile(r"[.,#]")

STREET_ABBREVIATIONS: Final = {
    "AVENUE": "AVE",
    "BOULEVARD": "BLVD",
    "CIRCLE": "CIR",
    "COURT": "CT",
    "DRIVE": "DR",
    "HIGHWAY": "HWY",
    "LANE": "LN",
    "PARKWAY": "PKWY",
    "PLACE": "PL",
    "ROAD": "RD",
    "SQUARE": "SQ",
    "STREET": "ST",
    "TERRACE": "TER",
    "TRAIL": "TRL",
    "NORTH": "N",
    "SOUTH": "S",
    "EAST": "E",
    "WEST": "W",
    "APARTMENT": "APT",
    "SUITE": "STE",
}


def canonicalize_address_part(value: str) -> str:
    """Trim, collapse whitespace, upper-case and abbreviate street words."""

    cleaned = _PUNCTUATION_RE.sub(" ", value)
    tokens = _WHITESPACE_RE.split(cleaned.strip().upper())
    return " ".join(STREET_ABBREVIATIONS.get(token, token) for token in tokens if token)


def canonicalize_postal_code(value: str) -> str:
    compact = value.strip().replace(" ", "")
    if len(compact) > 5 and compact[:5].isdigit():
        return compact[:5]
    return compact.upper()


def build_address_key(address_line: str, city: str, postal_code: str) -> str:
    """Build the normalized identity key stored alongside each tracked property."""

    return "|".join(
        (
            canonicalize_address_part(address_line),
            canonicalize_address_part(city),
            canonicalize_postal_code(postal_code),
        )
    )
