"""Name legality: length limit, reserved names, illegal characters."""

from __future__ import annotations

from homeshift.config import (
    ILLEGAL_CHARACTERS,
    MAX_NAME_LENGTH,
    REPLACEMENT_CHARACTER,
    RESERVED_NAMES,
    RESERVED_SUBSTRINGS,
)
from homeshift.models import (
    ILLEGAL_CHARACTER,
    NAME_TOO_LONG,
    RESERVED_NAME,
    UNFIXABLE_KINDS,
    Violation,
)


def is_too_long(name: str) -> bool:
    return len(name) > MAX_NAME_LENGTH


def reserved_matches(name: str) -> list[str]:
    """Return the reserved names/strings the name hits (case-insensitive).

    "desktop.ini" must be the whole name; "_vti_" may appear anywhere.
    """
    folded = name.casefold()
    hits = [r for r in RESERVED_NAMES if folded == r.casefold()]
    hits.extend(s for s in RESERVED_SUBSTRINGS if s.casefold() in folded)
    return hits


def illegal_characters_in(name: str) -> list[str]:
    """Every illegal character occurrence in name, left to right.

    "a##b%c" -> ["#", "#", "%"]
    """
    return [c for c in name if c in ILLEGAL_CHARACTERS]


def propose_name(name: str) -> str:
    """Replace every illegal character occurrence with the replacement char.

    "report#card%2024.pdf" -> "report-card-2024.pdf"
    """
    for char in ILLEGAL_CHARACTERS:
        name = name.replace(char, REPLACEMENT_CHARACTER)
    return name


def detect_violations(name: str) -> list[Violation]:
    """Classify a single entry name.

    Checks run in a fixed order: length, reserved names, illegal characters.
    """
    violations: list[Violation] = []

    if is_too_long(name):
        violations.append(Violation(
            kind=NAME_TOO_LONG,
            detail=f"Name exceeds {MAX_NAME_LENGTH} characters ({len(name)})",
        ))

    for hit in reserved_matches(name):
        label = "name" if hit in RESERVED_NAMES else "string"
        violations.append(Violation(
            kind=RESERVED_NAME,
            detail=f"Reserved {label} '{hit}' found",
        ))

    for char in illegal_characters_in(name):
        violations.append(Violation(
            kind=ILLEGAL_CHARACTER,
            detail=f"Illegal string '{char}' found",
            replacement=REPLACEMENT_CHARACTER,
        ))

    return violations


def is_auto_fixable(violations: list[Violation]) -> bool:
    """True when every violation has a safe automatic correction."""
    return bool(violations) and not any(v.kind in UNFIXABLE_KINDS for v in violations)


def is_legal(name: str) -> bool:
    return not detect_violations(name)
