# ===========================================================
# feedback/sections.py
# ===========================================================
"""
Section label normalization and matching.

Decides whether a student's section makes them eligible for a feedback
form's target sections. Stored labels are not guaranteed canonical
("2B", "2b", "B", "02B" all show up), so matching works on a set of
equivalent variants instead of exact string equality.

Nothing here touches the database; every function is pure.
"""

import math
import re

from django.conf import settings

DEFAULT_YEAR_PREFIXES = ("1", "2", "3", "4")

_LEADING_DIGITS = re.compile(r"^[0-9]+")
_CANONICAL_SECTION = re.compile(r"^(\d)([A-D])$", re.IGNORECASE)
_BARE_LETTER = re.compile(r"^[A-D]$", re.IGNORECASE)


def normalize_section(value):
    """Coerce to str, trim and uppercase. ``None`` becomes ``""``."""
    if value is None:
        return ""
    return str(value).strip().upper()


def _strip_zeros(value):
    stripped = value.lstrip("0")
    return stripped or value


def configured_year_prefixes():
    return tuple(
        str(p) for p in getattr(settings, "FEEDBACK_SECTION_YEAR_PREFIXES", DEFAULT_YEAR_PREFIXES)
    )


def section_variants(value, year_prefixes=None):
    """
    Build the variant set for one section label.

    "B"   -> {"B", "1B", "2B", "3B", "4B"} (plus lowercase forms)
    "02B" -> {"02B", "2B", "B"}            (plus lowercase forms)
    """
    normalized = normalize_section(value)
    if not normalized:
        return set()

    if year_prefixes is None:
        year_prefixes = configured_year_prefixes()

    variants = {normalized}
    if not normalized[0].isdigit():
        variants.update(f"{prefix}{normalized}" for prefix in year_prefixes)
    else:
        without_zeros = normalized.lstrip("0")
        if without_zeros:
            variants.add(without_zeros)
        suffix = _LEADING_DIGITS.sub("", normalized)
        if suffix:
            variants.add(suffix)

    for variant in list(variants):
        variants.add(variant.upper())
        variants.add(variant.lower())
    return variants


def _target_set(target_sections):
    targets = set()
    for raw in target_sections:
        normalized = normalize_section(raw)
        if not normalized:
            continue
        targets.add(normalized)
        targets.add(_strip_zeros(normalized))
    return targets


class SectionMatcher:
    """
    Stateless matcher bound to a fixed set of legacy year prefixes.

    Safe to share between threads: it holds nothing but an immutable tuple.
    """

    def __init__(self, year_prefixes=None):
        if year_prefixes is None:
            year_prefixes = configured_year_prefixes()
        self.year_prefixes = tuple(str(p) for p in year_prefixes)

    def variants(self, student_section):
        return section_variants(student_section, self.year_prefixes)

    def matches(self, student_section, target_sections):
        """Return True if the student section is one of the target sections."""
        if not target_sections:
            return False
        variants = self.variants(student_section)
        if not variants:
            return False
        return not variants.isdisjoint(_target_set(target_sections))

    def __repr__(self):
        return f"SectionMatcher(year_prefixes={self.year_prefixes!r})"


def matches(student_section, target_sections):
    """Module-level shortcut using the configured year prefixes."""
    return SectionMatcher().matches(student_section, target_sections)


# ===========================================================
# Canonical form helpers (used by imports and data fixes)
# ===========================================================
def parse_section(value):
    """
    Strictly parse a canonical label like "2b" into ``(2, "B")``.
    Returns None for anything else.
    """
    match = _CANONICAL_SECTION.match(normalize_section(value))
    if not match:
        return None
    return int(match.group(1)), match.group(2).upper()


def year_to_semester(year):
    """First semester of a study year (year 2 -> semester 3)."""
    return (int(year) - 1) * 2 + 1


def canonical_student_section(section, semester=None):
    """
    Rewrite a stored student section into ``{year}{LETTER}`` form.

    A bare letter gets its year from the semester (1-2 -> 1, 3-4 -> 2, ...);
    anything else is only trimmed and uppercased.
    """
    normalized = normalize_section(section)
    if _BARE_LETTER.match(normalized):
        year = math.ceil((semester or 1) / 2)
        return f"{year}{normalized}"
    return normalized
