"""Tag canonicalization.

Reduces a raw equipment/valve tag to the base key that indexes records, so
that variants of the same physical item (`P101A`, `P101B`, `p101 `) collapse
into a single quiz entry.
"""

from __future__ import annotations

import re

# Leading "letters then digits" prefix, e.g. FI101 in FI101A
TAG_BASE_RE = re.compile(r"^([A-Z]+\d+)")
_WS_RE = re.compile(r"\s+")


def clean_tag(raw: str | None) -> str:
    """Trim, uppercase, drop whitespace and map `^` to `/`."""
    if not raw:
        return ""
    text = str(raw).strip().upper()
    text = _WS_RE.sub("", text)
    return text.replace("^", "/")


def canonicalize(raw: str | None) -> str:
    """Canonical key for a tag.

    Args:
        raw: Tag as found in the source table (may be None or empty)

    Returns:
        The letters-then-digits prefix when present, otherwise the cleaned
        tag. Empty string means "no tag" and the row must be discarded.
    """
    cleaned = clean_tag(raw)
    match = TAG_BASE_RE.match(cleaned)
    if match:
        return match.group(1)
    return cleaned
