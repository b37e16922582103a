"""Answer/reference text normalization.

Responsibilities:
- Reduce free-text values to a comparison-friendly form
- Strip unit abbreviations, spaces and punctuation (full and half width)
- Fold range separators (`-`, `~` and their full-width forms) into `/`

Reference data is transcribed inconsistently (units present or not,
different dashes), so `10 kW`, `10kw` and `10` all compare equal.

IMPORTANT: Pure function, no I/O.
"""

from __future__ import annotations

# Removed in this order; earlier tokens win over later ones (kw before m)
NOISE_TOKENS = (
    " ",
    "kw",
    "rpm",
    "r/min",
    "m3/h",
    "m3h",
    "m3",
    "/h",
    "bar",
    "mpa",
    "m",
    "（",
    "）",
    "(",
    ")",
    "：",
    ":",
    "，",
    ",",
)

FULL_WIDTH_SEPARATORS = {
    "／": "/",
    "～": "~",
    "－": "-",
}

RANGE_SEPARATORS = ("~", "-")


def _strip_noise(text: str) -> str:
    for token in NOISE_TOKENS:
        text = text.replace(token, "")
    return text


def _fold_separators(text: str) -> str:
    for old, new in FULL_WIDTH_SEPARATORS.items():
        text = text.replace(old, new)
    for sep in RANGE_SEPARATORS:
        text = text.replace(sep, "/")
    return text


def _normalize_once(text: str) -> str:
    return _fold_separators(_strip_noise(text.strip()))


def normalize(raw: str | None) -> str:
    """Normalize an answer or reference value.

    Noise stripping runs before separator folding, so `10kw` becomes `10`
    before any slash folding happens. The pipeline is re-applied until the
    value is stable (stripping can expose new tokens, e.g. `kkww`).

    Args:
        raw: Value to normalize (None or empty allowed)

    Returns:
        Normalized string, empty for empty input
    """
    if not raw:
        return ""

    text = str(raw).lower()
    while True:
        normalized = _normalize_once(text)
        if normalized == text:
            return normalized
        text = normalized
