"""Input validation helpers.

Functions:
- resolve_category(text) -> Category | str: Resolve a category name, English
  alias or unique prefix to a Category, or to "混合" for the mixed selection
- parse_limit(text) -> int: Parse the item-count field (blank = all)
"""

from tagdrill.core.categories import MIXED, Category

ALIASES: dict[str, Category | str] = {
    "equipment": Category.EQUIPMENT,
    "valve": Category.VALVE,
    "valves": Category.VALVE,
    "performance": Category.PERFORMANCE,
    "standard": Category.STANDARD,
    "mixed": MIXED,
}


class AmbiguousCategoryError(Exception):
    """Raised when a category prefix matches several categories."""

    def __init__(self, prefix: str, candidates: list[str]):
        self.prefix = prefix
        self.candidates = candidates
        super().__init__(
            f"类别 '{prefix}' 不明确，候选：\n"
            + "\n".join(f"  - {c}" for c in candidates)
        )


class CategoryNotFoundError(Exception):
    """Raised when no category matches the given text."""

    def __init__(self, prefix: str):
        self.prefix = prefix
        super().__init__(f"未找到类别 '{prefix}'")


def available_categories() -> list[str]:
    """Display names accepted by the quiz, mixed last."""
    return [c.value for c in Category] + [MIXED]


def resolve_category(text: str) -> Category | str:
    """Resolve user input to a category.

    Args:
        text: Display name (设备), English alias (valve) or a unique prefix
            of either

    Returns:
        The Category, or MIXED for the combined selection

    Raises:
        CategoryNotFoundError: If nothing matches
        AmbiguousCategoryError: If a prefix matches several categories
    """
    value = text.strip()
    lowered = value.lower()

    # Exact match first
    for name in available_categories():
        if value == name:
            return MIXED if name == MIXED else Category(name)
    if lowered in ALIASES:
        return ALIASES[lowered]

    if not value:
        raise CategoryNotFoundError(text)

    # Prefix match
    matches: dict[str, Category | str] = {}
    for name in available_categories():
        if name.startswith(value):
            matches[name] = MIXED if name == MIXED else Category(name)
    for alias, target in ALIASES.items():
        if alias.startswith(lowered):
            label = target.value if isinstance(target, Category) else target
            matches[label] = target

    if len(matches) == 0:
        raise CategoryNotFoundError(text)
    if len(matches) == 1:
        return next(iter(matches.values()))
    raise AmbiguousCategoryError(text, sorted(matches))


def parse_limit(text: str | int | None) -> int:
    """Parse an item limit. Blank, non-numeric or non-positive means all (0)."""
    if text is None:
        return 0
    if isinstance(text, int):
        return max(0, text)
    try:
        value = int(str(text).strip())
    except ValueError:
        return 0
    return max(0, value)
