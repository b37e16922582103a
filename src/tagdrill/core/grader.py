"""Grading module.

Responsibilities:
- Compare a learner answer to a reference value (`is_correct`)
- Grade every quizzed field of an item with the field's policy
- Handle the flashcard shortcut (`1` = I knew it, `2` = I didn't)

Policies:
- strict (name, floor): exact match, or the answer contains the whole
  reference (trailing noise such as a variant suffix is tolerated)
- loose (numeric/spec fields): exact match or substring either way

IMPORTANT: Pure module, no I/O. Verdicts are deterministic for given inputs.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

from tagdrill.core.categories import is_strict_field
from tagdrill.core.text_normalizer import normalize

# =============================================================================
# TYPES
# =============================================================================

GradingPath = Literal["fields", "shortcut"]

SHORTCUT_CORRECT = "1"
SHORTCUT_WRONG = "2"

# =============================================================================
# DATA CLASSES
# =============================================================================


@dataclass
class FieldGrade:
    """Grade for a single field of an item."""

    field_name: str
    is_correct: bool
    expected_answer: str
    given_answer: str
    strict: bool

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "field": self.field_name,
            "is_correct": self.is_correct,
            "expected_answer": self.expected_answer,
            "given_answer": self.given_answer,
            "strict": self.strict,
        }


@dataclass
class ItemGrade:
    """Verdict for one quiz item."""

    is_correct: bool
    grading_path: GradingPath = "fields"
    results: list[FieldGrade] = field(default_factory=list)

    @property
    def failed_fields(self) -> list[str]:
        return [r.field_name for r in self.results if not r.is_correct]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "is_correct": self.is_correct,
            "grading_path": self.grading_path,
            "results": [r.to_dict() for r in self.results],
        }


# =============================================================================
# GRADING FUNCTIONS
# =============================================================================


def is_correct(user: str | None, truth: str | None, strict: bool = False) -> bool:
    """Grade a single answer against its reference value.

    Args:
        user: Learner's raw answer
        truth: Reference value from the dataset
        strict: Use the strict policy (name/floor fields)

    Returns:
        True when the answer is accepted. An empty reference always passes.
    """
    v = normalize(truth)
    if not v:
        return True

    u = normalize(user)
    if u == v:
        return True
    if not u:
        return False

    if strict:
        # The answer must cover the whole reference; fragments never pass
        return v in u and len(u) >= len(v)
    return u in v or v in u


def parse_shortcut(answers: dict[str, str]) -> bool | None:
    """Detect the self-report shortcut in the name field.

    Returns:
        True for `1`, False for `2`, None for any other answer.
    """
    primary = (answers.get("name") or "").strip()
    if primary == SHORTCUT_CORRECT:
        return True
    if primary == SHORTCUT_WRONG:
        return False
    return None


def grade_fields(truth: dict[str, str], answers: dict[str, str]) -> ItemGrade:
    """Grade every field of the truth mapping.

    Name and floor are graded strictly, the rest loosely. Fields missing
    from `answers` count as empty answers.
    """
    results: list[FieldGrade] = []
    for field_name, expected in truth.items():
        strict = is_strict_field(field_name)
        given = answers.get(field_name) or ""
        results.append(
            FieldGrade(
                field_name=field_name,
                is_correct=is_correct(given, expected, strict=strict),
                expected_answer=expected,
                given_answer=given,
                strict=strict,
            )
        )

    return ItemGrade(
        is_correct=all(r.is_correct for r in results),
        grading_path="fields",
        results=results,
    )


def grade_item(truth: dict[str, str], answers: dict[str, str]) -> ItemGrade:
    """Grade an item, honouring the `1`/`2` shortcut before field grading.

    A learner whose genuine name answer is the digit `1` or `2` cannot
    submit it normally; the shortcut always takes precedence.
    """
    shortcut = parse_shortcut(answers)
    if shortcut is not None:
        return ItemGrade(is_correct=shortcut, grading_path="shortcut")
    return grade_fields(truth, answers)
