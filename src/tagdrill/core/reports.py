"""Proficiency overview and wrong-answer book.

Read-only views over the proficiency mapping:
- overview: totals, average level, level distribution, per-category accuracy
- wrongbook: keys answered wrong at least once, ranked by severity
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Literal

from tagdrill.core.categories import Category
from tagdrill.core.proficiency import MAX_LEVEL, ProficiencyRecord, clamp_level, split_key
from tagdrill.core.record_merger import Dataset

Color = Literal["green", "yellow", "orange", "red", "blue"]

SEVERITY_RANK: dict[str, int] = {"red": 5, "orange": 4, "yellow": 3, "green": 2, "blue": 1}

# =============================================================================
# DATA CLASSES
# =============================================================================


@dataclass
class ProficiencyRow:
    key: str
    category: str
    tag: str
    correct: int
    wrong: int
    level: int

    @property
    def color(self) -> Color:
        return level_color(self.level)


@dataclass
class ProficiencyOverview:
    """Aggregates shown on the proficiency page."""

    rows: list[ProficiencyRow]
    total: int
    sum_correct: int
    sum_wrong: int
    avg_level: float
    distribution: list[int]
    category_accuracy: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "total": self.total,
            "sum_correct": self.sum_correct,
            "sum_wrong": self.sum_wrong,
            "avg_level": round(self.avg_level, 2),
            "distribution": self.distribution,
            "category_accuracy": self.category_accuracy,
        }


@dataclass
class WrongbookEntry:
    category: str
    tag: str
    name: str
    wrong: int
    severity: Color


# =============================================================================
# COLOR SCALES
# =============================================================================


def level_color(level: int) -> Color:
    """Dot color for a mastery level."""
    if level >= 4:
        return "green"
    if level == 3:
        return "yellow"
    if level == 2:
        return "orange"
    if level == 1:
        return "red"
    return "blue"


def severity(wrong: int) -> Color:
    """Severity bucket for a wrong-answer count."""
    if wrong >= 8:
        return "red"
    if wrong >= 5:
        return "orange"
    if wrong >= 3:
        return "yellow"
    if wrong >= 1:
        return "green"
    return "blue"


# =============================================================================
# VIEWS
# =============================================================================


def proficiency_overview(entries: dict[str, ProficiencyRecord]) -> ProficiencyOverview:
    """Summarize the proficiency mapping.

    Rows are sorted by level desc, correct desc, then key. Category accuracy
    is the rounded percentage of correct answers among all answers for each
    of the four categories (0 when nothing was answered).
    """
    rows = []
    for key, rec in entries.items():
        category, tag = split_key(key)
        rows.append(
            ProficiencyRow(
                key=key,
                category=category,
                tag=tag,
                correct=rec.correct,
                wrong=rec.wrong,
                level=clamp_level(rec.level),
            )
        )
    rows.sort(key=lambda r: (-r.level, -r.correct, r.key))

    total = len(rows)
    distribution = [0] * (MAX_LEVEL + 1)
    for r in rows:
        distribution[r.level] += 1

    tallies: dict[str, list[int]] = {}
    for r in rows:
        tally = tallies.setdefault(r.category, [0, 0])
        tally[0] += r.correct
        tally[1] += r.correct + r.wrong

    accuracy = {}
    for category in Category:
        correct, answered = tallies.get(category.value, [0, 0])
        # Half-up rounding
        accuracy[category.value] = math.floor(correct / answered * 100 + 0.5) if answered else 0

    return ProficiencyOverview(
        rows=rows,
        total=total,
        sum_correct=sum(r.correct for r in rows),
        sum_wrong=sum(r.wrong for r in rows),
        avg_level=sum(r.level for r in rows) / total if total else 0.0,
        distribution=distribution,
        category_accuracy=accuracy,
    )


def wrongbook(
    entries: dict[str, ProficiencyRecord], dataset: Dataset | None = None
) -> list[WrongbookEntry]:
    """Items answered wrong at least once, most troublesome first."""
    items = []
    for key, rec in entries.items():
        if rec.wrong <= 0:
            continue
        category, tag = split_key(key)
        name = ""
        if dataset is not None:
            try:
                record = dataset.lookup(Category(category), tag)
            except ValueError:
                record = None
            name = record.name if record else ""
        items.append(
            WrongbookEntry(
                category=category,
                tag=tag,
                name=name,
                wrong=rec.wrong,
                severity=severity(rec.wrong),
            )
        )

    items.sort(key=lambda e: (-SEVERITY_RANK[e.severity], -e.wrong, e.category, e.tag))
    return items
