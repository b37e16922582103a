"""Quiz session controller.

Responsibilities:
- Build the item list for a category (or all of them, "mixed")
- Sample a fixed fraction of each category in exam mode
- Grade submissions and feed outcomes to the proficiency tracker
- Advance the cursor after a short, cancellable display pause

States: Idle -> Running -> Idle. A session ends when the cursor passes
the last item; there is no explicit terminal state.
"""

from __future__ import annotations

import functools
import math
import random
import threading
from dataclasses import dataclass
from typing import Any, Callable

import structlog

from tagdrill.core.categories import MIXED, Category, build_truth, fields_for
from tagdrill.core.grader import ItemGrade, grade_item
from tagdrill.core.proficiency import ProficiencyRecord, ProficiencyTracker
from tagdrill.core.record_merger import Dataset

logger = structlog.get_logger(__name__)

# =============================================================================
# CONSTANTS
# =============================================================================

EXAM_RATIO = 0.33
DEFAULT_PAUSE_SECONDS = 0.6

MSG_NO_ITEMS = "请先导入 CSV 数据"
MSG_NO_TRUTH = "数据缺失"
MSG_NOT_RUNNING = "练习未开始"

# =============================================================================
# DATA CLASSES
# =============================================================================


@dataclass(frozen=True)
class QuizItem:
    """A (category, tag) pair to be quizzed."""

    category: Category
    tag: str

    def to_dict(self) -> dict[str, str]:
        return {"category": self.category.value, "tag": self.tag}


@dataclass
class SessionStartResult:
    """Result of starting a session."""

    success: bool
    total: int
    message: str


@dataclass
class SubmitResult:
    """Result of submitting answers for the current item."""

    success: bool
    item: QuizItem | None
    message: str
    truth: dict[str, str] | None = None
    grade: ItemGrade | None = None
    proficiency: ProficiencyRecord | None = None

    @property
    def is_correct(self) -> bool | None:
        return self.grade.is_correct if self.grade else None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "success": self.success,
            "item": self.item.to_dict() if self.item else None,
            "message": self.message,
            "truth": self.truth,
            "grade": self.grade.to_dict() if self.grade else None,
            "proficiency": self.proficiency.to_dict() if self.proficiency else None,
        }


class QuizSessionError(Exception):
    """Error in quiz session usage."""

    pass


# =============================================================================
# SAMPLING
# =============================================================================


def sample_by_ratio(
    items: list[QuizItem], ratio: float, rng: random.Random | None = None
) -> list[QuizItem]:
    """Uniform sample of ceil(len * ratio) items, at least one.

    Sampling is without replacement via a shuffle of a copy. An empty input
    yields an empty sample.
    """
    rng = rng or random.Random()
    k = max(1, math.ceil(len(items) * ratio))
    shuffled = list(items)
    rng.shuffle(shuffled)
    return shuffled[:k]


def _resolve_categories(category: Category | str) -> list[Category]:
    if isinstance(category, Category):
        return [category]
    if category == MIXED:
        return list(Category)
    try:
        return [Category(category)]
    except ValueError as e:
        raise QuizSessionError(f"未知类别：{category}") from e


def build_items(
    dataset: Dataset,
    category: Category | str,
    exam_mode: bool = False,
    ratio: float = EXAM_RATIO,
    rng: random.Random | None = None,
) -> list[QuizItem]:
    """Candidate items for a category (or every category for "mixed")."""
    rng = rng or random.Random()
    items: list[QuizItem] = []
    for cat in _resolve_categories(category):
        cat_items = [QuizItem(cat, tag) for tag in dataset.keys(cat)]
        if exam_mode:
            items.extend(sample_by_ratio(cat_items, ratio, rng))
        else:
            items.extend(cat_items)
    return items


# =============================================================================
# SESSION
# =============================================================================


class QuizSession:
    """One learner's run through a shuffled list of items.

    The dataset is handed in already merged; the session never loads data.
    After each submission the cursor advances once `pause_seconds` have
    elapsed. A new submission before that cancels the pending advance and
    schedules its own, so the cursor never moves twice for one item.
    """

    def __init__(
        self,
        dataset: Dataset,
        tracker: ProficiencyTracker,
        pause_seconds: float = DEFAULT_PAUSE_SECONDS,
        exam_ratio: float = EXAM_RATIO,
        rng: random.Random | None = None,
        timer_factory: Callable[[float, Callable[[], None]], threading.Timer] = threading.Timer,
    ):
        self.dataset = dataset
        self.tracker = tracker
        self.pause_seconds = pause_seconds
        self.exam_ratio = exam_ratio
        self.rng = rng or random.Random()
        self._timer_factory = timer_factory

        self.items: list[QuizItem] = []
        self.cursor = 0
        self.correct_count = 0
        self._lock = threading.RLock()
        self._pending: threading.Timer | None = None
        self._pending_outcome: bool | None = None
        self._generation = 0

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def is_running(self) -> bool:
        with self._lock:
            return self.cursor < len(self.items)

    @property
    def total(self) -> int:
        return len(self.items)

    @property
    def has_pending_advance(self) -> bool:
        with self._lock:
            return self._pending is not None

    def current_item(self) -> QuizItem | None:
        """Item under the cursor, or None when idle."""
        with self._lock:
            if self.cursor < len(self.items):
                return self.items[self.cursor]
            return None

    def current_fields(self) -> list[str]:
        """Fields to ask for the current item (empty without ground truth)."""
        item = self.current_item()
        if item is None:
            return []
        return fields_for(item.category, self.dataset.lookup(item.category, item.tag))

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    def start(
        self,
        category: Category | str,
        item_limit: int = 0,
        exam_mode: bool = False,
    ) -> SessionStartResult:
        """Start a new session.

        Args:
            category: Category, its display name, or "混合" for all
            item_limit: Keep at most this many items (0 or less = all)
            exam_mode: Sample a fixed fraction of each category

        Returns:
            SessionStartResult; failure when there are no items

        Raises:
            QuizSessionError: If the category is not a known display name
        """
        items = build_items(
            self.dataset, category, exam_mode=exam_mode, ratio=self.exam_ratio, rng=self.rng
        )
        if not items:
            logger.warning("session_no_items", category=str(category), exam_mode=exam_mode)
            return SessionStartResult(success=False, total=0, message=MSG_NO_ITEMS)

        self.rng.shuffle(items)
        if item_limit and item_limit > 0:
            items = items[:item_limit]

        with self._lock:
            self._cancel_pending()
            self.items = items
            self.cursor = 0
            self.correct_count = 0

        logger.info(
            "session_started",
            category=str(getattr(category, "value", category)),
            exam_mode=exam_mode,
            total=len(items),
        )
        return SessionStartResult(success=True, total=len(items), message=f"共 {len(items)} 题")

    def submit(self, answers: dict[str, str]) -> SubmitResult:
        """Grade the current item and schedule the advance.

        A name answer of `1` or `2` self-reports correct/wrong and skips
        per-field grading. When the item has no ground truth nothing is
        graded or recorded and the cursor stays put.

        Args:
            answers: Field name -> raw learner answer

        Returns:
            SubmitResult with the verdict, the revealed truth and the
            updated proficiency record
        """
        # Held until the advance is scheduled; a timer firing meanwhile waits
        with self._lock:
            item = self.current_item()
            if item is None:
                return SubmitResult(success=False, item=None, message=MSG_NOT_RUNNING)

            truth = build_truth(item.category, self.dataset.lookup(item.category, item.tag))
            if truth is None:
                logger.warning("ground_truth_missing", category=item.category.value, tag=item.tag)
                return SubmitResult(success=False, item=item, message=MSG_NO_TRUTH)

            grade = grade_item(truth, answers)
            proficiency = self.tracker.record(item.category.value, item.tag, grade.is_correct)
            self._schedule_advance(grade.is_correct)

        return SubmitResult(
            success=True,
            item=item,
            message="正确" if grade.is_correct else "错误",
            truth=truth,
            grade=grade,
            proficiency=proficiency,
        )

    def skip(self) -> None:
        """Move past the current item without scoring it."""
        with self._lock:
            if self.cursor >= len(self.items):
                return
            self._cancel_pending()
            self._advance(False)

    def advance_now(self) -> None:
        """Apply a pending advance immediately (no-op without one)."""
        with self._lock:
            if self._pending is None:
                return
            outcome = self._pending_outcome
            self._cancel_pending()
            self._advance(bool(outcome))

    def wait(self, timeout: float | None = None) -> None:
        """Block until the pending advance (if any) has fired."""
        timer = self._pending
        if timer is not None:
            timer.join(timeout)

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _schedule_advance(self, outcome: bool) -> None:
        with self._lock:
            self._cancel_pending()
            if self.pause_seconds <= 0:
                self._advance(outcome)
                return

            self._generation += 1
            timer = self._timer_factory(
                self.pause_seconds, functools.partial(self._on_timer, self._generation)
            )
            timer.daemon = True
            self._pending = timer
            self._pending_outcome = outcome
            timer.start()

    def _on_timer(self, generation: int) -> None:
        with self._lock:
            # Superseded by a later submission or already applied
            if generation != self._generation or self._pending is None:
                return
            outcome = self._pending_outcome
            self._pending = None
            self._pending_outcome = None
            self._advance(bool(outcome))

    def _cancel_pending(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
        self._generation += 1
        self._pending = None
        self._pending_outcome = None

    def _advance(self, outcome: bool) -> None:
        if outcome:
            self.correct_count += 1
        self.cursor += 1
        if self.cursor >= len(self.items):
            logger.info(
                "session_finished",
                total=len(self.items),
                correct=self.correct_count,
            )
