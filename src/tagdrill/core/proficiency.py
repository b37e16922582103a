"""Proficiency tracking module.

Responsibilities:
- Keep a bounded mastery level (0..5) per (category, tag)
- Count correct and wrong answers per key
- Persist the whole mapping through an injected store

State persistence:
- data/state/<namespace>.json, one mapping keyed by "<category>|<tag>"
  to {"correct", "wrong", "level"}; rewritten on every grading event
"""

from __future__ import annotations

import json
import sys
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol

import structlog

logger = structlog.get_logger(__name__)

# =============================================================================
# CONSTANTS
# =============================================================================

DEFAULT_NAMESPACE = "web-proficiency"
MIN_LEVEL = 0
MAX_LEVEL = 5
KEY_SEPARATOR = "|"

# =============================================================================
# DATA CLASSES
# =============================================================================


@dataclass
class ProficiencyRecord:
    """Mastery state of one (category, tag) pair."""

    correct: int = 0
    wrong: int = 0
    level: int = 0

    @classmethod
    def from_dict(cls, data: Any) -> ProficiencyRecord:
        """Build from stored data, tolerating junk values.

        Counts fall back to 0 and the level is clamped to [0, 5].
        """
        if not isinstance(data, dict):
            return cls()
        return cls(
            correct=max(0, _as_int(data.get("correct"))),
            wrong=max(0, _as_int(data.get("wrong"))),
            level=clamp_level(_as_int(data.get("level"))),
        )

    def to_dict(self) -> dict[str, int]:
        """Convert to dictionary for JSON serialization."""
        return {"correct": self.correct, "wrong": self.wrong, "level": self.level}


def _as_int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0
    except OverflowError:
        # +/-Infinity survives json.load; saturate so clamping still applies
        return sys.maxsize if value > 0 else -sys.maxsize


def clamp_level(level: int) -> int:
    return min(MAX_LEVEL, max(MIN_LEVEL, level))


def make_key(category: str, tag: str) -> str:
    """Storage key for a (category, tag) pair."""
    return f"{category}{KEY_SEPARATOR}{tag}"


def split_key(key: str) -> tuple[str, str]:
    """Inverse of make_key. Tags may themselves contain the separator."""
    category, _, tag = key.partition(KEY_SEPARATOR)
    return category, tag


# =============================================================================
# STORES
# =============================================================================


class ProficiencyStore(Protocol):
    """Key-value backend holding the serialized proficiency mapping."""

    def load(self) -> dict[str, Any]: ...

    def save(self, data: dict[str, Any]) -> None: ...


class MemoryStore:
    """In-memory store, used by tests and throwaway sessions."""

    def __init__(self, data: dict[str, Any] | None = None):
        self._data: dict[str, Any] = json.loads(json.dumps(data or {}))

    def load(self) -> dict[str, Any]:
        return json.loads(json.dumps(self._data))

    def save(self, data: dict[str, Any]) -> None:
        self._data = json.loads(json.dumps(data))


class JsonFileStore:
    """File-backed store under a fixed namespace.

    A missing file is an empty mapping. A corrupt file is logged and read
    as an empty mapping instead of failing.
    """

    def __init__(self, state_dir: Path | None = None, namespace: str = DEFAULT_NAMESPACE):
        if state_dir is None:
            state_dir = Path("data") / "state"
        self.state_dir = state_dir
        self.namespace = namespace

    @property
    def path(self) -> Path:
        return self.state_dir / f"{self.namespace}.json"

    def load(self) -> dict[str, Any]:
        if not self.path.exists():
            logger.debug("proficiency_state_not_found", path=str(self.path))
            return {}

        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError, UnicodeDecodeError) as e:
            logger.error("proficiency_state_load_failed", path=str(self.path), error=str(e))
            return {}

        if not isinstance(data, dict):
            logger.warning("proficiency_state_invalid", path=str(self.path), got=type(data).__name__)
            return {}
        return data

    def save(self, data: dict[str, Any]) -> None:
        self.state_dir.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)


# =============================================================================
# TRACKER
# =============================================================================


class ProficiencyTracker:
    """Leaky-bucket mastery heuristic over (category, tag) pairs.

    A correct answer raises the level by one (capped at 5), a wrong answer
    lowers it by one (floored at 0). Records are created lazily and never
    deleted by grading.

    Every `record` call reloads, updates and rewrites the whole mapping
    under a lock, so rapid calls from several threads never lose updates.
    """

    def __init__(self, store: ProficiencyStore):
        self.store = store
        self._lock = threading.Lock()
        self._data: dict[str, Any] = store.load()

    def get(self, category: str, tag: str) -> ProficiencyRecord:
        """Stored record for a key, or a zero-valued default."""
        with self._lock:
            return ProficiencyRecord.from_dict(self._data.get(make_key(category, tag)))

    def record(self, category: str, tag: str, outcome: bool) -> ProficiencyRecord:
        """Apply one grading outcome and persist the mapping.

        Args:
            category: Category display name
            tag: Record key (canonical tag or control tag)
            outcome: True for a correct answer

        Returns:
            The updated record
        """
        key = make_key(category, tag)
        with self._lock:
            data = self.store.load()
            rec = ProficiencyRecord.from_dict(data.get(key))
            if outcome:
                rec.correct += 1
                rec.level = clamp_level(rec.level + 1)
            else:
                rec.wrong += 1
                rec.level = clamp_level(rec.level - 1)

            data[key] = rec.to_dict()
            self.store.save(data)
            self._data = data

        logger.debug(
            "proficiency_recorded",
            key=key,
            outcome=outcome,
            level=rec.level,
        )
        return rec

    def entries(self) -> dict[str, ProficiencyRecord]:
        """Every stored key with its (clamped) record."""
        with self._lock:
            return {k: ProficiencyRecord.from_dict(v) for k, v in self._data.items()}

    def reset(self) -> int:
        """Drop every stored record. Returns how many were removed."""
        with self._lock:
            removed = len(self._data)
            self._data = {}
            self.store.save({})
        logger.info("proficiency_reset", removed=removed)
        return removed
