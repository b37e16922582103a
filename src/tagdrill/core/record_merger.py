"""Record merge module.

Responsibilities:
- Parse the reference tables (naive comma split, header row first)
- Build one reconciled Record per key for each category
- Load the four tables of a data directory into a Dataset

Merge policies:
- Equipment/Valve: first valid row per canonical tag wins
- PerformanceSpec: rows for the same canonical tag are combined field by
  field; genuinely different readings are joined with `/` in file order
- ProcessStandard: keyed by the trimmed control tag, last row wins

Rows with an empty key or an empty name are dropped.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

import structlog

from tagdrill.core.categories import Category, Record, get_schema
from tagdrill.core.tag_canonicalizer import canonicalize
from tagdrill.core.text_normalizer import normalize

logger = structlog.get_logger(__name__)

Row = dict[str, str]

DEFAULT_TABLES: dict[Category, str] = {
    Category.EQUIPMENT: "equipment.csv",
    Category.VALVE: "valves.csv",
    Category.PERFORMANCE: "performance.csv",
    Category.STANDARD: "standard.csv",
}

# =============================================================================
# DATA CLASSES
# =============================================================================


@dataclass
class MergeStats:
    """Counters collected while merging one table."""

    rows_read: int = 0
    rows_dropped: int = 0
    rows_merged: int = 0
    records: int = 0


@dataclass
class Dataset:
    """Merged ground truth for all categories."""

    records: dict[Category, dict[str, Record]] = field(
        default_factory=lambda: {c: {} for c in Category}
    )
    stats: dict[Category, MergeStats] = field(default_factory=dict)

    def lookup(self, category: Category, key: str) -> Record | None:
        return self.records.get(category, {}).get(key)

    def keys(self, category: Category) -> list[str]:
        """Record keys of a category, in first-seen order."""
        return list(self.records.get(category, {}))

    def counts(self) -> dict[Category, int]:
        return {c: len(self.records.get(c, {})) for c in Category}

    @property
    def is_empty(self) -> bool:
        return not any(self.records.get(c) for c in Category)


class DatasetLoadError(Exception):
    """Raised when a required table cannot be read."""

    pass


# =============================================================================
# PARSING
# =============================================================================


def parse_table(text: str) -> list[Row]:
    """Parse comma-delimited text into rows keyed by header.

    Naive split on commas: quoted fields with embedded commas are NOT
    supported. Blank lines are skipped and missing trailing columns become
    empty strings.

    Args:
        text: Whole table, header row first

    Returns:
        List of column -> trimmed value mappings
    """
    text = text.lstrip("\ufeff")
    lines = [line for line in text.replace("\r\n", "\n").replace("\r", "\n").split("\n") if line.strip()]
    if not lines:
        return []

    headers = [h.strip() for h in lines[0].split(",")]
    rows: list[Row] = []
    for line in lines[1:]:
        cols = line.split(",")
        rows.append(
            {h: (cols[i] if i < len(cols) else "").strip() for i, h in enumerate(headers)}
        )
    return rows


def read_table(path: Path) -> list[Row]:
    """Read and parse a UTF-8 table file."""
    return parse_table(path.read_text(encoding="utf-8"))


# =============================================================================
# MERGING
# =============================================================================


def _optional_values(row: Row, fields: Iterable[str]) -> dict[str, str]:
    """Non-empty optional values of a row."""
    values = {}
    for f in fields:
        value = (row.get(f) or "").strip()
        if value:
            values[f] = value
    return values


def _merge_values(existing: dict[str, str], incoming: dict[str, str]) -> None:
    """Fold a new performance row into an existing record's values.

    Absent fields are adopted; differing readings are concatenated as
    `existing/new`; readings already subsumed are left alone.
    """
    for f, new_value in incoming.items():
        old_value = existing.get(f)
        if not old_value:
            existing[f] = new_value
        elif normalize(new_value) not in normalize(old_value):
            existing[f] = f"{old_value}/{new_value}"


def merge_rows(category: Category, rows: Iterable[Row]) -> dict[str, Record]:
    """Build key -> Record for one category.

    Rows are processed in input order; concatenated performance readings keep
    first-seen order. The result is therefore order dependent and not
    commutative.

    Args:
        category: Category the rows belong to
        rows: Parsed table rows

    Returns:
        Mapping from record key (canonical tag or control tag) to Record
    """
    records, _ = _merge_with_stats(category, rows)
    return records


def _merge_with_stats(
    category: Category, rows: Iterable[Row]
) -> tuple[dict[str, Record], MergeStats]:
    schema = get_schema(category)
    records: dict[str, Record] = {}
    stats = MergeStats()

    for row in rows:
        stats.rows_read += 1

        raw_key = row.get(schema.key_column) or ""
        key = canonicalize(raw_key) if schema.canonical_key else raw_key.strip()
        name = (row.get("name") or "").strip()
        if not key or not name:
            stats.rows_dropped += 1
            logger.debug("row_dropped", category=category.value, key=key, has_name=bool(name))
            continue

        values = _optional_values(row, schema.optional_fields)
        if category == Category.STANDARD:
            values["control_tag"] = key

        existing = records.get(key)
        if existing is None:
            records[key] = Record(category=category, key=key, name=name, values=values)
            continue

        if category == Category.PERFORMANCE:
            _merge_values(existing.values, values)
            stats.rows_merged += 1
        elif category == Category.STANDARD:
            records[key] = Record(category=category, key=key, name=name, values=values)
        else:
            logger.debug("duplicate_row_ignored", category=category.value, key=key)

    stats.records = len(records)
    return records, stats


# =============================================================================
# MAIN FUNCTION
# =============================================================================


def load_dataset(
    data_dir: Path | None = None,
    tables: dict[Category, str] | None = None,
    strict: bool = False,
) -> Dataset:
    """Load and merge every reference table of a data directory.

    Missing or unreadable tables degrade to an empty category unless
    `strict` is set.

    Args:
        data_dir: Directory holding the CSV files (defaults to 'data')
        tables: Category -> file name overrides
        strict: Raise DatasetLoadError instead of skipping a table

    Returns:
        Dataset with one mapping per category

    Raises:
        DatasetLoadError: If strict and a table is missing or unreadable
    """
    if data_dir is None:
        data_dir = Path("data")
    table_names = {**DEFAULT_TABLES, **(tables or {})}

    dataset = Dataset()
    for category in Category:
        path = data_dir / table_names[category]
        try:
            rows = read_table(path)
        except (OSError, UnicodeDecodeError) as e:
            if strict:
                raise DatasetLoadError(f"无法读取数据表 {path}: {e}") from e
            logger.warning("table_not_loaded", category=category.value, path=str(path), error=str(e))
            continue

        records, stats = _merge_with_stats(category, rows)
        dataset.records[category] = records
        dataset.stats[category] = stats

        if stats.rows_dropped:
            logger.warning(
                "rows_dropped",
                category=category.value,
                dropped=stats.rows_dropped,
                read=stats.rows_read,
            )

    logger.info(
        "dataset_loaded",
        data_dir=str(data_dir),
        **{c.name.lower(): n for c, n in dataset.counts().items()},
    )
    return dataset
