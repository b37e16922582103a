"""Quiz categories and their field schemas.

Each category (equipment, valve, performance spec, process standard) carries
its own schema: which CSV column keys the record, which optional fields exist,
how they are labelled, and which fields are graded strictly.

`fields_for` and `build_truth` are the single dispatch points used by the
session controller and the CLI.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

# =============================================================================
# CATEGORY VARIANT
# =============================================================================


class Category(str, Enum):
    """Tagged variant over the four reference tables.

    Values are the display names used in the source data and in the
    persisted proficiency keys.
    """

    EQUIPMENT = "设备"
    VALVE = "阀门"
    PERFORMANCE = "性能参数"
    STANDARD = "工艺指标"


MIXED = "混合"

# Strictly graded fields (complete recall); everything else is graded loosely
STRICT_FIELDS = frozenset({"name", "floor"})


@dataclass(frozen=True)
class CategorySchema:
    """Column layout and labels for one category."""

    category: Category
    key_column: str
    fields: tuple[str, ...]
    labels: dict[str, str] = field(default_factory=dict)
    canonical_key: bool = True

    @property
    def optional_fields(self) -> tuple[str, ...]:
        """Fields other than name (and other than the key column)."""
        return tuple(f for f in self.fields if f not in ("name", self.key_column))

    def label(self, field_name: str) -> str:
        return self.labels.get(field_name, field_name)


PERFORMANCE_LABELS = {
    "name": "名称",
    "medium": "介质",
    "power_kw": "功率(kW)",
    "head_m": "扬程(m)",
    "flow_m3h": "流量(m3/h)",
    "speed_rpm": "转速(rpm)",
    "pressure_bar": "压力(bar)",
    "diameter_m": "直径(m)",
    "length_m": "长度(m)",
    "volume_m3": "容积(m3)",
    "rated_current_a": "额定电流(A)",
}

STANDARD_LABELS = {
    "name": "设备名称及控制项目",
    "tag": "设备位号",
    "control_tag": "项目控制位号",
    "unit": "单位",
    "standard": "控制指标",
}

SCHEMAS: dict[Category, CategorySchema] = {
    Category.EQUIPMENT: CategorySchema(
        category=Category.EQUIPMENT,
        key_column="tag",
        fields=("name",),
        labels={"name": "名称"},
    ),
    Category.VALVE: CategorySchema(
        category=Category.VALVE,
        key_column="tag",
        fields=("name", "floor"),
        labels={"name": "名称", "floor": "楼层"},
    ),
    Category.PERFORMANCE: CategorySchema(
        category=Category.PERFORMANCE,
        key_column="tag",
        fields=tuple(PERFORMANCE_LABELS),
        labels=PERFORMANCE_LABELS,
    ),
    Category.STANDARD: CategorySchema(
        category=Category.STANDARD,
        key_column="control_tag",
        fields=("name", "tag", "control_tag", "unit", "standard"),
        labels=STANDARD_LABELS,
        canonical_key=False,
    ),
}

# =============================================================================
# RECORDS
# =============================================================================


@dataclass
class Record:
    """Reconciled ground truth for one key of one category.

    `values` only holds non-empty optional fields; a missing key means the
    source data had no value for it.
    """

    category: Category
    key: str
    name: str
    values: dict[str, str] = field(default_factory=dict)

    def get(self, field_name: str) -> str | None:
        """Get a field value, `name` included. None when absent."""
        if field_name == "name":
            return self.name
        return self.values.get(field_name)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "category": self.category.value,
            "key": self.key,
            "name": self.name,
            **self.values,
        }


def get_schema(category: Category) -> CategorySchema:
    return SCHEMAS[category]


def fields_for(category: Category, record: Record | None) -> list[str]:
    """Fields to quiz for a record, in schema order.

    Name is always included; optional fields only when the record has a
    value for them.
    """
    if record is None:
        return []
    schema = SCHEMAS[category]
    return [f for f in schema.fields if record.get(f)]


def build_truth(category: Category, record: Record | None) -> dict[str, str] | None:
    """Build the field -> reference value mapping for grading.

    Returns None when there is no record (missing ground truth).
    """
    if record is None:
        return None
    return {f: record.get(f) or "" for f in fields_for(category, record)}


def is_strict_field(field_name: str) -> bool:
    return field_name in STRICT_FIELDS
