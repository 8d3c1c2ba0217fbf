from __future__ import annotations

import math
from typing import Any, ClassVar, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

_MODEL_CONFIG = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    coerce_numbers_to_str=True,
)


def _to_number(v: Any) -> Optional[float]:
    # Unparsable or non-finite numbers become blank cells rather than rejections
    if v is None or isinstance(v, bool):
        return None
    if isinstance(v, str):
        v = v.strip()
        if not v:
            return None
    try:
        n = float(v)
    except (TypeError, ValueError):
        return None
    return n if math.isfinite(n) else None


class DetailEntry(BaseModel):
    """One row of a variable-length child collection."""

    model_config = _MODEL_CONFIG

    FIELDS: ClassVar[Tuple[str, ...]] = ()

    def cells(self) -> List[str]:
        return [(getattr(self, f) or "") for f in self.FIELDS]

    def is_blank(self) -> bool:
        return all(not str(v).strip() for v in self.cells())


class AggregateEntry(DetailEntry):
    FIELDS: ClassVar[Tuple[str, ...]] = ("name", "qty", "unit")

    name: Optional[str] = None
    qty: Optional[str] = None
    unit: Optional[str] = None
    # Sent by older forms; ordinals are always positional
    row_no: Optional[str] = None


class AdmixtureEntry(DetailEntry):
    FIELDS: ClassVar[Tuple[str, ...]] = ("name", "dosage")

    name: Optional[str] = None
    dosage: Optional[str] = None


class ScmEntry(DetailEntry):
    FIELDS: ClassVar[Tuple[str, ...]] = ("name", "percent")

    name: Optional[str] = None
    percent: Optional[str] = None


_NUMERIC_FIELDS = (
    "slump",
    "age_days",
    "cubes_count",
    "target_strength",
    "ratio_cement",
    "ratio_water",
    "cement_content",
    "water_content",
    "fine_agg",
    "coarse_agg",
    "wc_ratio",
)


class SubmissionPayload(BaseModel):
    model_config = _MODEL_CONFIG

    input_mode: str = ""

    student_name: Optional[str] = None
    matric_number: Optional[str] = None
    student_phone: Optional[str] = None
    programme: Optional[str] = None
    supervisor_name: Optional[str] = None
    thesis_title: Optional[str] = None
    crush_date: Optional[str] = None
    concrete_type: Optional[str] = None
    cement_type: Optional[str] = None
    notes: Optional[str] = None
    mix_ratio_string: Optional[str] = None

    slump: Optional[float] = None
    age_days: Optional[float] = None
    cubes_count: Optional[float] = None
    target_strength: Optional[float] = None

    # ratio mode
    ratio_cement: Optional[float] = None
    ratio_water: Optional[float] = None

    # kg/m3 mode
    cement_content: Optional[float] = None
    water_content: Optional[float] = None
    fine_agg: Optional[float] = None
    coarse_agg: Optional[float] = None
    wc_ratio: Optional[float] = None

    fine_aggregates: List[AggregateEntry] = Field(default_factory=list)
    coarse_aggregates: List[AggregateEntry] = Field(default_factory=list)
    admixtures: List[AdmixtureEntry] = Field(default_factory=list)
    scms: List[ScmEntry] = Field(default_factory=list)

    @field_validator(*_NUMERIC_FIELDS, mode="before")
    @classmethod
    def _numbers(cls, v: Any) -> Optional[float]:
        return _to_number(v)

    @field_validator("fine_aggregates", "coarse_aggregates", "admixtures", "scms", mode="before")
    @classmethod
    def _collections(cls, v: Any) -> Any:
        return v if isinstance(v, list) else []

    def collection(self, name: str) -> List[DetailEntry]:
        return list(getattr(self, name, None) or [])
