from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class LogicalTable(str, Enum):
    MASTER_RECORD = "master_record"
    FINE_AGGREGATE = "fine_aggregate"
    COARSE_AGGREGATE = "coarse_aggregate"
    ADMIXTURE = "admixture"
    SCM = "scm"


class TableSpec(BaseModel):
    logical: LogicalTable
    # Priority-ordered. The first alias is the canonical name used when creating the table.
    aliases: List[str]
    header: List[str] = Field(default_factory=list)

    # Detail tables only: payload collection attribute feeding this table
    collection: Optional[str] = None

    @property
    def canonical(self) -> str:
        return self.aliases[0]


class ModeConfig(BaseModel):
    name: str
    label: str
    prefix: str
    spellings: List[str] = Field(default_factory=list)

    master: TableSpec

    # Payload attributes written after the identifier and timestamp, in column order
    master_fields: List[str]
    required_fields: List[str] = Field(default_factory=list)
    # Applied when the payload value is missing or zero
    defaults: Dict[str, Any] = Field(default_factory=dict)

    def accepts(self, raw: str) -> bool:
        s = (raw or "").strip().lower()
        return s == self.name or s in self.spellings
