"""
Podnorm Output Records
======================

The record is the unit handed to a sink: a target table plus columns and
values that line up by position, ready for a bulk insert.
"""

import json
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, model_validator


class Table(str, Enum):
    """Destination tables of the podcast index loader."""
    NEWSFEEDS = "newsfeeds"
    NFITEMS = "nfitems"
    NFGUIDS = "nfguids"
    PUBSUB = "pubsub"
    NFFUNDING = "nffunding"
    NFCATEGORIES = "nfcategories"
    NFITEM_TRANSCRIPTS = "nfitem_transcripts"
    NFITEM_CHAPTERS = "nfitem_chapters"
    NFITEM_SOUNDBITES = "nfitem_soundbites"
    NFITEM_PERSONS = "nfitem_persons"
    NFITEM_VALUE = "nfitem_value"
    NFVALUE = "nfvalue"


class Record(BaseModel):
    """One row destined for one table."""
    table: str = Field(..., description="Destination table name")
    columns: List[str] = Field(..., description="Column names, aligned with values")
    values: List[Any] = Field(..., description="JSON-typed column values")
    feed_id: Optional[int] = Field(default=None, description="Feed the row belongs to")

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def check_alignment(self):
        """Columns and values must pair up one to one."""
        if len(self.columns) != len(self.values):
            raise ValueError(
                f"{self.table}: {len(self.columns)} columns but {len(self.values)} values"
            )
        return self

    @classmethod
    def from_pairs(
        cls, table: Table, pairs: List[tuple], feed_id: Optional[int] = None
    ) -> "Record":
        return cls(
            table=table.value,
            columns=[name for name, _ in pairs],
            values=[value for _, value in pairs],
            feed_id=feed_id,
        )

    def get(self, column: str, default: Any = None) -> Any:
        """Value of a column by name."""
        try:
            return self.values[self.columns.index(column)]
        except ValueError:
            return default

    def as_row(self) -> Dict[str, Any]:
        return dict(zip(self.columns, self.values))

    def to_json(self, indent: Optional[int] = None) -> str:
        return json.dumps(
            {
                "table": self.table,
                "columns": self.columns,
                "values": self.values,
                "feed_id": self.feed_id,
            },
            ensure_ascii=False,
            indent=indent,
        )

    def __str__(self) -> str:
        return f"Record({self.table}, feed_id={self.feed_id})"
