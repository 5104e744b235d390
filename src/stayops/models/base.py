"""Base class for records mirroring remote table rows."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


class Record(BaseModel):
    """A row decoded from the backend; unknown columns are ignored."""

    model_config = ConfigDict(extra="ignore")

    @classmethod
    def from_row(cls, row: dict[str, Any]):
        return cls.model_validate(row)

    @classmethod
    def from_rows(cls, rows: list[dict[str, Any]]) -> list:
        return [cls.model_validate(row) for row in rows]

    def to_row(self, *, exclude_none: bool = False) -> dict[str, Any]:
        """JSON-ready dict keyed by column name."""
        return self.model_dump(mode="json", exclude_none=exclude_none)
