"""Object history (change log) support for Jamf Pro API resources."""
from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, Field

from .. import validate

HISTORY_PATH = "history"


class ChangeLogEntry(BaseModel):
    id: Optional[int] = None
    username: Optional[str] = None
    date: Optional[datetime] = None
    note: Optional[str] = None
    details: Optional[str] = None


class ChangeLogPage(BaseModel):
    total_count: int = Field(default=0, alias="totalCount")
    results: List[ChangeLogEntry] = Field(default_factory=list)


class ChangeLog:
    """Reads and appends to the history of one resource.

    Resources with ``CHANGE_LOG = True`` hold one of these; it is a plain
    collaborator rather than a mixin.
    """

    def __init__(self, rsrc_path: str, cnx: Any):
        self.rsrc_path = rsrc_path.rstrip("/")
        self.cnx = cnx
        self._cached: Optional[List[ChangeLogEntry]] = None

    @property
    def history_path(self) -> str:
        return f"{self.rsrc_path}/{HISTORY_PATH}"

    def entries(self, refresh: bool = False) -> List[ChangeLogEntry]:
        if self._cached is None or refresh:
            raw = self.cnx.get(self.history_path) or {}
            self._cached = ChangeLogPage.model_validate(raw).results
        return list(self._cached)

    def add_note(self, note: str) -> None:
        note = validate.non_empty_string(note, "Change log notes must be non-empty strings")
        self.cnx.post(self.history_path, {"note": note})
        self._cached = None
