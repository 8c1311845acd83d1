"""
lists/models.py -- Domain dataclass for todo lists.

Pure data container with zero logic. Persistence lives in lists/store.py and
name validation lives in the route layer.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class TodoList:
    """A named todo list.

    id is None before the record is written to the database. Timestamps are
    ISO 8601 UTC strings set by the store.
    """

    name: str
    id: int | None = None
    created_at: str = ""
    updated_at: str = ""


class ListNotFoundError(LookupError):
    """Raised by ListStore when no list has the requested id."""

    def __init__(self, list_id: int) -> None:
        super().__init__(f"list {list_id} not found")
        self.list_id = list_id
