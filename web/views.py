"""
web/views.py -- View models handed to the Jinja2 templates.

Card wraps a TodoList with the URLs and DOM ids its template needs, so the
templates never build paths by string concatenation.
"""

from __future__ import annotations

from dataclasses import dataclass

from lists.models import TodoList


@dataclass
class Card:
    todo_list: TodoList
    editing_name: bool = False

    @property
    def list_url(self) -> str:
        """Target of PATCH (rename) and DELETE."""
        return f"/app/lists/{self.todo_list.id}"

    @property
    def edit_url(self) -> str:
        return f"/app/lists/{self.todo_list.id}/edit"

    @property
    def dom_id(self) -> str:
        return f"card-{self.todo_list.id}"

    @property
    def selector(self) -> str:
        return f"#{self.dom_id}"
