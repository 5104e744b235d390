"""Editable checkbox state for one checklist."""

from __future__ import annotations

from typing import Any

from stayops.models.checklist import Checklist, ChecklistType
from stayops.modules.checklists.templates import template_items


class ChecklistForm:
    def __init__(self, checklist_type: ChecklistType | str | None, stored: dict[str, Any] | None = None) -> None:
        self.checklist_type = ChecklistType(checklist_type) if checklist_type else None
        self.items: dict[str, bool] = {}
        self._initial: dict[str, bool] = {}
        self.load(stored)

    @classmethod
    def for_checklist(cls, checklist: Checklist) -> ChecklistForm:
        return cls(checklist.checklist_type, checklist.items)

    def load(self, stored: dict[str, Any] | None = None) -> None:
        """Reset to the template, overlaid with any stored boolean values."""
        items = {name: False for name in template_items(self.checklist_type)}
        for name, value in (stored or {}).items():
            # Stored maps may carry non-boolean metadata alongside the ticks
            if isinstance(value, bool):
                items[name] = value
        self.items = items
        self._initial = dict(items)

    def toggle(self, name: str) -> bool:
        self.items[name] = not self.items.get(name, False)
        return self.items[name]

    def set_all(self, value: bool) -> None:
        self.items = {name: value for name in self.items}

    @property
    def all_selected(self) -> bool:
        return bool(self.items) and all(self.items.values())

    @property
    def has_unsaved_changes(self) -> bool:
        return self.items != self._initial

    @property
    def checked_items(self) -> list[str]:
        return sorted(name for name, checked in self.items.items() if checked)

    def clear(self) -> None:
        self.set_all(False)
        self._initial = dict(self.items)
