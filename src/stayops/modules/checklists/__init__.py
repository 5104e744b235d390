from stayops.modules.checklists.checklists import (
    AUTH_FAILED_MESSAGE,
    ChecklistManager,
    checked_out_checklists,
    properties_with_pending,
)
from stayops.modules.checklists.form import ChecklistForm
from stayops.modules.checklists.templates import TEMPLATES, template_for, template_items

__all__ = [
    "AUTH_FAILED_MESSAGE",
    "ChecklistForm",
    "ChecklistManager",
    "TEMPLATES",
    "checked_out_checklists",
    "properties_with_pending",
    "template_for",
    "template_items",
]
