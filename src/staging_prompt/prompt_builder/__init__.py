"""Prompt Builder Module — turns a room request into a staged-room prompt.

Picks one product per furniture type with the deterministic selector and
renders the prompt from the room's master row or the preset template.
"""

from .builder import PromptBuilder, pick_furniture_subset
from .models import PromptRequest, PromptResult, SelectedItem

__all__ = [
    "PromptBuilder",
    "pick_furniture_subset",
    "PromptRequest",
    "PromptResult",
    "SelectedItem",
]
