# Template Engine Module
# Line-conditional preset templates and Jinja2 master-row prompts

from .composer import MASTER_SECTIONS, PromptComposer
from .renderer import TemplateRenderer, render_template

__all__ = [
    "MASTER_SECTIONS",
    "PromptComposer",
    "TemplateRenderer",
    "render_template",
]
