"""Staging prompt engine.

Selects furniture products for a staged-room image prompt and renders the
prompt text from sheet-driven templates.
"""

__version__ = "0.1.0"
