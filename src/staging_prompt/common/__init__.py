"""
Shared components used across the engine:
- Project configuration
- Logging configuration
- Error types
"""

from .config import PROJECT_ROOT, Settings, settings
from .errors import (
    CatalogFetchError,
    PromptBuildError,
    SheetConfigError,
    StagingPromptError,
)
from .logging import setup_logging

__all__ = [
    "PROJECT_ROOT",
    "Settings",
    "settings",
    "CatalogFetchError",
    "PromptBuildError",
    "SheetConfigError",
    "StagingPromptError",
    "setup_logging",
]
