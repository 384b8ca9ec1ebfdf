"""Exception types raised outside the selection core.

The selector, scorer and template renderer never raise for expected
conditions (empty pools, missing style matches, unfillable lines); these
errors belong to the loading and prompt-assembly layers.
"""

from __future__ import annotations


class StagingPromptError(Exception):
    """Base class for all staging prompt errors."""


class CatalogFetchError(StagingPromptError):
    """A catalog or configuration sheet could not be fetched."""

    def __init__(self, url: str, status_code: int | None = None, message: str = "") -> None:
        self.url = url
        self.status_code = status_code
        detail = message or (
            f"Failed to fetch CSV ({status_code})" if status_code else "Failed to fetch CSV"
        )
        super().__init__(f"{detail}: {url}" if url else detail)


class SheetConfigError(StagingPromptError):
    """A configuration sheet is present but has no usable columns."""


class PromptBuildError(StagingPromptError):
    """A prompt could not be assembled for the request."""

    def __init__(self, message: str, details: dict | None = None) -> None:
        super().__init__(message)
        self.details = details or {}
