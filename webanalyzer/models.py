"""Data models for the analyzer form.

``AnalysisResult`` is the wire payload returned by the analyzer service; its
camelCase field names are part of the HTTP contract and are mapped to Python
attribute names through pydantic aliases.

``RequestState`` is the form's lifecycle phase, expressed as a union of small
frozen dataclasses so that only one phase (and its data) can be held at once.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from pydantic import BaseModel, ConfigDict, Field


class AnalysisResult(BaseModel):
    """Summary of one analysed webpage, as returned by ``POST /api/analyze``."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    html_version: str = Field(..., alias="htmlVersion")
    title: str
    headings: dict[str, int]
    has_login_form: bool = Field(..., alias="hasLoginForm")
    internal_links: int = Field(..., alias="internalLinks", ge=0)
    external_links: int = Field(..., alias="externalLinks", ge=0)
    accessible_external_links: int = Field(..., alias="accessibleExternalLinks", ge=0)
    broken_external_links: int = Field(..., alias="brokenExternalLinks", ge=0)

    def to_wire(self) -> dict:
        """Serialise back to the service's camelCase JSON shape."""
        return self.model_dump(by_alias=True)


# ---------------------------------------------------------------------------
# Request lifecycle
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Idle:
    """No request has been issued yet."""


@dataclass(frozen=True)
class Submitting:
    """A request is in flight."""


@dataclass(frozen=True)
class Succeeded:
    result: AnalysisResult


@dataclass(frozen=True)
class Failed:
    message: str


RequestState = Union[Idle, Submitting, Succeeded, Failed]


@dataclass(frozen=True)
class FormSnapshot:
    """Immutable copy of everything the renderer needs from a form."""

    url: str
    validation_error: str | None
    state: RequestState
