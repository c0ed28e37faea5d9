"""Plugin result schemas.

Two incompatible result shapes exist, told apart by their ``version``
literal.  ``PluginResult`` is the closed union of both; validation and
scoring dispatch on the concrete type, never on which keys happen to be
present.

Classes
-------
- Priority       — legacy urgency tier
- Relevance      — legacy confidence tier
- LegacyResult   — ``{"version": "1.0", relevant, priority, relevance, kind?}``
- CurrentResult  — ``{"version": "2.0", matchCount, kind?}``
"""
from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field

from prompt_router.discovery.records import PluginKind


class Priority(str, Enum):
    """How urgently a legacy plugin should be invoked (most urgent first)."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Relevance(str, Enum):
    """How confident a legacy plugin is that it applies (most confident first)."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class LegacyResult(BaseModel):
    """Result declared by a protocol 1.0 matcher."""

    version: Literal["1.0"] = "1.0"
    relevant: bool
    priority: Priority
    relevance: Relevance
    kind: PluginKind | None = None

    model_config = {"frozen": True}

    @property
    def is_relevant(self) -> bool:
        return self.relevant


class CurrentResult(BaseModel):
    """Result declared by a protocol 2.0 matcher.

    ``match_count`` travels as ``matchCount`` on the wire.
    """

    version: Literal["2.0"] = "2.0"
    match_count: int = Field(alias="matchCount", ge=0)
    kind: PluginKind | None = None

    model_config = {"frozen": True, "populate_by_name": True}

    @property
    def is_relevant(self) -> bool:
        return self.match_count > 0


PluginResult = Annotated[Union[LegacyResult, CurrentResult], Field(discriminator="version")]
