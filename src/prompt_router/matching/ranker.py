"""Score and rank relevant plugin results.

One invocation uses exactly one scheme, chosen by its protocol version.

Current scheme (2.0)
    A plugin is relevant when ``matchCount > 0``.  Counts are capped at
    ``MAX_MATCH_COUNT`` so keyword stuffing gains nothing, then divided by
    the highest capped count among candidates; the top scorer is always
    1.0.  Ties keep their discovery order.

Legacy scheme (1.0)
    A plugin is relevant when ``relevant`` is true.  Candidates sort by
    priority tier, then relevance tier, most urgent and most confident
    first; ties keep their discovery order.  ``score`` is the tier pair
    folded into one number and normalised the same way, for display only.
"""
from __future__ import annotations

from collections.abc import Sequence

from pydantic import BaseModel

from prompt_router.discovery.records import PluginKind
from prompt_router.matching.executor import PluginOutcome
from prompt_router.matching.results import CurrentResult, LegacyResult, Priority, Relevance
from prompt_router.protocol import get_protocol

MAX_MATCH_COUNT: int = 10

PRIORITY_ORDER: dict[Priority, int] = {priority: rank for rank, priority in enumerate(Priority)}
RELEVANCE_ORDER: dict[Relevance, int] = {
    relevance: rank for rank, relevance in enumerate(Relevance)
}


class RankedItem(BaseModel):
    """A plugin that made it into the suggestion list.

    ``priority`` and ``relevance`` are only set under the legacy scheme.
    """

    name: str
    kind: PluginKind
    score: float
    priority: Priority | None = None
    relevance: Relevance | None = None

    model_config = {"frozen": True}


def capped_count(match_count: int) -> int:
    return min(match_count, MAX_MATCH_COUNT)


def _tier_value(result: LegacyResult) -> int:
    priority_weight = len(PRIORITY_ORDER) - PRIORITY_ORDER[result.priority]
    return priority_weight * len(RELEVANCE_ORDER) - RELEVANCE_ORDER[result.relevance]


def _rank_current(outcomes: Sequence[PluginOutcome]) -> list[RankedItem]:
    candidates: list[tuple[PluginOutcome, int]] = []
    for outcome in outcomes:
        result = outcome.result
        if isinstance(result, CurrentResult) and result.is_relevant:
            candidates.append((outcome, capped_count(result.match_count)))
    if not candidates:
        return []

    top = max(count for _, count in candidates)
    items = [
        RankedItem(
            name=outcome.record.name,
            kind=outcome.result.kind or outcome.record.kind,
            score=count / top,
        )
        for outcome, count in candidates
    ]
    # sorted() is stable: equal scores keep discovery order.
    return sorted(items, key=lambda item: -item.score)


def _rank_legacy(outcomes: Sequence[PluginOutcome]) -> list[RankedItem]:
    candidates = [
        (outcome, outcome.result)
        for outcome in outcomes
        if isinstance(outcome.result, LegacyResult) and outcome.result.is_relevant
    ]
    if not candidates:
        return []

    candidates.sort(
        key=lambda pair: (PRIORITY_ORDER[pair[1].priority], RELEVANCE_ORDER[pair[1].relevance])
    )
    top = max(_tier_value(result) for _, result in candidates)
    return [
        RankedItem(
            name=outcome.record.name,
            kind=result.kind or outcome.record.kind,
            score=_tier_value(result) / top,
            priority=result.priority,
            relevance=result.relevance,
        )
        for outcome, result in candidates
    ]


def rank(outcomes: Sequence[PluginOutcome], version: str) -> list[RankedItem]:
    """Return the relevant plugins among *outcomes*, best first.

    Failed outcomes and results of any other schema version are ignored.

    Raises
    ------
    UnsupportedProtocolError
        If *version* is unknown.
    """
    protocol = get_protocol(version)
    successful = [outcome for outcome in outcomes if outcome.ok]
    if protocol.is_legacy:
        return _rank_legacy(successful)
    return _rank_current(successful)
