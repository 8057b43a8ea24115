"""Candidate filtering for the in-progress query."""

from __future__ import annotations

from collections.abc import Sequence

from .entities import DEFAULT_LANGUAGE, Entity
from .triggers import CandidatePredicate, match_name_or_id


def filter_candidates(
    entities: Sequence[Entity],
    query: str,
    lang: str = DEFAULT_LANGUAGE,
    matches: CandidatePredicate = match_name_or_id,
) -> list[Entity]:
    """Return entities matching ``query``, preserving provider order.

    An empty query returns every entity unchanged.
    """
    if not query:
        return list(entities)
    return [entity for entity in entities if matches(entity, query, lang)]
