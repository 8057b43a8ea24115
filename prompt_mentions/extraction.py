"""Extraction and removal of completed mentions from a finalized buffer."""

from __future__ import annotations

from collections.abc import Sequence
import logging
import re

from .entities import DEFAULT_LANGUAGE, Entity, dedupe_by_id
from .triggers import TriggerConfig, at_word_boundary

LOGGER = logging.getLogger(__name__)

_WHITESPACE_RE = re.compile(r"\s+")


def resolve_mention(
    match: re.Match[str],
    entities: Sequence[Entity],
    config: TriggerConfig,
    lang: str = DEFAULT_LANGUAGE,
) -> Entity | None:
    """Map one completed-mention match to the first entity it names."""
    for form in config.completed_forms:
        captured = match.group(form.group)
        if captured is None:
            continue
        needle = captured.strip().lower()
        for entity in entities:
            if not entity.enabled:
                continue
            keys = {
                form.key(entity.display_name(lang)).lower(),
                entity.id.lower(),
                form.key(entity.id).lower(),
            }
            if needle in keys:
                return entity
        return None
    return None


def extract_all(
    buffer: str,
    entities: Sequence[Entity],
    config: TriggerConfig,
    lang: str = DEFAULT_LANGUAGE,
) -> list[Entity]:
    """Return every entity mentioned in ``buffer``, de-duplicated by id.

    Order follows first appearance, with mentions only exposed by an earlier
    removal (``/b`` in ``/a/b``) after those of the pass before. Mentions
    naming no known entity are skipped; they are ordinary prose such as a
    ``#hashtag``.
    """
    found: list[Entity] = []
    _, matches = _strip_to_fixed_point(buffer, config)
    for match in matches:
        entity = resolve_mention(match, entities, config, lang)
        if entity is None:
            LOGGER.debug(
                "mention.extract.unresolved",
                extra={
                    "event": "mention.extract.unresolved",
                    "trigger": config.name,
                    "text": match.group(0),
                },
            )
            continue
        found.append(entity)
    return dedupe_by_id(found)


def _strip_once(
    buffer: str, config: TriggerConfig
) -> tuple[str, list[re.Match[str]]]:
    """Remove one layer of mentions; return the cleaned text and the matches.

    A mention at start-of-text or after whitespace leaves a single space; one
    glued to a preceding word (``bob@example.com``) is removed outright.
    """
    matches: list[re.Match[str]] = []

    def replace(match: re.Match[str]) -> str:
        matches.append(match)
        return " " if at_word_boundary(buffer, match.start()) else ""

    stripped = config.completed_pattern.sub(replace, buffer)
    return _WHITESPACE_RE.sub(" ", stripped).strip(), matches


def _strip_to_fixed_point(
    buffer: str, config: TriggerConfig
) -> tuple[str, list[re.Match[str]]]:
    """Strip until nothing changes, collecting the matches of every pass.

    Taking out ``/a`` from ``/a/b`` leaves ``/b`` at the start of the text,
    which is itself a mention; it is both removed and reported.
    """
    current, matches = _strip_once(buffer, config)
    while True:
        following, more = _strip_once(current, config)
        if following == current:
            return current, matches
        matches.extend(more)
        current = following


def strip_all(buffer: str, config: TriggerConfig) -> str:
    """Remove every completed mention, then collapse and trim whitespace."""
    cleaned, _ = _strip_to_fixed_point(buffer, config)
    return cleaned


def strip_all_triggers(buffer: str, triggers: Sequence[TriggerConfig]) -> str:
    """Apply :func:`strip_all` for each trigger in order."""
    cleaned = buffer
    for config in triggers:
        cleaned = strip_all(cleaned, config)
    return cleaned
