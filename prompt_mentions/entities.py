"""Entity records offered as mention candidates."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

DEFAULT_LANGUAGE = "en"


@dataclass(frozen=True)
class Entity:
    """An agent, methodology or skill that a mention can resolve to.

    ``name`` is the canonical display name; ``i18n`` maps language codes to
    localized names. The engine never mutates entities.
    """

    id: str
    name: str
    kind: str = ""
    description: str = ""
    i18n: Mapping[str, str] = field(default_factory=dict)
    enabled: bool = True
    category: str = ""
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def display_name(self, lang: str = DEFAULT_LANGUAGE) -> str:
        """Return the localized name, falling back to the canonical one."""
        localized = self.i18n.get(lang)
        if isinstance(localized, str) and localized.strip():
            return localized
        return self.name


def dedupe_by_id(entities: list[Entity]) -> list[Entity]:
    """Drop repeated ids while keeping first-seen order."""
    seen: set[str] = set()
    unique: list[Entity] = []
    for entity in entities:
        if entity.id in seen:
            continue
        seen.add(entity.id)
        unique.append(entity)
    return unique
