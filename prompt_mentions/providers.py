"""Entity providers: where candidate lists come from."""

from __future__ import annotations

import asyncio
from collections.abc import Iterable, Mapping, Sequence
import inspect
import logging
from pathlib import Path
import tomllib
from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .entities import Entity
from .exceptions import CatalogError

LOGGER = logging.getLogger(__name__)

# Catalog table name for each trigger name.
CATALOG_SECTIONS: dict[str, str] = {
    "agent": "agents",
    "methodology": "methodologies",
    "skill": "skills",
}


class EntityProvider(Protocol):
    """Supplies the full candidate list for a trigger."""

    def list_all(self, trigger_name: str) -> Sequence[Entity]: ...


class StaticEntityProvider:
    """In-memory provider backed by one list per trigger name."""

    def __init__(self, entities: Mapping[str, Iterable[Entity]] | None = None) -> None:
        self._entities: dict[str, list[Entity]] = {
            name: list(items) for name, items in (entities or {}).items()
        }

    def list_all(self, trigger_name: str) -> list[Entity]:
        return list(self._entities.get(trigger_name, []))

    def set_entities(self, trigger_name: str, entities: Iterable[Entity]) -> None:
        """Replace the list for one trigger."""
        self._entities[trigger_name] = list(entities)


class CatalogEntry(BaseModel):
    """One ``[[agents]]``/``[[methodologies]]``/``[[skills]]`` table."""

    model_config = ConfigDict(extra="allow")

    id: str
    name: str
    description: str = ""
    i18n: dict[str, str] = Field(default_factory=dict)
    enabled: bool = True
    category: str = ""

    @field_validator("id", "name", mode="before")
    @classmethod
    def _validate_required_string(cls, value: Any) -> str:
        if not isinstance(value, str):
            raise ValueError("Expected a string value.")
        normalized = value.strip()
        if not normalized:
            raise ValueError("String value must not be empty.")
        return normalized

    @field_validator("i18n", mode="before")
    @classmethod
    def _validate_i18n(cls, value: Any) -> dict[str, str]:
        if value is None:
            return {}
        if not isinstance(value, dict):
            raise ValueError("i18n must be a table of language -> name.")
        names: dict[str, str] = {}
        for lang, localized in value.items():
            if not isinstance(lang, str) or not lang.strip():
                raise ValueError("i18n keys must be non-empty language codes.")
            if not isinstance(localized, str):
                raise ValueError("i18n values must be strings.")
            if localized.strip():
                names[lang.strip()] = localized.strip()
        return names

    def to_entity(self, kind: str) -> Entity:
        return Entity(
            id=self.id,
            name=self.name,
            kind=kind,
            description=self.description,
            i18n=dict(self.i18n),
            enabled=self.enabled,
            category=self.category,
            metadata=dict(self.model_extra or {}),
        )


class CatalogProvider:
    """Provider reading a TOML catalog file once per :meth:`reload`."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path).expanduser()
        self._entities: dict[str, list[Entity]] | None = None

    def list_all(self, trigger_name: str) -> list[Entity]:
        if self._entities is None:
            self.reload()
        assert self._entities is not None
        return list(self._entities.get(trigger_name, []))

    def reload(self) -> None:
        """Re-read the catalog from disk."""
        self._entities = load_catalog(self.path)


def load_catalog(path: Path) -> dict[str, list[Entity]]:
    """Parse a TOML catalog into entity lists keyed by trigger name."""
    if not path.exists():
        LOGGER.warning(
            "catalog.missing",
            extra={"event": "catalog.missing", "path": str(path)},
        )
        return {name: [] for name in CATALOG_SECTIONS}
    try:
        raw = tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError) as exc:
        raise CatalogError(f"Unable to read catalog {path}: {exc}") from exc

    entities: dict[str, list[Entity]] = {}
    for trigger_name, section in CATALOG_SECTIONS.items():
        rows = raw.get(section, [])
        if not isinstance(rows, list):
            raise CatalogError(f"Catalog section [{section}] must be an array of tables.")
        items: list[Entity] = []
        for position, row in enumerate(rows):
            try:
                entry = CatalogEntry.model_validate(row)
            except ValidationError as exc:
                raise CatalogError(
                    f"Invalid entry #{position} in [{section}] of {path}: {exc}"
                ) from exc
            items.append(entry.to_entity(trigger_name))
        entities[trigger_name] = items
    LOGGER.info(
        "catalog.loaded",
        extra={
            "event": "catalog.loaded",
            "path": str(path),
            "counts": {name: len(items) for name, items in entities.items()},
        },
    )
    return entities


async def load_snapshot(
    provider: Any, trigger_names: Iterable[str]
) -> StaticEntityProvider:
    """Fetch every trigger's list once, awaiting providers that are async.

    Synchronous providers (such as :class:`CatalogProvider`, which reads from
    disk) run in a worker thread so the event loop is never blocked.
    """
    snapshot = StaticEntityProvider()
    fetch = provider.list_all
    for name in trigger_names:
        if inspect.iscoroutinefunction(fetch):
            result = await fetch(name)
        else:
            result = await asyncio.to_thread(fetch, name)
        if inspect.isawaitable(result):
            result = await result
        snapshot.set_entities(name, result)
    return snapshot
