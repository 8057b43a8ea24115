"""Multi-trigger coordinator: one session per trigger, fixed dispatch order."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
import logging

from .entities import DEFAULT_LANGUAGE, Entity
from .extraction import extract_all, strip_all
from .providers import EntityProvider
from .session import NOT_HANDLED, KeyOutcome, MentionSession, MentionView
from .triggers import DEFAULT_TRIGGERS, TriggerConfig, validate_triggers

LOGGER = logging.getLogger(__name__)

SelectionCallback = Callable[[str, Entity], None]


@dataclass(frozen=True)
class Submission:
    """Cleaned text plus the entities its mentions resolved to."""

    text: str
    entities: dict[str, list[Entity]] = field(default_factory=dict)

    def entity_ids(self) -> dict[str, list[str]]:
        return {name: [e.id for e in items] for name, items in self.entities.items()}


class MentionCoordinator:
    """Route buffer changes and key presses to the per-trigger sessions.

    Each session scans independently; since a buffer tail ends in at most one
    marker run, in practice only one is open at a time. Keys are offered in
    trigger order and the first open session that consumes one stops the chain.
    """

    def __init__(
        self,
        provider: EntityProvider,
        triggers: Sequence[TriggerConfig] = DEFAULT_TRIGGERS,
        *,
        lang: str = DEFAULT_LANGUAGE,
        on_select: SelectionCallback | None = None,
    ) -> None:
        self.triggers = validate_triggers(triggers)
        self.provider = provider
        self.lang = lang
        self._on_select = on_select
        self._buffer = ""
        self.sessions: dict[str, MentionSession] = {
            trigger.name: self._build_session(trigger) for trigger in self.triggers
        }

    def _build_session(self, trigger: TriggerConfig) -> MentionSession:
        def fetch() -> Sequence[Entity]:
            return self.provider.list_all(trigger.name)

        def selected(entity: Entity) -> None:
            if self._on_select is not None:
                self._on_select(trigger.name, entity)

        return MentionSession(trigger, fetch, lang=self.lang, on_select=selected)

    @property
    def buffer(self) -> str:
        return self._buffer

    @property
    def active_session(self) -> MentionSession | None:
        """First open session in trigger order, if any."""
        for session in self.sessions.values():
            if session.is_open:
                return session
        return None

    def buffer_changed(self, buffer: str, cursor: int | None = None) -> MentionSession | None:
        """Feed a new buffer version to every session."""
        self._buffer = buffer
        for session in self.sessions.values():
            session.buffer_changed(buffer, cursor)
        return self.active_session

    def handle_key(self, key: str) -> KeyOutcome:
        """Offer ``key`` to open sessions; unconsumed keys go back to the host."""
        for session in self.sessions.values():
            if not session.is_open:
                continue
            outcome = session.handle_key(key)
            if outcome.handled:
                if outcome.buffer is not None:
                    self.buffer_changed(outcome.buffer)
                return outcome
        return NOT_HANDLED

    def select(self, trigger_name: str, entity: Entity) -> str | None:
        """Commit ``entity`` for a trigger (popover click). Returns the new buffer."""
        new_buffer = self.sessions[trigger_name].select(entity, self._buffer)
        if new_buffer is not None:
            self.buffer_changed(new_buffer)
        return new_buffer

    def close(self, trigger_name: str | None = None) -> None:
        """Close one session, or all of them."""
        if trigger_name is not None:
            self.sessions[trigger_name].close()
            return
        for session in self.sessions.values():
            session.close()

    def views(self) -> dict[str, MentionView]:
        return {name: session.view() for name, session in self.sessions.items()}

    def refresh_entities(self) -> None:
        """Make open sessions re-read the provider."""
        for session in self.sessions.values():
            session.refresh_entities()

    def prepare_submission(self, buffer: str | None = None) -> Submission:
        """Extract then strip each trigger in order, threading the cleaned text.

        Each pass sees the output of the previous one, so an earlier trigger's
        mention text can never be read as a later trigger's mention.
        """
        text = self._buffer if buffer is None else buffer
        resolved: dict[str, list[Entity]] = {}
        for trigger in self.triggers:
            entities = [e for e in self.provider.list_all(trigger.name) if e.enabled]
            resolved[trigger.name] = extract_all(text, entities, trigger, self.lang)
            text = strip_all(text, trigger)
        LOGGER.info(
            "mention.submission.prepared",
            extra={
                "event": "mention.submission.prepared",
                "counts": {name: len(items) for name, items in resolved.items()},
            },
        )
        return Submission(text=text, entities=resolved)
