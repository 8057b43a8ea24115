"""Per-trigger mention session: open/closed state, query, and selection."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum
import logging

from .entities import DEFAULT_LANGUAGE, Entity
from .filtering import filter_candidates
from .scanner import INACTIVE, ScanResult, scan
from .triggers import TriggerConfig

LOGGER = logging.getLogger(__name__)

EntitySource = Callable[[], Sequence[Entity]]

# Browser-style names are accepted alongside terminal key names.
_KEY_ALIASES = {
    "arrowdown": "down",
    "arrowup": "up",
    "esc": "escape",
    "return": "enter",
}


def normalize_key(key: str) -> str:
    """Lower-case a key name and fold common aliases."""
    lowered = key.strip().lower()
    return _KEY_ALIASES.get(lowered, lowered)


class SessionState(str, Enum):
    """Finite state machine for one trigger's popover."""

    CLOSED = "CLOSED"
    OPEN = "OPEN"


@dataclass(frozen=True)
class KeyOutcome:
    """Result of offering a key press to a session.

    ``buffer`` carries the replacement text when the key committed a mention.
    """

    handled: bool
    buffer: str | None = None
    selected: Entity | None = None
    trigger: str = ""


NOT_HANDLED = KeyOutcome(handled=False)


@dataclass(frozen=True)
class MentionView:
    """What a presentation layer needs to draw one popover."""

    trigger: str
    is_open: bool
    query: str
    candidates: tuple[Entity, ...]
    selected_index: int


class MentionSession:
    """Track the in-progress mention for a single trigger.

    The session never edits the host buffer; committing returns a new buffer
    that the host installs. Every buffer version must be fed through
    :meth:`buffer_changed` in edit order.
    """

    def __init__(
        self,
        config: TriggerConfig,
        entities: EntitySource,
        *,
        lang: str = DEFAULT_LANGUAGE,
        on_select: Callable[[Entity], None] | None = None,
    ) -> None:
        self.config = config
        self.lang = lang
        self._fetch = entities
        self._on_select = on_select
        self._state = SessionState.CLOSED
        self._buffer = ""
        self._scan: ScanResult = INACTIVE
        self._snapshot: list[Entity] | None = None
        self._candidates: list[Entity] = []
        self._selected_index = 0

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_open(self) -> bool:
        return self._state == SessionState.OPEN

    @property
    def query(self) -> str:
        return self._scan.query if self.is_open else ""

    @property
    def start_offset(self) -> int:
        return self._scan.start_offset if self.is_open else -1

    @property
    def selected_index(self) -> int:
        return self._selected_index

    @property
    def candidates(self) -> list[Entity]:
        return list(self._candidates)

    @property
    def buffer(self) -> str:
        return self._buffer

    def view(self) -> MentionView:
        return MentionView(
            trigger=self.config.name,
            is_open=self.is_open,
            query=self.query,
            candidates=tuple(self._candidates),
            selected_index=self._selected_index,
        )

    # ── Buffer tracking ──

    def buffer_changed(self, buffer: str, cursor: int | None = None) -> bool:
        """Re-scan ``buffer`` and update state. Returns True when open."""
        self._buffer = buffer
        result = scan(buffer, self.config, cursor)
        if not result.active:
            self._close("context_lost")
            return False

        was_open = self.is_open
        previous_query = self._scan.query
        self._scan = result
        if not was_open:
            self._snapshot = None
            self._state = SessionState.OPEN
            LOGGER.debug(
                "mention.session.opened",
                extra={
                    "event": "mention.session.opened",
                    "trigger": self.config.name,
                    "start_offset": result.start_offset,
                },
            )
        self._candidates = filter_candidates(
            self._entities(), result.query, self.lang, self.config.matches
        )
        if not was_open or result.query != previous_query:
            self._selected_index = 0
        else:
            self._selected_index = min(
                self._selected_index, max(len(self._candidates) - 1, 0)
            )
        return True

    def refresh_entities(self) -> None:
        """Drop the held snapshot and re-filter against a fresh one."""
        self._snapshot = None
        if self.is_open:
            self._candidates = filter_candidates(
                self._entities(), self._scan.query, self.lang, self.config.matches
            )
            self._selected_index = min(
                self._selected_index, max(len(self._candidates) - 1, 0)
            )

    def _entities(self) -> list[Entity]:
        if self._snapshot is None:
            self._snapshot = [entity for entity in self._fetch() if entity.enabled]
        return self._snapshot

    # ── Navigation ──

    def navigate(self, delta: int) -> None:
        """Move the highlight by ``delta``, wrapping at both ends."""
        if not self.is_open or not self._candidates:
            return
        self._selected_index = (self._selected_index + delta) % len(self._candidates)

    def handle_key(self, key: str) -> KeyOutcome:
        """Apply a key press. Unconsumed keys fall through to the host."""
        if not self.is_open:
            return NOT_HANDLED
        name = normalize_key(key)
        if name == "down":
            self.navigate(1)
            return KeyOutcome(handled=True)
        if name == "up":
            self.navigate(-1)
            return KeyOutcome(handled=True)
        if name in ("tab", "enter"):
            if not 0 <= self._selected_index < len(self._candidates):
                return NOT_HANDLED
            entity = self._candidates[self._selected_index]
            new_buffer = self.select(entity)
            if new_buffer is None:
                return NOT_HANDLED
            return KeyOutcome(
                handled=True, buffer=new_buffer, selected=entity, trigger=self.config.name
            )
        if name == "escape":
            self._close("cancelled")
            return KeyOutcome(handled=True)
        return NOT_HANDLED

    # ── Commit and close ──

    def select(self, entity: Entity, buffer: str | None = None) -> str | None:
        """Replace the in-progress mention with ``entity`` and close.

        Passing a newer ``buffer`` re-scans it first; stale offsets are never
        reused. Returns None when there is no in-progress mention, or when no
        insertion of ``entity`` would resolve back (the session stays open).
        """
        if buffer is not None and buffer != self._buffer:
            self.buffer_changed(buffer)
        if not self.is_open:
            return None
        inserted = self.config.insertion_for(entity, self.lang)
        if inserted is None:
            LOGGER.warning(
                "mention.session.unresolvable",
                extra={
                    "event": "mention.session.unresolvable",
                    "trigger": self.config.name,
                    "entity_id": entity.id,
                },
            )
            return None
        result = self._scan
        before = self._buffer[: result.start_offset]
        after = self._buffer[result.end_offset :]
        new_buffer = f"{before}{inserted} {after}"
        LOGGER.debug(
            "mention.session.committed",
            extra={
                "event": "mention.session.committed",
                "trigger": self.config.name,
                "entity_id": entity.id,
            },
        )
        self._close("committed")
        if self._on_select is not None:
            self._on_select(entity)
        return new_buffer

    def close(self) -> None:
        """Close without touching the buffer (e.g. click outside the popover)."""
        self._close("dismissed")

    def _close(self, reason: str) -> None:
        if self._state == SessionState.OPEN:
            LOGGER.debug(
                "mention.session.closed",
                extra={
                    "event": "mention.session.closed",
                    "trigger": self.config.name,
                    "reason": reason,
                },
            )
        self._state = SessionState.CLOSED
        self._scan = INACTIVE
        self._snapshot = None
        self._candidates = []
        self._selected_index = 0
