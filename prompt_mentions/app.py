"""Minimal Textual application hosting the mention-aware prompt input."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import VerticalScroll
from textual.widgets import Footer, Header, Static

from .config import enabled_triggers, load_config
from .coordinator import MentionCoordinator, Submission
from .exceptions import CatalogError
from .logging_utils import configure_logging
from .providers import CatalogProvider, EntityProvider, StaticEntityProvider, load_snapshot
from .widgets.mention_input import MentionInputBox

LOGGER = logging.getLogger(__name__)


def format_submission(submission: Submission, lang: str) -> str:
    """Render a submission as one line of text plus resolved names."""
    parts = [submission.text or "(empty)"]
    for trigger, entities in submission.entities.items():
        if entities:
            names = ", ".join(entity.display_name(lang) for entity in entities)
            parts.append(f"{trigger}: {names}")
    return "  |  ".join(parts)


class MentionPromptApp(App[None]):
    """Echo submitted prompts together with the entities they mention."""

    TITLE = "prompt-mentions"

    CSS = """
    #submissions {
        height: 1fr;
        padding: 0 1;
    }

    .submission {
        margin: 1 0 0 0;
    }
    """

    BINDINGS = [Binding("ctrl+q", "quit", "Quit")]

    def __init__(
        self,
        provider: EntityProvider | None = None,
        config: dict[str, Any] | None = None,
    ) -> None:
        self.config = config or load_config()
        configure_logging(self.config["logging"])
        self.lang = str(self.config["mentions"]["language"])
        self._source: Any = provider or CatalogProvider(
            Path(str(self.config["catalog"]["path"]))
        )
        self.coordinator = MentionCoordinator(
            StaticEntityProvider(),
            enabled_triggers(self.config),
            lang=self.lang,
        )
        super().__init__()

    def compose(self) -> ComposeResult:
        yield Header()
        yield VerticalScroll(id="submissions")
        yield MentionInputBox(self.coordinator, id="mention_box")
        yield Footer()

    async def on_mount(self) -> None:
        await self.reload_entities()
        self.query_one("#mention_input").focus()

    async def reload_entities(self) -> None:
        """Take a fresh snapshot of every trigger's candidate list."""
        names = [trigger.name for trigger in self.coordinator.triggers]
        try:
            self.coordinator.provider = await load_snapshot(self._source, names)
        except CatalogError as exc:
            LOGGER.warning(
                "app.catalog.unavailable",
                extra={"event": "app.catalog.unavailable", "reason": str(exc)},
            )
            self.sub_title = "Catalog unavailable; no mention candidates."
            return
        self.coordinator.refresh_entities()
        self.sub_title = "Ready"

    async def on_mention_input_box_submitted(
        self, event: MentionInputBox.Submitted
    ) -> None:
        log = self.query_one("#submissions", VerticalScroll)
        await log.mount(
            Static(
                format_submission(event.submission, self.lang),
                classes="submission",
                markup=False,
            )
        )
        log.scroll_end(animate=False)

    def on_mention_input_box_mention_selected(
        self, event: MentionInputBox.MentionSelected
    ) -> None:
        self.sub_title = f"Mentioned {event.entity.display_name(self.lang)}"
