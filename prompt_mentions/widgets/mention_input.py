"""Input row wiring a Textual Input to the mention coordinator."""

from __future__ import annotations

from textual import events
from textual.app import ComposeResult
from textual.containers import Vertical
from textual.css.query import NoMatches
from textual.message import Message
from textual.widgets import Input, OptionList

from ..coordinator import MentionCoordinator, Submission
from ..entities import Entity


class MentionInput(Input):
    """Input that offers navigation keys to the coordinator first.

    Up/Down/Tab/Enter/Escape reach the coordinator before the input's own
    bindings; keys it does not consume (e.g. Enter with nothing to commit)
    keep their normal meaning.
    """

    class MentionKeyHandled(Message):
        """Posted after the coordinator consumed a key."""

        def __init__(
            self, buffer: str | None, selected: Entity | None, trigger: str
        ) -> None:
            self.buffer = buffer
            self.selected = selected
            self.trigger = trigger
            super().__init__()

    def __init__(self, coordinator: MentionCoordinator, **kwargs) -> None:
        super().__init__(**kwargs)
        self.coordinator = coordinator

    async def _on_key(self, event: events.Key) -> None:
        if self.coordinator.active_session is not None:
            outcome = self.coordinator.handle_key(event.key)
            if outcome.handled:
                event.stop()
                event.prevent_default()
                if outcome.buffer is not None:
                    self.value = outcome.buffer
                    self.cursor_position = len(self.value)
                self.post_message(
                    self.MentionKeyHandled(outcome.buffer, outcome.selected, outcome.trigger)
                )
                return
        await super()._on_key(event)


class MentionInputBox(Vertical):
    """Prompt input with a candidate list for the open mention session."""

    DEFAULT_CSS = """
    MentionInputBox {
        height: auto;
    }

    MentionInputBox #mention_menu {
        max-height: 8;
        width: 60;
        margin-top: 1;
    }

    MentionInputBox #mention_menu.hidden {
        display: none;
    }
    """

    class Submitted(Message):
        """Posted with the cleaned text and resolved entities."""

        def __init__(self, submission: Submission) -> None:
            self.submission = submission
            super().__init__()

        @property
        def text(self) -> str:
            return self.submission.text

        @property
        def entities(self) -> dict[str, list[Entity]]:
            return self.submission.entities

    class MentionSelected(Message):
        """Posted when a mention was committed into the input."""

        def __init__(self, trigger: str, entity: Entity) -> None:
            self.trigger = trigger
            self.entity = entity
            super().__init__()

    def __init__(self, coordinator: MentionCoordinator, **kwargs) -> None:
        super().__init__(**kwargs)
        self.coordinator = coordinator

    def compose(self) -> ComposeResult:
        yield MentionInput(
            self.coordinator,
            placeholder="Type a message... (@ agents, # methodologies, / skills)",
            id="mention_input",
        )
        yield OptionList(id="mention_menu", classes="hidden")

    def on_input_changed(self, event: Input.Changed) -> None:
        """Re-scan every buffer version."""
        if event.input.id != "mention_input":
            return
        self.coordinator.buffer_changed(event.value)
        self._sync_menu()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id != "mention_input":
            return
        event.stop()
        if not event.value.strip():
            return
        submission = self.coordinator.prepare_submission(event.value)
        self.coordinator.close()
        event.input.value = ""
        self._sync_menu()
        self.post_message(self.Submitted(submission))

    def on_mention_input_mention_key_handled(
        self, event: MentionInput.MentionKeyHandled
    ) -> None:
        event.stop()
        if event.selected is not None:
            self.post_message(self.MentionSelected(event.trigger, event.selected))
        self._sync_menu()

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        if event.option_list.id != "mention_menu":
            return
        event.stop()
        session = self.coordinator.active_session
        if session is None:
            return
        candidates = session.candidates
        if not 0 <= event.option_index < len(candidates):
            return
        entity = candidates[event.option_index]
        trigger = session.config.name
        new_buffer = self.coordinator.select(trigger, entity)
        input_widget = self.query_one("#mention_input", MentionInput)
        if new_buffer is not None:
            input_widget.value = new_buffer
            input_widget.cursor_position = len(new_buffer)
            self.post_message(self.MentionSelected(trigger, entity))
        self._sync_menu()
        input_widget.focus()

    def _sync_menu(self) -> None:
        try:
            menu = self.query_one("#mention_menu", OptionList)
        except NoMatches:
            return
        menu.clear_options()
        session = self.coordinator.active_session
        if session is None or not session.candidates:
            menu.add_class("hidden")
            return
        marker = session.config.marker
        lang = self.coordinator.lang
        menu.add_options(
            [f"{marker}{entity.display_name(lang)}" for entity in session.candidates]
        )
        menu.highlighted = session.selected_index
        menu.remove_class("hidden")
