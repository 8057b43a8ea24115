"""Trigger table: one static description per mention marker.

Each trigger is plain data plus a few small named helpers (boundary check,
slug and label transforms, candidate predicates) so that adding a trigger
never touches the scanning or session code.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
import re

from .entities import DEFAULT_LANGUAGE, Entity
from .exceptions import TriggerConfigError

_SLUG_SEPARATOR_RE = re.compile(r"[^\w-]+")
_LABEL_BREAK_RE = re.compile(r"[\]\r\n]+")
_WHITESPACE_RE = re.compile(r"\s+")

CandidatePredicate = Callable[[Entity, str, str], bool]


def at_word_boundary(text: str, index: int) -> bool:
    """Return True when ``index`` is at start-of-text or right after whitespace."""
    return index == 0 or text[index - 1].isspace()


def slugify(text: str) -> str:
    """Collapse characters outside ``[\\w-]`` into single hyphens."""
    return _SLUG_SEPARATOR_RE.sub("-", text.strip()).strip("-")


def bracket_label(text: str) -> str:
    """Make ``text`` safe to place between ``[`` and ``]``."""
    return _WHITESPACE_RE.sub(" ", _LABEL_BREAK_RE.sub(" ", text)).strip()


def squash_whitespace(text: str) -> str:
    """Remove every whitespace character (legacy ``@word`` form)."""
    return _WHITESPACE_RE.sub("", text)


def match_name_or_id(entity: Entity, query: str, lang: str) -> bool:
    """Case-insensitive containment against display name or id."""
    needle = query.lower()
    return needle in entity.display_name(lang).lower() or needle in entity.id.lower()


def match_name_id_or_description(entity: Entity, query: str, lang: str) -> bool:
    """Like :func:`match_name_or_id`, also searching the description."""
    if match_name_or_id(entity, query, lang):
        return True
    return query.lower() in entity.description.lower()


@dataclass(frozen=True)
class QuerySyntax:
    """One way of typing an in-progress mention, e.g. ``@[`` or ``@``."""

    opener: str
    query_chars: str
    requires_boundary: bool = False

    @property
    def marker_width(self) -> int:
        return len(self.opener)

    @property
    def pattern(self) -> re.Pattern[str]:
        return re.compile(re.escape(self.opener) + f"({self.query_chars}*)$")


@dataclass(frozen=True)
class CompletedForm:
    """A finalized mention shape, captured by a named group of the trigger."""

    group: str
    key: Callable[[str], str]


@dataclass(frozen=True)
class TriggerConfig:
    """Static description of a single trigger type."""

    name: str
    marker: str
    syntaxes: tuple[QuerySyntax, ...]
    completed_pattern: re.Pattern[str]
    completed_forms: tuple[CompletedForm, ...]
    format_insertion: Callable[[str], str]
    matches: CandidatePredicate = match_name_or_id
    description: str = field(default="", compare=False)

    def insertion_for(self, entity: Entity, lang: str = DEFAULT_LANGUAGE) -> str | None:
        """Text to insert for ``entity``, or None when nothing would resolve back.

        A display name with no usable characters (``"???"`` slugs to nothing)
        falls back to the entity id.
        """
        for source in (entity.display_name(lang), entity.id):
            inserted = self.format_insertion(source)
            if self.completed_pattern.fullmatch(inserted):
                return inserted
        return None


def _format_agent(display_name: str) -> str:
    return f"@[{bracket_label(display_name)}]"


def _format_methodology(display_name: str) -> str:
    return f"#{slugify(display_name)}"


def _format_skill(display_name: str) -> str:
    return f"/{slugify(display_name)}"


AGENT_TRIGGER = TriggerConfig(
    name="agent",
    marker="@",
    syntaxes=(
        QuerySyntax(opener="@[", query_chars=r"[^\]\r\n@]"),
        QuerySyntax(opener="@", query_chars=r"\w"),
    ),
    completed_pattern=re.compile(r"@\[(?P<bracket>[^\]\r\n]+)\]|@(?P<word>\w+)"),
    completed_forms=(
        CompletedForm(group="bracket", key=bracket_label),
        CompletedForm(group="word", key=squash_whitespace),
    ),
    format_insertion=_format_agent,
    description="Agents, inserted as @[Display Name]",
)

METHODOLOGY_TRIGGER = TriggerConfig(
    name="methodology",
    marker="#",
    syntaxes=(QuerySyntax(opener="#", query_chars=r"[\w-]"),),
    completed_pattern=re.compile(r"#(?P<slug>[\w-]+)"),
    completed_forms=(CompletedForm(group="slug", key=slugify),),
    format_insertion=_format_methodology,
    description="Methodologies, inserted as #Display-Name",
)

# Anchored to start-of-text or whitespace so URLs such as https://x/y never match.
SKILL_TRIGGER = TriggerConfig(
    name="skill",
    marker="/",
    syntaxes=(QuerySyntax(opener="/", query_chars=r"[\w-]", requires_boundary=True),),
    completed_pattern=re.compile(r"(?<!\S)/(?P<slug>[\w-]+)"),
    completed_forms=(CompletedForm(group="slug", key=slugify),),
    format_insertion=_format_skill,
    matches=match_name_id_or_description,
    description="Skills and connectors, inserted as /Display-Name",
)

DEFAULT_TRIGGERS: tuple[TriggerConfig, ...] = (
    AGENT_TRIGGER,
    METHODOLOGY_TRIGGER,
    SKILL_TRIGGER,
)

TRIGGERS_BY_NAME: dict[str, TriggerConfig] = {t.name: t for t in DEFAULT_TRIGGERS}

_ROUND_TRIP_SAMPLE = "Sample Entity 42"


def _check_round_trip(trigger: TriggerConfig) -> None:
    inserted = trigger.format_insertion(_ROUND_TRIP_SAMPLE)
    match = trigger.completed_pattern.search(f"prefix {inserted} suffix")
    if match is None:
        raise TriggerConfigError(
            f"Trigger {trigger.name!r}: inserted text {inserted!r} is not a completed mention."
        )
    for form in trigger.completed_forms:
        captured = match.groupdict().get(form.group)
        if captured is None:
            continue
        if captured.strip().lower() == form.key(_ROUND_TRIP_SAMPLE).lower():
            return
    raise TriggerConfigError(
        f"Trigger {trigger.name!r}: inserted text {inserted!r} does not resolve back."
    )


def validate_triggers(triggers: Sequence[TriggerConfig]) -> tuple[TriggerConfig, ...]:
    """Reject malformed or mutually ambiguous trigger tables."""
    if not triggers:
        raise TriggerConfigError("At least one trigger is required.")
    names: set[str] = set()
    markers: dict[str, str] = {}
    for trigger in triggers:
        if not trigger.name.strip():
            raise TriggerConfigError("Trigger name must not be empty.")
        if trigger.name in names:
            raise TriggerConfigError(f"Duplicate trigger name {trigger.name!r}.")
        names.add(trigger.name)
        if len(trigger.marker) != 1 or trigger.marker.isspace():
            raise TriggerConfigError(
                f"Trigger {trigger.name!r}: marker must be one non-space character."
            )
        if trigger.marker in markers:
            raise TriggerConfigError(
                f"Triggers {markers[trigger.marker]!r} and {trigger.name!r} share marker "
                f"{trigger.marker!r}."
            )
        markers[trigger.marker] = trigger.name
        if not trigger.syntaxes:
            raise TriggerConfigError(f"Trigger {trigger.name!r} has no query syntax.")
        for syntax in trigger.syntaxes:
            if not syntax.opener.startswith(trigger.marker):
                raise TriggerConfigError(
                    f"Trigger {trigger.name!r}: opener {syntax.opener!r} does not start "
                    f"with marker {trigger.marker!r}."
                )
        groups = set(trigger.completed_pattern.groupindex)
        for form in trigger.completed_forms:
            if form.group not in groups:
                raise TriggerConfigError(
                    f"Trigger {trigger.name!r}: pattern lacks group {form.group!r}."
                )
        _check_round_trip(trigger)
    return tuple(triggers)
