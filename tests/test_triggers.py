"""Tests for the trigger table and its validation."""

from __future__ import annotations

from dataclasses import replace
import re
import unittest

from prompt_mentions.exceptions import MentionError, TriggerConfigError
from prompt_mentions.triggers import (
    AGENT_TRIGGER,
    DEFAULT_TRIGGERS,
    METHODOLOGY_TRIGGER,
    SKILL_TRIGGER,
    QuerySyntax,
    at_word_boundary,
    bracket_label,
    slugify,
    validate_triggers,
)


class HelperTests(unittest.TestCase):
    """Validate the small named helpers triggers are built from."""

    def test_slugify_joins_words_with_hyphens(self) -> None:
        self.assertEqual(slugify("Design Thinking"), "Design-Thinking")
        self.assertEqual(slugify("  Five Whys (5W) "), "Five-Whys-5W")
        self.assertEqual(slugify("already-slugged"), "already-slugged")

    def test_bracket_label_removes_closing_brackets_and_newlines(self) -> None:
        self.assertEqual(bracket_label("Code]\nReviewer"), "Code Reviewer")
        self.assertEqual(bracket_label("  Alice  "), "Alice")

    def test_at_word_boundary(self) -> None:
        self.assertTrue(at_word_boundary("/x", 0))
        self.assertTrue(at_word_boundary("a /x", 2))
        self.assertFalse(at_word_boundary("a/x", 1))

    def test_insertion_formats(self) -> None:
        self.assertEqual(AGENT_TRIGGER.format_insertion("Abdul"), "@[Abdul]")
        self.assertEqual(
            METHODOLOGY_TRIGGER.format_insertion("Design Thinking"), "#Design-Thinking"
        )
        self.assertEqual(SKILL_TRIGGER.format_insertion("Google Drive"), "/Google-Drive")


class ValidateTriggersTests(unittest.TestCase):
    """Malformed trigger tables are rejected eagerly."""

    def test_default_table_is_valid(self) -> None:
        self.assertEqual(validate_triggers(DEFAULT_TRIGGERS), DEFAULT_TRIGGERS)

    def test_error_is_domain_error(self) -> None:
        self.assertTrue(issubclass(TriggerConfigError, MentionError))

    def test_empty_table_rejected(self) -> None:
        with self.assertRaises(TriggerConfigError):
            validate_triggers([])

    def test_duplicate_marker_rejected(self) -> None:
        clash = replace(METHODOLOGY_TRIGGER, name="tag", marker="@")
        with self.assertRaises(TriggerConfigError):
            validate_triggers([AGENT_TRIGGER, clash])

    def test_duplicate_name_rejected(self) -> None:
        with self.assertRaises(TriggerConfigError):
            validate_triggers([AGENT_TRIGGER, AGENT_TRIGGER])

    def test_multi_character_marker_rejected(self) -> None:
        with self.assertRaises(TriggerConfigError):
            validate_triggers([replace(AGENT_TRIGGER, marker="@@")])

    def test_opener_must_start_with_marker(self) -> None:
        broken = replace(
            METHODOLOGY_TRIGGER,
            syntaxes=(QuerySyntax(opener="!", query_chars=r"\w"),),
        )
        with self.assertRaises(TriggerConfigError):
            validate_triggers([broken])

    def test_missing_capture_group_rejected(self) -> None:
        broken = replace(METHODOLOGY_TRIGGER, completed_pattern=re.compile(r"#([\w-]+)"))
        with self.assertRaises(TriggerConfigError):
            validate_triggers([broken])

    def test_insertion_that_does_not_round_trip_rejected(self) -> None:
        broken = replace(METHODOLOGY_TRIGGER, format_insertion=lambda name: f"#{name}")
        with self.assertRaises(TriggerConfigError):
            validate_triggers([broken])


if __name__ == "__main__":
    unittest.main()
