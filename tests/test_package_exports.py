"""Tests for top-level package lazy exports."""

from __future__ import annotations

import unittest

import prompt_mentions


class PackageExportTests(unittest.TestCase):
    """Ensure __getattr__ and exported symbols behave as expected."""

    def test_lazy_exports_resolve_known_symbols(self) -> None:
        self.assertTrue(callable(prompt_mentions.load_config))
        self.assertTrue(callable(prompt_mentions.ensure_config_dir))
        self.assertTrue(callable(prompt_mentions.scan))
        self.assertTrue(callable(prompt_mentions.extract_all))
        self.assertTrue(callable(prompt_mentions.strip_all))
        self.assertTrue(callable(prompt_mentions.filter_candidates))
        self.assertIsNotNone(prompt_mentions.MentionCoordinator)
        self.assertIsNotNone(prompt_mentions.MentionSession)
        self.assertIsNotNone(prompt_mentions.SessionState)
        self.assertIsNotNone(prompt_mentions.StaticEntityProvider)
        self.assertIsNotNone(prompt_mentions.CatalogProvider)
        self.assertIsNotNone(prompt_mentions.MentionError)
        self.assertEqual(prompt_mentions.AGENT_TRIGGER.marker, "@")
        self.assertEqual(len(prompt_mentions.DEFAULT_TRIGGERS), 3)

    def test_every_public_name_resolves(self) -> None:
        for name in prompt_mentions.__all__:
            if name == "MentionPromptApp":
                continue
            with self.subTest(name=name):
                self.assertIsNotNone(getattr(prompt_mentions, name))

    def test_unknown_symbol_raises_attribute_error(self) -> None:
        with self.assertRaises(AttributeError):
            getattr(prompt_mentions, "THIS_DOES_NOT_EXIST")


if __name__ == "__main__":
    unittest.main()
