"""Tests for domain exception hierarchy."""

from __future__ import annotations

import unittest

from prompt_mentions.exceptions import (
    CatalogError,
    ConfigValidationError,
    MentionError,
    TriggerConfigError,
)


class ExceptionHierarchyTests(unittest.TestCase):
    """Validate exception inheritance contract."""

    def test_exception_hierarchy(self) -> None:
        self.assertTrue(issubclass(TriggerConfigError, MentionError))
        self.assertTrue(issubclass(CatalogError, MentionError))
        self.assertTrue(issubclass(ConfigValidationError, MentionError))
        self.assertTrue(issubclass(MentionError, RuntimeError))


if __name__ == "__main__":
    unittest.main()
