"""Domain exception hierarchy for the mention engine."""

from __future__ import annotations


class MentionError(RuntimeError):
    """Base class for all domain-level mention errors."""


class TriggerConfigError(MentionError):
    """Raised when a trigger table is malformed or ambiguous."""


class CatalogError(MentionError):
    """Raised when an entity catalog cannot be read or validated."""


class ConfigValidationError(MentionError):
    """Raised when configuration cannot be validated safely."""
