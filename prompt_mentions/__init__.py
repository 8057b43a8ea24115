"""Top-level package for prompt-mentions."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .app import MentionPromptApp
    from .config import ensure_config_dir, load_config
    from .coordinator import MentionCoordinator, Submission
    from .entities import Entity
    from .exceptions import (
        CatalogError,
        ConfigValidationError,
        MentionError,
        TriggerConfigError,
    )
    from .extraction import extract_all, strip_all
    from .filtering import filter_candidates
    from .providers import CatalogProvider, StaticEntityProvider
    from .scanner import ScanResult, scan
    from .session import MentionSession, SessionState
    from .triggers import (
        AGENT_TRIGGER,
        DEFAULT_TRIGGERS,
        METHODOLOGY_TRIGGER,
        SKILL_TRIGGER,
        TriggerConfig,
    )

__all__ = [
    "AGENT_TRIGGER",
    "CatalogError",
    "CatalogProvider",
    "ConfigValidationError",
    "DEFAULT_TRIGGERS",
    "Entity",
    "METHODOLOGY_TRIGGER",
    "MentionCoordinator",
    "MentionError",
    "MentionPromptApp",
    "MentionSession",
    "SKILL_TRIGGER",
    "ScanResult",
    "SessionState",
    "StaticEntityProvider",
    "Submission",
    "TriggerConfig",
    "TriggerConfigError",
    "ensure_config_dir",
    "extract_all",
    "filter_candidates",
    "load_config",
    "scan",
    "strip_all",
]

# Symbol -> submodule; resolved lazily so the engine imports without textual.
_EXPORTS: dict[str, str] = {
    "AGENT_TRIGGER": "triggers",
    "DEFAULT_TRIGGERS": "triggers",
    "METHODOLOGY_TRIGGER": "triggers",
    "SKILL_TRIGGER": "triggers",
    "TriggerConfig": "triggers",
    "CatalogError": "exceptions",
    "ConfigValidationError": "exceptions",
    "MentionError": "exceptions",
    "TriggerConfigError": "exceptions",
    "CatalogProvider": "providers",
    "StaticEntityProvider": "providers",
    "Entity": "entities",
    "MentionCoordinator": "coordinator",
    "Submission": "coordinator",
    "MentionSession": "session",
    "SessionState": "session",
    "ScanResult": "scanner",
    "scan": "scanner",
    "extract_all": "extraction",
    "strip_all": "extraction",
    "filter_candidates": "filtering",
    "ensure_config_dir": "config",
    "load_config": "config",
    "MentionPromptApp": "app",
}


def __getattr__(name: str) -> Any:
    """Lazily import symbols to keep optional UI dependencies optional at import time."""
    module_name = _EXPORTS.get(name)
    if module_name is None:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    from importlib import import_module

    module = import_module(f".{module_name}", __name__)
    return getattr(module, name)
