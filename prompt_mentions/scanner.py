"""Detect the mention currently being typed at the end of a buffer."""

from __future__ import annotations

from dataclasses import dataclass

from .triggers import TriggerConfig, at_word_boundary


@dataclass(frozen=True)
class ScanResult:
    """Outcome of scanning one buffer version for one trigger."""

    active: bool
    query: str = ""
    start_offset: int = -1
    marker_width: int = 0

    @property
    def end_offset(self) -> int:
        """Offset just past the in-progress mention."""
        return self.start_offset + self.marker_width + len(self.query)


INACTIVE = ScanResult(active=False)


def scan(buffer: str, config: TriggerConfig, cursor: int | None = None) -> ScanResult:
    """Return the active mention ending at ``cursor`` (end of buffer by default).

    Query syntaxes are tried in declaration order and the first match wins,
    so the more specific form (e.g. ``@[``) must be listed first.
    """
    if cursor is None:
        cursor = len(buffer)
    if not 0 <= cursor <= len(buffer):
        return INACTIVE
    head = buffer[:cursor]
    for syntax in config.syntaxes:
        match = syntax.pattern.search(head)
        if match is None:
            continue
        start = match.start()
        if syntax.requires_boundary and not at_word_boundary(head, start):
            return INACTIVE
        return ScanResult(
            active=True,
            query=match.group(1),
            start_offset=start,
            marker_width=syntax.marker_width,
        )
    return INACTIVE
