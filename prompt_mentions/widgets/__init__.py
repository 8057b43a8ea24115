"""Widget exports for prompt_mentions UI."""

from .mention_input import MentionInput, MentionInputBox

__all__ = ["MentionInput", "MentionInputBox"]
