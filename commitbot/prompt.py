"""Prompt construction for commit message generation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from .config import Provider

TRUNCATION_MARKER = "\n\n... [Diff Truncated] ..."
NO_HISTORY_PLACEHOLDER = "[none]"

INSTRUCTION = (
    "Based on the following git diff and recent commit history, generate a "
    "concise and conventional commit message. The commit message must have a "
    "subject line of 50 characters or less, followed by a blank line and an "
    "optional brief description."
)


def truncate_diff(diff_text: str, max_diff_chars: int) -> str:
    """Cut ``diff_text`` to ``max_diff_chars`` and append the marker if cut."""
    if len(diff_text) <= max_diff_chars:
        return diff_text
    return diff_text[:max_diff_chars] + TRUNCATION_MARKER


def build_prompt(
    diff_text: str, recent_subjects: Sequence[str], max_diff_chars: int
) -> str:
    """Return the full instruction text sent to the provider.

    The output depends only on the arguments.
    """
    if not diff_text.strip():
        raise ValueError("Refusing to build a prompt for an empty diff")
    diff_part = truncate_diff(diff_text, max_diff_chars)
    history = "\n".join(recent_subjects).strip()
    return (
        f"{INSTRUCTION}\n\n"
        "Recent commits:\n"
        f"---\n{history or NO_HISTORY_PLACEHOLDER}\n---\n\n"
        "Staged diff:\n"
        f"---\n{diff_part}\n---\n\n"
        "Generate the commit message:"
    )


@dataclass(frozen=True)
class GenerationRequest:
    """Everything needed to ask a provider for candidate messages."""

    diff_text: str
    recent_subjects: tuple[str, ...]
    provider: Provider
    suggestion_count: int
    max_diff_chars: int

    @classmethod
    def create(
        cls,
        diff_text: str,
        recent_subjects: Sequence[str],
        provider: Provider,
        suggestion_count: int,
        max_diff_chars: int,
    ) -> "GenerationRequest":
        return cls(
            diff_text=truncate_diff(diff_text, max_diff_chars),
            recent_subjects=tuple(recent_subjects),
            provider=provider,
            suggestion_count=suggestion_count,
            max_diff_chars=max_diff_chars,
        )

    @property
    def prompt(self) -> str:
        # diff_text is already truncated; allow room for the marker so it is
        # not cut a second time.
        return build_prompt(
            self.diff_text,
            self.recent_subjects,
            self.max_diff_chars + len(TRUNCATION_MARKER),
        )
