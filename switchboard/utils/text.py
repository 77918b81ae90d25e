"""
Text helpers shared by the quality gate, assembler and prompt builder.
"""

from __future__ import annotations

import math
import re

_WHITESPACE = re.compile(r"\s+")


def count_words(text: str) -> int:
    """Number of whitespace-separated tokens; 0 for blank text."""
    stripped = text.strip()
    if not stripped:
        return 0
    return len(_WHITESPACE.split(stripped))


def min_required_words(text: str, factor: float = 1.125) -> int:
    """Target word count for a length-escalated rewrite."""
    return math.ceil(count_words(text) * factor)


def _unfence(match: re.Match[str]) -> str:
    block = re.sub(r"```[a-z]*\n?", "", match.group(0), flags=re.IGNORECASE)
    return block.replace("```", "")


def clean_markup(text: str) -> str:
    """
    Strip markdown formatting from model output.

    Removes emphasis markers, headers, inline code, code fences,
    strikethrough, links (keeping the label) and blockquote markers,
    then collapses runs of blank lines.
    """
    text = re.sub(r"```[\s\S]*?```", _unfence, text)
    text = re.sub(r"\*{1,3}([^*]+)\*{1,3}", r"\1", text)
    text = re.sub(r"^#{1,6}\s+", "", text, flags=re.MULTILINE)
    text = re.sub(r"`([^`]+)`", r"\1", text)
    text = re.sub(r"~~([^~]+)~~", r"\1", text)
    text = re.sub(r"\[([^\]]+)\]\([^)]+\)", r"\1", text)
    text = re.sub(r"^>\s+", "", text, flags=re.MULTILINE)
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


__all__ = [
    "clean_markup",
    "count_words",
    "min_required_words",
]
