"""Plain-text extraction from markdown, used to keep notes searchable."""
import re
from typing import Optional

# Applied in order: fenced code has to go before inline code, images before links.
_RULES = [
    (re.compile(r"```[\s\S]*?```"), ""),
    (re.compile(r"`([^`]+)`"), r"\1"),
    (re.compile(r"!\[.*?\]\([^)]+\)"), ""),
    (re.compile(r"\[([^\]]+)\]\([^)]+\)"), r"\1"),
    (re.compile(r"^#{1,6}\s+", re.MULTILINE), ""),
    (re.compile(r"\*\*([^*]+)\*\*"), r"\1"),
    (re.compile(r"\*([^*]+)\*"), r"\1"),
    (re.compile(r"__([^_]+)__"), r"\1"),
    (re.compile(r"_([^_]+)_"), r"\1"),
    (re.compile(r"~~([^~]+)~~"), r"\1"),
    (re.compile(r"^>\s+", re.MULTILINE), ""),
    (re.compile(r"^[-*_]{3,}\s*$", re.MULTILINE), ""),
    (re.compile(r"^\s*[-*+]\s+", re.MULTILINE), ""),
    (re.compile(r"^\s*\d+\.\s+", re.MULTILINE), ""),
    (re.compile(r"\n{3,}"), "\n\n"),
]


def strip_markdown(markdown: str) -> str:
    """Remove markdown syntax, keeping the readable text."""
    if not markdown:
        return ""
    result = markdown
    for pattern, replacement in _RULES:
        result = pattern.sub(replacement, result)
    return result.strip()


def plain_body(body: Optional[str]) -> Optional[str]:
    """The value stored in Note.body_plain for a given body."""
    if not body:
        return None
    return strip_markdown(body)
