"""Helpers for tag collections and stored tag expressions."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from tagmatch.matcher.evaluator import check_syntax, get_matcher


def parse_tags(value: str | Iterable[str] | None) -> tuple[str, ...]:
    """Parse a tag collection.

    Strings are split on commas. Each entry is trimmed, blanks are dropped,
    and case-insensitive duplicates keep their first spelling.

    Args:
        value: A comma-separated string, an iterable of strings (each of
            which may itself be comma-separated), or None.

    Returns:
        Tuple of tags in their original order.
    """
    if value is None:
        return ()
    if isinstance(value, str):
        value = [value]

    tags: list[str] = []
    seen: set[str] = set()
    for entry in value:
        for tag in str(entry).split(","):
            tag = tag.strip()
            if not tag or tag.lower() in seen:
                continue
            seen.add(tag.lower())
            tags.append(tag)
    return tuple(tags)


@dataclass(frozen=True)
class TagExpression:
    """A tag expression that has passed a syntax check."""

    text: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "text", (self.text or "").strip())
        check_syntax(self.text)

    @property
    def is_empty(self) -> bool:
        return not self.text

    def matches(self, tags: str | Iterable[str] | None) -> bool:
        """Check if tags satisfy this expression.

        Args:
            tags: Tags to check, in any form accepted by parse_tags().

        Returns:
            True if the tags satisfy the expression.
        """
        return get_matcher().matches(self.text, parse_tags(tags))

    def __str__(self) -> str:
        return self.text


__all__ = ["parse_tags", "TagExpression"]
