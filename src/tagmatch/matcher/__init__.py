"""Matcher module for tagmatch.

Provides tag expression evaluation against tag collections.
"""

from tagmatch.matcher.errors import ExpressionSyntaxError
from tagmatch.matcher.evaluator import (
    ExpressionMatcher,
    check_syntax,
    get_matcher,
    matches,
    normalize_tag,
)
from tagmatch.matcher.tags import TagExpression, parse_tags

__all__ = [
    "ExpressionMatcher",
    "ExpressionSyntaxError",
    "TagExpression",
    "check_syntax",
    "get_matcher",
    "matches",
    "normalize_tag",
    "parse_tags",
]
