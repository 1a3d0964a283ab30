"""Token grammar for tag expressions.

Supports boolean expressions like:
- prod
- !legacy and prod
- (a and b) or (c and d)
- qa, staging, prod        (comma is shorthand for "or")
- @prod                    (required: an empty tag set does not satisfy it)
- @!legacy / not legacy    (negation)

Structural tokens:
- Grouping: ( )
- Boolean: or, and (whitespace on both sides), !, not
- Markers: @ (required), , (or)

The evaluator never builds a syntax tree. The elements below only locate
structural tokens so the evaluator can reduce groups and split on operators.
"""

from __future__ import annotations

import re

from pyparsing import Group, Literal, Opt, ParserElement, Regex, ZeroOrMore

# Reserved literals spliced back in place of an evaluated group
TRUE_LITERAL = ":TRUE"
FALSE_LITERAL = ":FALSE"

# "(nested)" containing no other parentheses
INNERMOST_GROUP = Regex(r"\((?P<body>[^()]+)\)").leave_whitespace().parse_with_tabs()

# "a , b" -> "a or b"
COMMA = Regex(r"\s*,\s*").leave_whitespace().parse_with_tabs().sub(" or ")

OR_OPERATOR = Regex(r"\s+or\s+", flags=re.IGNORECASE).leave_whitespace().parse_with_tabs()
AND_OPERATOR = Regex(r"\s+and\s+", flags=re.IGNORECASE).leave_whitespace().parse_with_tabs()

# Each prefix flips the negation flag. "@!" / "@ not " also consumes the "@".
NEGATION = (
    Literal("!")
    | Regex(r"not\s", flags=re.IGNORECASE)
    | Regex(r"@\s*(?:!|not\s)(?=.)", flags=re.IGNORECASE | re.DOTALL)
)
REQUIRED = Literal("@")

UNARY = (
    Group(ZeroOrMore(NEGATION))("negations")
    + Opt(REQUIRED("required"))
    + Regex(r".*", flags=re.DOTALL)("atom")
).parse_with_tabs()


def find_innermost_group(expression: str) -> tuple[str, int, int] | None:
    """Locate the first innermost parenthesised group.

    Args:
        expression: Expression text to search.

    Returns:
        Tuple of (group body, start, end) where start/end bound the
        parentheses, or None if there is no such group.
    """
    match = next(_scan(INNERMOST_GROUP, expression, max_matches=1), None)
    if match is None:
        return None
    tokens, start, end = match
    return tokens["body"], start, end


def _scan(element: ParserElement, expression: str, **kwargs):
    # Whitespace is part of the operator tokens, so the scanner must not skip it
    return element.scan_string(expression, always_skip_whitespace=False, **kwargs)


def split_on(operator: ParserElement, expression: str) -> list[str]:
    """Split an expression on an infix operator.

    Trailing empty parts are discarded, so a dangling separator does not
    turn the expression into a two-branch operation.
    """
    parts: list[str] = []
    last = 0
    for _, start, end in _scan(operator, expression):
        parts.append(expression[last:start])
        last = end
    parts.append(expression[last:])

    while parts and not parts[-1]:
        parts.pop()
    return parts


def expand_commas(expression: str) -> str:
    """Rewrite every comma (and the whitespace around it) to " or "."""
    pieces: list[str] = []
    last = 0
    for tokens, start, end in _scan(COMMA, expression):
        pieces.append(expression[last:start])
        pieces.append(tokens[0])
        last = end
    pieces.append(expression[last:])
    return "".join(pieces)


def literal_for(value: bool) -> str:
    return TRUE_LITERAL if value else FALSE_LITERAL


def literal_value(text: str) -> bool | None:
    """Return the constant a reserved literal denotes, or None for anything else."""
    upper = text.upper()
    if upper == TRUE_LITERAL:
        return True
    if upper == FALSE_LITERAL:
        return False
    return None


__all__ = [
    "TRUE_LITERAL",
    "FALSE_LITERAL",
    "INNERMOST_GROUP",
    "COMMA",
    "OR_OPERATOR",
    "AND_OPERATOR",
    "NEGATION",
    "REQUIRED",
    "UNARY",
    "find_innermost_group",
    "split_on",
    "expand_commas",
    "literal_for",
    "literal_value",
]
