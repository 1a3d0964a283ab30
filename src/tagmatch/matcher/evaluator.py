"""Expression evaluator for matching tag sets against tag expressions."""

from __future__ import annotations

from collections.abc import Iterable

from tagmatch.matcher.errors import ExpressionSyntaxError
from tagmatch.matcher.grammar import (
    AND_OPERATOR,
    OR_OPERATOR,
    TRUE_LITERAL,
    UNARY,
    expand_commas,
    find_innermost_group,
    literal_for,
    literal_value,
    split_on,
)


def normalize_tag(tag: str) -> str:
    """Normalize a tag for comparison.

    A leading "@" is dropped (and the remainder trimmed) so that "@prod"
    and "prod" compare equal. Comparison is case-insensitive.
    """
    if tag.startswith("@"):
        tag = tag[1:].strip()
    return tag.lower()


class ExpressionMatcher:
    """Evaluator for tag expressions against a collection of tags.

    Instances hold no state and may be shared between threads.
    """

    def matches(self, expression: str | None, items: Iterable[str]) -> bool:
        """Check if a collection of tags satisfies an expression.

        Args:
            expression: The expression to evaluate. None and blank
                expressions are treated as a single empty atom.
            items: Tags to match against. Never modified.

        Returns:
            True if the tags satisfy the expression, False otherwise.

        Raises:
            ExpressionSyntaxError: If the expression has a "(" that cannot
                be paired with an innermost group.
        """
        items = tuple(items)
        tags = frozenset(normalize_tag(item) for item in items)
        return self._evaluate(expression or "", tags, bool(items))

    def _evaluate(self, expression: str, tags: frozenset[str], has_tags: bool) -> bool:
        expression = expression.strip()

        constant = literal_value(expression)
        if constant is not None:
            return constant

        while "(" in expression:
            group = find_innermost_group(expression)
            if group is None:
                raise ExpressionSyntaxError(expression)

            body, start, end = group
            value = self._evaluate(body, tags, has_tags)
            expression = f"{expression[:start]} {literal_for(value)} {expression[end:]}"

        expression = expand_commas(expression)

        disjuncts = split_on(OR_OPERATOR, expression)
        if len(disjuncts) > 1:
            return any(self._evaluate(part, tags, has_tags) for part in disjuncts)

        conjuncts = split_on(AND_OPERATOR, expression)
        if len(conjuncts) > 1:
            return all(self._evaluate(part, tags, has_tags) for part in conjuncts)

        return self._evaluate_atom(expression, tags, has_tags)

    def _evaluate_atom(self, expression: str, tags: frozenset[str], has_tags: bool) -> bool:
        """Evaluate a single, optionally prefixed, atom.

        Args:
            expression: Atom text with any "!", "not " or "@" prefixes.
            tags: Normalized tags.
            has_tags: Whether the caller supplied any tags at all.

        Returns:
            True if the atom is satisfied.
        """
        result = UNARY.parse_string(expression.strip())
        negated = len(result.negations) % 2 == 1
        required = "required" in result
        atom = result.atom.strip()

        # Without any tags, only required atoms are tested
        if not required and not has_tags:
            return True

        constant = literal_value(atom)
        if constant is not None:
            return constant != negated

        if atom.lower() in tags:
            return not negated
        return negated


def check_syntax(expression: str | None) -> None:
    """Check that an expression can be evaluated.

    Args:
        expression: The expression to check.

    Raises:
        ExpressionSyntaxError: If matches() would raise for this expression.
    """
    expression = (expression or "").strip()
    while "(" in expression:
        group = find_innermost_group(expression)
        if group is None:
            raise ExpressionSyntaxError(expression)
        _, start, end = group
        expression = f"{expression[:start]} {TRUE_LITERAL} {expression[end:]}"


# Global matcher instance
_matcher: ExpressionMatcher | None = None


def get_matcher() -> ExpressionMatcher:
    """Get or create the global matcher instance."""
    global _matcher
    if _matcher is None:
        _matcher = ExpressionMatcher()
    return _matcher


def matches(expression: str | None, items: Iterable[str]) -> bool:
    """Check if a collection of tags satisfies an expression.

    Convenience function using the global matcher.

    Args:
        expression: The expression string.
        items: Tags to match against.

    Returns:
        True if the tags satisfy the expression.
    """
    return get_matcher().matches(expression, items)
