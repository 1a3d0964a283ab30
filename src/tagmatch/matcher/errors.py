"""Errors raised by the tag expression matcher."""

from __future__ import annotations


class ExpressionSyntaxError(ValueError):
    """Raised when an expression has a ``(`` without a matching innermost group."""

    def __init__(self, expression: str):
        self.expression = expression
        super().__init__(f"Cannot parse expression {expression}")


__all__ = ["ExpressionSyntaxError"]
