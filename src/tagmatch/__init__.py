"""tagmatch - Decide whether a set of tags satisfies a boolean tag expression.

Expressions such as "(qa or staging) and !legacy" gate work on the
contexts, labels or filters that are active for a run.
"""

from tagmatch.matcher import ExpressionSyntaxError, matches

__version__ = "0.1.0"

__all__ = ["__version__", "ExpressionSyntaxError", "matches"]
