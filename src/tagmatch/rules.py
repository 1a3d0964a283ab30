"""Rule gating for tagmatch.

Decides which configured rules apply to the active tags of a run.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from tagmatch.config import TagRule
from tagmatch.logging import get_logger
from tagmatch.matcher import TagExpression, parse_tags

logger = get_logger(__name__)


@dataclass(frozen=True)
class RuleResult:
    """Outcome of evaluating one rule."""

    rule: TagRule
    applies: bool

    @property
    def name(self) -> str:
        return self.rule.name


class RuleSet:
    """Evaluates a collection of tag rules against active tags."""

    def __init__(self, rules: Iterable[TagRule | Mapping[str, Any]] = ()):
        """Initialize and load rules.

        Args:
            rules: Rules to load, as TagRule instances or mappings.
                Disabled rules are ignored.
        """
        # Stores: rule name -> (TagRule, compiled TagExpression)
        self._rules: dict[str, tuple[TagRule, TagExpression]] = {}
        self.load_rules(rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __contains__(self, name: object) -> bool:
        return name in self._rules

    @property
    def rules(self) -> list[TagRule]:
        return [rule for rule, _ in self._rules.values()]

    def load_rules(self, rules: Iterable[TagRule | Mapping[str, Any]]) -> None:
        """Load and compile rules, replacing any previously loaded.

        Plain mappings (for example rule entries read from YAML) are
        validated here. Entries that fail validation, including those whose
        expression cannot be parsed, are logged and skipped.

        Args:
            rules: TagRule instances or mappings with TagRule fields.
        """
        self._rules.clear()

        for entry in rules:
            if isinstance(entry, TagRule):
                rule = entry
            else:
                try:
                    rule = TagRule.model_validate(entry)
                except ValidationError as e:
                    logger.error(
                        "Failed to load rule",
                        rule_name=entry.get("name"),
                        expression=entry.get("expression"),
                        error=str(e),
                    )
                    continue

            if not rule.enabled:
                logger.debug("Skipping disabled rule", rule_name=rule.name)
                continue

            expression = TagExpression(rule.expression)
            self._rules[rule.name] = (rule, expression)
            logger.debug("Loaded rule", rule_name=rule.name, expression=str(expression))

        logger.info("Loaded tag rules", count=len(self._rules))

    def evaluate(self, tags: str | Iterable[str] | None) -> list[RuleResult]:
        """Evaluate every loaded rule.

        Args:
            tags: Active tags, in any form accepted by parse_tags().

        Returns:
            One result per loaded rule, in load order.
        """
        active = parse_tags(tags)
        results = [
            RuleResult(rule=rule, applies=expression.matches(active))
            for rule, expression in self._rules.values()
        ]
        logger.info(
            "Evaluated tag rules",
            tags=list(active),
            matched=sum(1 for r in results if r.applies),
            total=len(results),
        )
        return results

    def matching(self, tags: str | Iterable[str] | None) -> list[TagRule]:
        """Get the rules that apply to the given tags."""
        return [result.rule for result in self.evaluate(tags) if result.applies]

    def should_apply(self, name: str, tags: str | Iterable[str] | None) -> bool:
        """Check whether a single rule applies.

        Args:
            name: Rule name.
            tags: Active tags.

        Returns:
            True if the rule's expression is satisfied by the tags.

        Raises:
            KeyError: If no enabled rule has this name.
        """
        if name not in self._rules:
            raise KeyError(f"Unknown rule: {name}")

        _, expression = self._rules[name]
        applies = expression.matches(tags)
        logger.debug("Checked rule", rule_name=name, applies=applies)
        return applies


__all__ = ["RuleResult", "RuleSet"]
