"""Tests for tag parsing and stored expressions."""

from __future__ import annotations

import dataclasses

import pytest

from tagmatch.matcher import ExpressionSyntaxError, TagExpression, parse_tags


class TestParseTags:
    def test_comma_separated_string(self):
        assert parse_tags("a, b,,c") == ("a", "b", "c")

    def test_iterable_entries_may_hold_commas(self):
        assert parse_tags(["a, b", "c"]) == ("a", "b", "c")

    def test_case_insensitive_duplicates_keep_first_spelling(self):
        assert parse_tags(["QA", "qa", " Qa "]) == ("QA",)

    def test_blank_values(self):
        assert parse_tags(None) == ()
        assert parse_tags("") == ()
        assert parse_tags(" , ") == ()

    def test_keeps_at_prefix(self):
        assert parse_tags("@prod, qa") == ("@prod", "qa")


class TestTagExpression:
    def test_text_is_trimmed(self):
        expression = TagExpression("  a and b ")
        assert expression.text == "a and b"
        assert str(expression) == "a and b"

    def test_empty(self):
        assert TagExpression("").is_empty
        assert TagExpression(None).is_empty
        assert not TagExpression("a").is_empty

    def test_invalid_syntax_rejected(self):
        with pytest.raises(ExpressionSyntaxError):
            TagExpression("(a and b")

    def test_matches_accepts_tag_strings(self):
        expression = TagExpression("a and !b")
        assert expression.matches("a, c")
        assert not expression.matches(["a", "b"])
        assert expression.matches(None)

    def test_empty_expression_matches_only_without_tags(self):
        assert TagExpression("").matches([])
        assert not TagExpression("").matches(["a"])

    def test_frozen(self):
        expression = TagExpression("a")
        with pytest.raises(dataclasses.FrozenInstanceError):
            expression.text = "b"

    def test_equality(self):
        assert TagExpression("a or b") == TagExpression(" a or b ")
