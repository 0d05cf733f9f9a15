"""
Test Rules Engine Module
=======================

Unit tests for decompositions, rules, rule sets and reassembly.
"""

import re

import pytest
from pathlib import Path
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.exceptions import ConfigError
from rules.engine import RuleSet, Rule, Decomposition, assemble, max_placeholder
from rules.fallback import FallbackCycler
from rules.loader import build_rule_set


class TestAssemble:
    """Tests for assemble()."""

    def test_substitutes_reflected_capture(self):
        """Test placeholders are replaced with reflected captures."""
        assert assemble("Why $1?", ["my job"]) == "Why your job?"

    def test_out_of_range_placeholder_is_empty(self):
        """Test out-of-range placeholders become empty."""
        assert assemble("a $1 b $3", ["x"]) == "a x b "

    def test_zero_placeholder_is_empty(self):
        """Test $0 becomes empty."""
        assert assemble("[$0]", ["x"]) == "[]"

    def test_non_numeric_placeholder_left_verbatim(self):
        """Test a $ without digits is kept."""
        assert assemble("costs $x and $", ["y"]) == "costs $x and $"

    def test_multi_digit_placeholder(self):
        """Test placeholders with two digits."""
        captures = [str(n) for n in range(1, 13)]
        assert assemble("$12/$1", captures) == "12/1"

    def test_none_capture_is_empty(self):
        """Test a None capture becomes empty."""
        assert assemble("<$1>", [None]) == "<>"

    def test_max_placeholder(self):
        """Test finding the highest placeholder index."""
        assert max_placeholder("no placeholders") == 0
        assert max_placeholder("$2 then $10 then $1") == 10


class TestDecomposition:
    """Tests for Decomposition class."""

    def test_rotates_templates_in_order(self):
        """Test templates rotate in order and wrap."""
        d = Decomposition(r"x", ["a", "b", "c"])
        assert [d.next_response() for _ in range(7)] == ["a", "b", "c", "a", "b", "c", "a"]

    def test_cursor_always_in_range(self):
        """Test the cursor stays within the template list."""
        d = Decomposition(r"x", ["a", "b"])
        for _ in range(5):
            d.next_response()
            assert 0 <= d.index < len(d.responses)

    def test_string_patterns_ignore_case(self):
        """Test string patterns match case-insensitively."""
        d = Decomposition(r"i feel (.*)", ["$1"])
        assert d.search("I FEEL fine") is not None

    def test_compiled_pattern_used_as_is(self):
        """Test compiled patterns keep their flags."""
        d = Decomposition(re.compile(r"Case (\w+)"), ["$1"])
        assert d.search("case x") is None
        assert d.search("Case x") is not None

    def test_empty_templates_rejected(self):
        """Test a decomposition needs templates."""
        with pytest.raises(ConfigError):
            Decomposition(r"x", [])

    def test_invalid_pattern_rejected(self):
        """Test an invalid regex raises ConfigError."""
        with pytest.raises(ConfigError) as exc_info:
            Decomposition(r"(unclosed", ["a"])
        assert exc_info.value.details["pattern"] == "(unclosed"

    def test_placeholder_beyond_groups_rejected(self):
        """Test placeholders beyond the group count are rejected."""
        with pytest.raises(ConfigError):
            Decomposition(r"i feel (.*)", ["Why $2?"])

    def test_placeholder_within_groups_accepted(self):
        """Test placeholders within the group count are accepted."""
        d = Decomposition(r"(a) (b)", ["$2 $1"])
        assert d.regex.groups == 2

    def test_reset(self):
        """Test reset rewinds the template cursor."""
        d = Decomposition(r"x", ["a", "b"])
        d.next_response()
        d.reset()
        assert d.next_response() == "a"

    def test_from_dict_requires_pattern(self):
        """Test from_dict needs a pattern."""
        with pytest.raises(ConfigError):
            Decomposition.from_dict({"responses": ["a"]})

    @pytest.mark.parametrize("data", [
        {"pattern": 123, "responses": ["a"]},
        {"pattern": "x", "responses": [5]},
        {"pattern": "x", "responses": 5},
    ])
    def test_from_dict_rejects_wrong_types(self, data):
        """Test from_dict needs string patterns and templates."""
        with pytest.raises(ConfigError):
            Decomposition.from_dict(data)

    def test_scalar_templates_rejected(self):
        """Test templates must be given as a list."""
        with pytest.raises(ConfigError):
            Decomposition(r"x", 5)

    def test_to_dict(self):
        """Test conversion to dictionary."""
        d = Decomposition(r"because (.*)", ["Really?"])
        assert d.to_dict() == {"pattern": r"because (.*)", "responses": ["Really?"]}


class TestRule:
    """Tests for Rule class."""

    def test_requires_decompositions(self):
        """Test a rule needs decompositions."""
        with pytest.raises(ConfigError):
            Rule("empty", 10, [])

    def test_requires_integer_priority(self):
        """Test string priorities are rejected."""
        with pytest.raises(ConfigError):
            Rule("bad", "10", [Decomposition(r"x", ["a"])])

    def test_bool_priority_rejected(self):
        """Test boolean priorities are rejected."""
        with pytest.raises(ConfigError):
            Rule("bad", True, [Decomposition(r"x", ["a"])])

    def test_requires_keyword(self):
        """Test a rule needs a keyword."""
        with pytest.raises(ConfigError):
            Rule("", 10, [Decomposition(r"x", ["a"])])

    def test_from_dict(self):
        """Test creating a rule from a dictionary."""
        rule = Rule.from_dict({
            "keyword": "sorry",
            "priority": 40,
            "decompositions": [{"pattern": r"sorry", "responses": ["Please don't apologize."]}],
        })
        assert rule.keyword == "sorry"
        assert rule.priority == 40
        assert rule.decompositions[0].next_response() == "Please don't apologize."

    def test_from_dict_rejects_non_list_decompositions(self):
        """Test decompositions must be a list."""
        with pytest.raises(ConfigError):
            Rule.from_dict({"keyword": "k", "decompositions": "x"})


class TestRuleSet:
    """Tests for RuleSet class."""

    def test_sorted_by_priority(self):
        """Test rules are sorted by priority."""
        rule_set = RuleSet([
            Rule("low", 10, [Decomposition(r"test", ["Low"])]),
            Rule("high", 90, [Decomposition(r"test", ["High"])]),
        ])
        assert [r.keyword for r in rule_set] == ["high", "low"]
        assert rule_set.match("test").get_response() == "High"

    def test_ties_keep_declaration_order(self):
        """Test equal priorities keep declaration order."""
        rule_set = RuleSet([
            Rule("first", 50, [Decomposition(r"test", ["1"])]),
            Rule("second", 50, [Decomposition(r"test", ["2"])]),
            Rule("third", 50, [Decomposition(r"test", ["3"])]),
        ])
        assert [r.keyword for r in rule_set] == ["first", "second", "third"]
        assert rule_set.match("test").keyword == "first"

    def test_decompositions_tried_in_order(self):
        """Test decompositions are tried in order."""
        rule_set = RuleSet([
            Rule("k", 1, [
                Decomposition(r"foo (.*)", ["Foo $1"]),
                Decomposition(r"(.*)", ["Anything"]),
            ]),
        ])
        assert rule_set.match("foo bar").get_response() == "Foo bar"
        assert rule_set.match("baz").get_response() == "Anything"

    def test_no_match_returns_none(self):
        """Test unmatched input returns None."""
        rule_set = build_rule_set()
        assert rule_set.match("asdf qwerty") is None

    def test_empty_rule_set_never_matches(self):
        """Test an empty rule set never matches."""
        assert RuleSet().match("hello") is None

    def test_only_matched_cursor_advances(self):
        """Test only the matched decomposition advances."""
        rule_set = build_rule_set()
        feel = rule_set.get_rule("feel").decompositions[0]
        am = rule_set.get_rule("am").decompositions[0]

        rule_set.match("i feel sad")
        rule_set.match("asdf")

        assert feel.index == 1
        assert am.index == 0

    def test_match_captures(self):
        """Test match details."""
        match = build_rule_set().match("i feel sad today")
        assert match.keyword == "feel"
        assert match.captures == ("sad today",)
        assert match.template == "Do you often feel $1?"
        assert match.message == "i feel sad today"

    def test_unmatched_optional_group_is_empty(self):
        """Test unmatched optional groups become empty."""
        rule_set = RuleSet([Rule("k", 1, [Decomposition(r"a(b)?", ["[$1]"])])])
        match = rule_set.match("a")
        assert match.captures == ("",)
        assert match.get_response() == "[]"

    def test_same_declarations_same_match(self):
        """Test identical rule sets match identically."""
        first = build_rule_set().match("i am sad because of you")
        second = build_rule_set().match("i am sad because of you")
        assert first.keyword == second.keyword == "am"
        assert first.get_response() == second.get_response()

    def test_default_priorities(self):
        """Test built-in rule priorities."""
        rule_set = build_rule_set()
        assert [(r.keyword, r.priority) for r in rule_set] == [
            ("hello", 100), ("feel", 80), ("am", 75),
            ("family", 70), ("because", 60), ("you", 50),
        ]

    def test_get_rule(self):
        """Test getting a rule by keyword."""
        rule_set = build_rule_set()
        assert rule_set.get_rule("family").priority == 70
        assert rule_set.get_rule("missing") is None

    def test_reset(self):
        """Test reset rewinds every decomposition."""
        rule_set = build_rule_set()
        rule_set.match("hello")
        rule_set.reset()
        assert rule_set.match("hello").get_response() == "Hello. What is troubling you?"


class TestDefaultRules:
    """Behaviour of the built-in rules."""

    @pytest.fixture
    def rule_set(self):
        return build_rule_set()

    def test_feel_beats_you(self, rule_set):
        """Test feel outranks you."""
        match = rule_set.match("i feel that you hate me")
        assert match.get_response() == "Do you often feel that I hate you?"

    def test_am_beats_because(self, rule_set):
        """Test am outranks because."""
        match = rule_set.match("i am sad because you left")
        assert match.get_response() == "How long have you been sad because I left?"

    def test_because_beats_you(self, rule_set):
        """Test because outranks you."""
        assert rule_set.match("because you said so").keyword == "because"

    def test_family_second_template_echoes_member(self, rule_set):
        """Test the family rule echoes the relative."""
        rule_set.match("my mother hates me")
        assert rule_set.match("my mother hates me").get_response() == "How do you feel about your mother?"

    def test_hello_only_at_start(self, rule_set):
        """Test greetings only match at the start."""
        assert rule_set.match("well hello there") is None

    def test_feel_rotation(self, rule_set):
        """Test the feel templates rotate."""
        replies = [rule_set.match("i feel lost").get_response() for _ in range(4)]
        assert replies == [
            "Do you often feel lost?",
            "Tell me more about these feelings.",
            "What makes you feel lost?",
            "Do you often feel lost?",
        ]


class TestFallbackCycler:
    """Tests for FallbackCycler class."""

    def test_cycles_in_order(self):
        """Test fallbacks cycle in order."""
        fallbacks = FallbackCycler(["a", "b", "c"])
        assert [fallbacks.next() for _ in range(7)] == ["a", "b", "c", "a", "b", "c", "a"]

    def test_empty_list_rejected(self):
        """Test an empty fallback list is rejected."""
        with pytest.raises(ConfigError):
            FallbackCycler([])

    def test_single_reply(self):
        """Test a single fallback repeats."""
        fallbacks = FallbackCycler(["only"])
        assert fallbacks.next() == fallbacks.next() == "only"

    def test_reset(self):
        """Test reset rewinds the fallback cursor."""
        fallbacks = FallbackCycler(["a", "b"])
        fallbacks.next()
        fallbacks.reset()
        assert fallbacks.next() == "a"


# Run tests if executed directly
if __name__ == "__main__":
    pytest.main([__file__, "-v"])
