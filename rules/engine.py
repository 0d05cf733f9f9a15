"""
Rules Engine - Keyword rules, decomposition patterns and reassembly
===================================================================

This module implements the core rules engine that matches normalized
messages against prioritized keyword rules and reassembles a reply
from the matched fragments.

Each rule owns one or more decompositions. A decomposition pairs a
regular expression with a list of response templates and rotates
through those templates, one step per successful match. Templates
reference capture groups with ``$1``, ``$2``...; captured text is
reflected before it is substituted.
"""

import re
from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any, Iterable, Iterator, Sequence, Tuple, Union

from core.exceptions import ConfigError
from core.logging import get_logger
from .text import reflect

logger = get_logger("rules.engine")

PLACEHOLDER_RE = re.compile(r"\$(\d+)")


def max_placeholder(template: str) -> int:
    """Return the highest ``$N`` index used in a template (0 if none)."""
    return max((int(m.group(1)) for m in PLACEHOLDER_RE.finditer(template)), default=0)


def assemble(template: str, captures: Sequence[str]) -> str:
    """
    Fill a response template with reflected capture groups.

    ``$N`` is replaced by ``reflect(captures[N - 1])``. Indexes outside
    ``1..len(captures)`` are replaced by an empty string; anything else
    in the template is copied verbatim.

    Args:
        template: Response template
        captures: Captured groups in pattern order

    Returns:
        Reassembled reply
    """
    def replace(match: re.Match) -> str:
        index = int(match.group(1))
        if 1 <= index <= len(captures):
            return reflect(captures[index - 1] or "")
        return ""

    return PLACEHOLDER_RE.sub(replace, template)


@dataclass
class Decomposition:
    """
    A pattern and the response templates it rotates through.

    Attributes:
        pattern (str | re.Pattern): Regular expression, compiled
            case-insensitively when given as a string
        responses (list): Response templates, used in order
        index (int): Position of the next template
    """
    pattern: Union[str, "re.Pattern[str]"]
    responses: List[str]
    index: int = field(default=0, init=False)
    regex: "re.Pattern[str]" = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        source = self.pattern.pattern if isinstance(self.pattern, re.Pattern) else self.pattern

        if not isinstance(source, str):
            raise ConfigError("Pattern must be a string or compiled regex", {"pattern": source})

        if not isinstance(self.responses, (list, tuple)):
            raise ConfigError("Response templates must be a list", {"pattern": source})
        self.responses = list(self.responses)

        if not self.responses:
            raise ConfigError("Decomposition has no response templates", {"pattern": source})

        if not all(isinstance(r, str) for r in self.responses):
            raise ConfigError("Response templates must be strings", {"pattern": source})

        if isinstance(self.pattern, re.Pattern):
            self.regex = self.pattern
        else:
            try:
                self.regex = re.compile(self.pattern, re.IGNORECASE)
            except re.error as e:
                raise ConfigError(f"Invalid pattern: {e}", {"pattern": source})

        for template in self.responses:
            needed = max_placeholder(template)
            if needed > self.regex.groups:
                raise ConfigError(
                    f"Template references ${needed} but pattern has "
                    f"{self.regex.groups} capture group(s)",
                    {"pattern": source, "template": template}
                )

    def search(self, message: str) -> Optional[re.Match]:
        return self.regex.search(message)

    def next_response(self) -> str:
        """Return the template at the cursor and advance the cursor."""
        response = self.responses[self.index]
        self.index = (self.index + 1) % len(self.responses)
        return response

    def reset(self) -> None:
        self.index = 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert decomposition to dictionary."""
        return {
            "pattern": self.regex.pattern,
            "responses": list(self.responses),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Decomposition":
        """Create decomposition from dictionary."""
        if not isinstance(data, dict) or "pattern" not in data:
            raise ConfigError("Decomposition is missing 'pattern'", {"data": data})
        pattern = data["pattern"]
        if not isinstance(pattern, str):
            raise ConfigError("Decomposition 'pattern' must be a string", {"pattern": pattern})

        responses = data.get("responses") or []
        if isinstance(responses, str):
            responses = [responses]
        if not isinstance(responses, list) or not all(isinstance(r, str) for r in responses):
            raise ConfigError(
                "Decomposition 'responses' must be a string or a list of strings",
                {"pattern": pattern, "responses": responses}
            )

        return cls(pattern=pattern, responses=responses)


@dataclass
class Rule:
    """
    A keyword rule.

    Attributes:
        keyword (str): Rule label
        priority (int): Higher priorities are tried first
        decompositions (list): Decompositions, tried in order
    """
    keyword: str
    priority: int
    decompositions: List[Decomposition]

    def __post_init__(self):
        self.decompositions = list(self.decompositions)

        if not self.keyword:
            raise ConfigError("Rule keyword cannot be empty")

        if isinstance(self.priority, bool) or not isinstance(self.priority, int):
            raise ConfigError(
                f"Rule priority must be an integer, got {self.priority!r}",
                {"keyword": self.keyword}
            )

        if not self.decompositions:
            raise ConfigError("Rule has no decompositions", {"keyword": self.keyword})

    def to_dict(self) -> Dict[str, Any]:
        """Convert rule to dictionary."""
        return {
            "keyword": self.keyword,
            "priority": self.priority,
            "decompositions": [d.to_dict() for d in self.decompositions],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Rule":
        """Create rule from dictionary."""
        if not isinstance(data, dict) or "keyword" not in data:
            raise ConfigError("Rule is missing 'keyword'", {"data": data})

        decompositions = data.get("decompositions") or []
        if not isinstance(decompositions, list):
            raise ConfigError("'decompositions' must be a list", {"keyword": data["keyword"]})

        return cls(
            keyword=str(data["keyword"]),
            priority=data.get("priority", 0),
            decompositions=[Decomposition.from_dict(d) for d in decompositions],
        )


@dataclass
class RuleMatch:
    """
    Result of a rule matching a message.

    Attributes:
        rule (Rule): The matching rule
        decomposition (Decomposition): The matching decomposition
        template (str): Template selected for this match
        captures (tuple): Captured groups, in order
        message (str): The normalized message that matched
    """
    rule: Rule
    decomposition: Decomposition
    template: str
    captures: Tuple[str, ...]
    message: str

    @property
    def keyword(self) -> str:
        return self.rule.keyword

    def get_response(self) -> str:
        """Assemble the reply for this match."""
        return assemble(self.template, self.captures)


class RuleSet:
    """
    Rules in matching order.

    Rules are sorted once, highest priority first; rules with equal
    priority keep their declaration order.

    Example:
        rule_set = RuleSet([
            Rule("feel", 80, [Decomposition(r"i feel (.*)", ["Why do you feel $1?"])]),
        ])

        match = rule_set.match("i feel tired")
        if match:
            print(match.get_response())  # Why do you feel tired?
    """

    def __init__(self, rules: Iterable[Rule] = ()):
        self.rules: List[Rule] = sorted(rules, key=lambda r: r.priority, reverse=True)

    def __len__(self) -> int:
        return len(self.rules)

    def __iter__(self) -> Iterator[Rule]:
        return iter(self.rules)

    def match(self, message: str) -> Optional[RuleMatch]:
        """
        Find the first decomposition matching a normalized message.

        Only the matched decomposition's cursor advances.

        Args:
            message: Normalized message

        Returns:
            RuleMatch if found, None otherwise
        """
        for rule in self.rules:
            for decomposition in rule.decompositions:
                found = decomposition.search(message)
                if found:
                    template = decomposition.next_response()
                    captures = tuple(g or "" for g in found.groups())
                    logger.debug(f"Matched rule '{rule.keyword}' with /{decomposition.regex.pattern}/")
                    return RuleMatch(
                        rule=rule,
                        decomposition=decomposition,
                        template=template,
                        captures=captures,
                        message=message,
                    )
        return None

    def get_rule(self, keyword: str) -> Optional[Rule]:
        """
        Get a rule by keyword.

        Returns:
            The first rule with this keyword, None otherwise
        """
        for rule in self.rules:
            if rule.keyword == keyword:
                return rule
        return None

    def get_all_rules(self) -> List[Rule]:
        """Get all rules in matching order."""
        return self.rules.copy()

    def reset(self) -> None:
        """Rewind every decomposition to its first template."""
        for rule in self.rules:
            for decomposition in rule.decompositions:
                decomposition.reset()

    def to_list(self) -> List[Dict[str, Any]]:
        return [rule.to_dict() for rule in self.rules]
