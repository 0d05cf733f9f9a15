"""
Responder - Rule-based reply generation
=======================================

This module provides the responder facade: normalize the incoming
text, try the rules, and fall back to a generic reply when nothing
matches. One responder holds the rotation state of one conversation.
"""

import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

from core.config import Config
from core.logging import get_logger
from rules.engine import RuleSet
from rules.fallback import FallbackCycler
from rules.loader import (
    RuleDeclarations,
    build_rule_set,
    build_fallbacks,
    default_declarations,
    load_rules_file,
)
from rules.text import normalize

logger = get_logger("services.responder")


@dataclass
class ResponderResult:
    """
    Result of responder processing.

    Attributes:
        response (str): Reply text
        source (str): 'rule' or 'fallback'
        keyword (str): Keyword of the matched rule (empty for fallbacks)
        normalized (str): Input after normalization
        latency_ms (int): Time spent producing the reply
    """
    response: str
    source: str
    keyword: str = ""
    normalized: str = ""
    latency_ms: int = 0


class Responder:
    """
    Rule-based conversational responder.

    Calls on one instance are serialized, so rotation cursors advance
    one step at a time even when the instance is shared between threads.

    Example:
        responder = Responder(build_rule_set(), build_fallbacks())

        responder.reply("I am tired of my job")
        # "How long have you been tired of your job?"
    """

    def __init__(self, rule_set: RuleSet, fallbacks: FallbackCycler):
        """
        Initialize responder.

        Args:
            rule_set: Rules to try, owned by this responder
            fallbacks: Fallback replies, owned by this responder
        """
        self.rule_set = rule_set
        self.fallbacks = fallbacks
        self._lock = threading.Lock()

    @classmethod
    def from_declarations(cls, declarations: Optional[RuleDeclarations] = None) -> "Responder":
        """Build a responder with fresh cursors from rule data."""
        declarations = declarations or default_declarations()
        return cls(build_rule_set(declarations), build_fallbacks(declarations))

    def respond(self, message: str) -> ResponderResult:
        """
        Generate a reply and describe how it was produced.

        Args:
            message: Raw user input

        Returns:
            ResponderResult with the reply
        """
        start_time = time.time()

        with self._lock:
            normalized = normalize(message)
            match = self.rule_set.match(normalized)

            if match:
                result = ResponderResult(
                    response=match.get_response(),
                    source="rule",
                    keyword=match.keyword,
                    normalized=normalized,
                )
            else:
                logger.debug("No rule matched, using fallback")
                result = ResponderResult(
                    response=self.fallbacks.next(),
                    source="fallback",
                    normalized=normalized,
                )

        result.latency_ms = int((time.time() - start_time) * 1000)
        return result

    def reply(self, message: str) -> str:
        """Return the reply for a raw message."""
        return self.respond(message).response

    def reset(self) -> None:
        """Rewind all rotation cursors."""
        with self._lock:
            self.rule_set.reset()
            self.fallbacks.reset()


def load_declarations(config: Optional[Config] = None) -> RuleDeclarations:
    """
    Pick the rule data for a configuration.

    Uses the configured rules file when one is set, the built-in
    rules otherwise.

    Raises:
        ConfigError: If the rules file is invalid
    """
    if config and config.responder.rules_file:
        return load_rules_file(config.responder.rules_file)
    return default_declarations()


def responder_factory(declarations: Optional[RuleDeclarations] = None) -> Callable[[], Responder]:
    """Return a callable that builds independent responders from the same data."""
    declarations = declarations or default_declarations()

    def create() -> Responder:
        return Responder.from_declarations(declarations)

    return create


def create_responder(config: Optional[Config] = None) -> Responder:
    """Create a single responder for a configuration."""
    return Responder.from_declarations(load_declarations(config))
