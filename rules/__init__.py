"""
Rules Module - Pattern-matching response engine
===============================================

This module provides the rule-based core of the responder:
- Input normalization and pronoun reflection
- Prioritized keyword rules with rotating response templates
- Capture-group reassembly
- Rotating fallback replies
- Rule declarations loaded from YAML
"""

from .engine import RuleSet, Rule, Decomposition, RuleMatch, assemble
from .fallback import FallbackCycler
from .loader import (
    RuleDeclarations,
    build_rule_set,
    build_fallbacks,
    default_declarations,
    load_rules_file,
    save_rules_file,
    write_default_rules,
)
from .text import REFLECTIONS, normalize, reflect

__all__ = [
    "RuleSet",
    "Rule",
    "Decomposition",
    "RuleMatch",
    "assemble",
    "FallbackCycler",
    "RuleDeclarations",
    "build_rule_set",
    "build_fallbacks",
    "default_declarations",
    "load_rules_file",
    "save_rules_file",
    "write_default_rules",
    "REFLECTIONS",
    "normalize",
    "reflect",
]
