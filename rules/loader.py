"""
Rules Loader - Rule declarations from YAML files
================================================

A rules file mirrors the built-in declarations:

    rules:
      - keyword: feel
        priority: 80
        decompositions:
          - pattern: "i feel (.*)"
            responses:
              - "Do you often feel $1?"
    fallbacks:
      - "Please go on."

Declarations are plain data; ``build_rule_set`` and ``build_fallbacks``
create new objects on every call.
"""

import copy
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from core.exceptions import ConfigError
from core.logging import get_logger
from .defaults import DEFAULT_RULES, DEFAULT_FALLBACKS
from .engine import Rule, RuleSet
from .fallback import FallbackCycler

logger = get_logger("rules.loader")


@dataclass
class RuleDeclarations:
    """
    Rule and fallback data, not yet built into engine objects.

    Attributes:
        rules (list): Rule dictionaries in declaration order
        fallbacks (list): Fallback replies in rotation order
        source (str): Where the declarations came from
    """
    rules: List[Dict[str, Any]] = field(default_factory=list)
    fallbacks: List[str] = field(default_factory=list)
    source: str = "built-in"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rules": copy.deepcopy(self.rules),
            "fallbacks": list(self.fallbacks),
        }


def default_declarations() -> RuleDeclarations:
    """Return a copy of the built-in declarations."""
    return RuleDeclarations(
        rules=copy.deepcopy(list(DEFAULT_RULES)),
        fallbacks=list(DEFAULT_FALLBACKS),
    )


def build_rule_set(declarations: Optional[RuleDeclarations] = None) -> RuleSet:
    """
    Build a new RuleSet with fresh rotation cursors.

    Args:
        declarations: Rule data (built-in rules when omitted)

    Raises:
        ConfigError: If any rule is invalid
    """
    declarations = declarations or default_declarations()
    return RuleSet(Rule.from_dict(data) for data in declarations.rules)


def build_fallbacks(declarations: Optional[RuleDeclarations] = None) -> FallbackCycler:
    """
    Build a new FallbackCycler.

    Raises:
        ConfigError: If the fallback list is empty
    """
    declarations = declarations or default_declarations()
    return FallbackCycler(declarations.fallbacks)


def load_rules_file(path: Union[str, Path]) -> RuleDeclarations:
    """
    Load rule declarations from a YAML file.

    A file without a ``fallbacks`` key uses the built-in fallbacks.
    The declarations are built once here so a broken file is rejected
    at load time rather than at first use.

    Args:
        path: Path to the rules file

    Returns:
        RuleDeclarations read from the file

    Raises:
        ConfigError: If the file cannot be read, parsed or built
    """
    rules_path = Path(path).expanduser()
    details = {"path": str(rules_path)}

    try:
        with open(rules_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse rules file: {e}", details)
    except IOError as e:
        raise ConfigError(f"Failed to read rules file: {e}", details)

    if not isinstance(data, dict):
        raise ConfigError("Rules file must contain a mapping", details)

    rules = data.get("rules")
    if not isinstance(rules, list):
        raise ConfigError("Rules file needs a 'rules' list", details)

    for rule in rules:
        if not isinstance(rule, dict):
            raise ConfigError(f"Invalid rule entry: {rule!r}", details)

    fallbacks = data.get("fallbacks", list(DEFAULT_FALLBACKS))
    if not isinstance(fallbacks, list):
        raise ConfigError("'fallbacks' must be a list", details)

    declarations = RuleDeclarations(
        rules=rules,
        fallbacks=[str(reply) for reply in fallbacks],
        source=str(rules_path),
    )

    try:
        build_rule_set(declarations)
        build_fallbacks(declarations)
    except ConfigError as e:
        raise ConfigError(e.message, {**details, **e.details})

    logger.info(f"Loaded {len(rules)} rule(s) from {rules_path}")
    return declarations


def save_rules_file(declarations: RuleDeclarations, path: Union[str, Path]) -> None:
    """
    Save rule declarations to a YAML file.

    Raises:
        ConfigError: If the file cannot be written
    """
    rules_path = Path(path).expanduser()
    rules_path.parent.mkdir(parents=True, exist_ok=True)

    try:
        with open(rules_path, "w", encoding="utf-8") as f:
            yaml.dump(declarations.to_dict(), f, default_flow_style=False,
                      sort_keys=False, allow_unicode=True)
    except IOError as e:
        raise ConfigError(f"Failed to save rules file: {e}", {"path": str(rules_path)})


def write_default_rules(path: Union[str, Path]) -> Path:
    """Write the built-in rules to ``path`` so they can be edited."""
    save_rules_file(default_declarations(), path)
    return Path(path).expanduser()
