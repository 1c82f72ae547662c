"""Rules engine providing query methods over parsed analyzer rules."""

from __future__ import annotations

import fnmatch
from pathlib import Path

import structlog
import yaml
from pydantic import ValidationError

from pagescribe.exceptions import ConfigError
from pagescribe.rules.schema import AnalyzerRules
from pagescribe.types import Priority

logger = structlog.get_logger(__name__)


class RulesEngine:
    """Query interface over AnalyzerRules."""

    def __init__(self, rules: AnalyzerRules | None = None) -> None:
        self._rules = rules or AnalyzerRules()

    @classmethod
    def from_yaml(cls, yaml_str: str) -> RulesEngine:
        """Create a RulesEngine from a YAML string."""
        try:
            rules = AnalyzerRules.from_yaml(yaml_str)
        except (yaml.YAMLError, ValidationError) as e:
            msg = f"Invalid analyzer rules: {e}"
            raise ConfigError(msg) from e
        return cls(rules)

    @classmethod
    def from_file(cls, path: str | Path) -> RulesEngine:
        """Load rules from a YAML file."""
        rules_path = Path(path)
        if not rules_path.is_file():
            msg = f"Rules file not found: {rules_path}"
            raise ConfigError(msg)
        logger.debug("rules_loaded", path=str(rules_path))
        return cls.from_yaml(rules_path.read_text(encoding="utf-8"))

    @property
    def rules(self) -> AnalyzerRules:
        return self._rules

    def should_skip_url(self, url: str) -> bool:
        """Check if URL matches an excluded pattern (substring or glob)."""
        return any(p in url or fnmatch.fnmatch(url, p) for p in self._rules.exclude_patterns)

    def is_allowed_type(self, tag: str) -> bool:
        """Check if an element tag is in the allowlist."""
        return tag.lower() in self._rules.element_types

    def priority_for(self, text: str) -> Priority | None:
        """Return the first priority tier whose keyword occurs in text."""
        lowered = text.lower()
        tiers = self._rules.priority_rules
        for priority, keywords in (
            (Priority.HIGH, tiers.high),
            (Priority.MEDIUM, tiers.medium),
            (Priority.LOW, tiers.low),
        ):
            if any(keyword.lower() in lowered for keyword in keywords):
                return priority
        return None

    def to_yaml(self) -> str:
        """Serialize rules back to YAML."""
        return self._rules.to_yaml()
