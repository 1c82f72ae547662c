"""Analyzer rules schema with Pydantic validation."""

from __future__ import annotations

import yaml
from pydantic import BaseModel, Field


class PriorityRules(BaseModel):
    high: list[str] = Field(
        default_factory=lambda: ["login", "checkout", "payment", "submit", "register"]
    )
    medium: list[str] = Field(default_factory=lambda: ["search", "filter", "sort", "navigation"])
    low: list[str] = Field(
        default_factory=lambda: ["footer-links", "social-media", "optional-fields"]
    )


class AnalyzerRules(BaseModel):
    crawl_depth: int = 2
    exclude_patterns: list[str] = Field(
        default_factory=lambda: ["/api/", "/static/", "/assets/"]
    )
    element_types: list[str] = Field(
        default_factory=lambda: ["button", "input", "select", "a", "form"]
    )
    priority_rules: PriorityRules = Field(default_factory=PriorityRules)

    @classmethod
    def from_yaml(cls, yaml_str: str) -> AnalyzerRules:
        """Parse a YAML string into AnalyzerRules."""
        if not yaml_str or not yaml_str.strip():
            return cls()
        raw = yaml.safe_load(yaml_str)
        if not raw or not isinstance(raw, dict):
            return cls()
        return cls.model_validate(raw)

    def to_yaml(self) -> str:
        """Serialize rules back to YAML."""
        return yaml.dump(self.model_dump(), default_flow_style=False, sort_keys=False)
