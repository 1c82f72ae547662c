"""Selector to Playwright locator translation.

Rules are evaluated top to bottom; the first matching predicate wins and the
last rule always matches. The mapping is heuristic: ambiguous selectors such as
``.link-button`` resolve to whichever rule comes first.
"""

from __future__ import annotations

import json
import re
from collections.abc import Callable
from dataclasses import dataclass

from pagescribe.types import LocatorStrategy


@dataclass(frozen=True)
class Locator:
    strategy: LocatorStrategy
    expression: str  # Python source, e.g. page.get_by_role("button")
    needs_review: bool = False
    uses_regex: bool = False


@dataclass(frozen=True)
class LocatorRule:
    name: str
    matches: Callable[[str], bool]
    build: Callable[[str], Locator]


def _quote(value: str) -> str:
    return json.dumps(value)


def _name_pattern(selector: str) -> str:
    return f"re.compile({_quote(re.escape(selector.lstrip('.#')))})"


def _by_role(role: str) -> Callable[[str], Locator]:
    def build(selector: str) -> Locator:
        return Locator(LocatorStrategy.ROLE, f"page.get_by_role({_quote(role)})")

    return build


def _by_role_named(role: str) -> Callable[[str], Locator]:
    def build(selector: str) -> Locator:
        return Locator(
            LocatorStrategy.ROLE,
            f"page.get_by_role({_quote(role)}, name={_name_pattern(selector)})",
            uses_regex=True,
        )

    return build


def _by_test_id(selector: str) -> Locator:
    return Locator(LocatorStrategy.TEST_ID, f"page.get_by_test_id({_quote(selector[1:])})")


def _by_css(selector: str) -> Locator:
    return Locator(LocatorStrategy.CSS, f"page.locator({_quote(selector)})", needs_review=True)


LOCATOR_RULES: tuple[LocatorRule, ...] = (
    LocatorRule("test_id", lambda s: s.startswith("#"), _by_test_id),
    LocatorRule("link_tag", lambda s: s == "a", _by_role("link")),
    LocatorRule("button_tag", lambda s: s == "button", _by_role("button")),
    LocatorRule("input_tag", lambda s: s == "input", _by_role("textbox")),
    LocatorRule("button_like", lambda s: "btn" in s or "button" in s, _by_role_named("button")),
    LocatorRule("link_like", lambda s: "link" in s, _by_role_named("link")),
    LocatorRule("input_like", lambda s: "input" in s or "field" in s, _by_role_named("textbox")),
    LocatorRule("css_fallback", lambda s: True, _by_css),
)


def to_locator(selector: str) -> Locator:
    """Map a CSS-ish selector to the most semantic locator the rules allow."""
    for rule in LOCATOR_RULES:
        if rule.matches(selector):
            return rule.build(selector)
    return _by_css(selector)
