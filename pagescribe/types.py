"""Enums and type aliases for PageScribe."""

from __future__ import annotations

from enum import StrEnum


class TestType(StrEnum):
    __test__ = False

    FUNCTIONAL = "functional"
    ACCESSIBILITY = "accessibility"
    PERFORMANCE = "performance"


class Priority(StrEnum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class StepAction(StrEnum):
    CLICK = "click"
    INPUT = "input"
    VERIFY = "verify"
    MEASURE = "measure"


class AssertionKind(StrEnum):
    VISIBLE = "visible"
    ARIA = "aria"
    CONTRAST = "contrast"

    @classmethod
    def from_text(cls, text: str) -> AssertionKind | None:
        """Resolve an assertion kind from a human-readable expectation."""
        if "ARIA" in text:
            return cls.ARIA
        if "contrast" in text:
            return cls.CONTRAST
        if "visible" in text:
            return cls.VISIBLE
        return None


class LocatorStrategy(StrEnum):
    TEST_ID = "test_id"
    ROLE = "role"
    CSS = "css"


class BrowserName(StrEnum):
    CHROMIUM = "chromium"
    FIREFOX = "firefox"
    WEBKIT = "webkit"
