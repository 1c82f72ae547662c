"""Per-element interactivity and accessibility analysis."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import structlog
from playwright.async_api import Error as PlaywrightError

from pagescribe.constants import (
    FORM_TAGS,
    INTERACTIVE_ROLES,
    INTERACTIVE_TAGS,
    ISSUE_MISSING_ARIA,
    ISSUE_MISSING_LABEL,
    ISSUE_POOR_CONTRAST,
    MAX_ACCESSIBILITY_SCORE,
    MISSING_ARIA_PENALTY,
    MISSING_LABEL_PENALTY,
    NAVIGATIONAL_ROLES,
    POOR_CONTRAST_PENALTY,
)
from pagescribe.exceptions import DetachedElementError
from pagescribe.models.domain import ElementAnalysis

if TYPE_CHECKING:
    from playwright.async_api import ElementHandle

logger = structlog.get_logger(__name__)

TAG_JS = "el => el.tagName.toLowerCase()"
ROLE_JS = "el => el.getAttribute('role')"
HAS_LABEL_JS = (
    "el => !!(el.getAttribute('aria-label') || el.getAttribute('alt')"
    " || el.getAttribute('title'))"
)
HAS_ARIA_JS = "el => Array.from(el.attributes).some(a => a.name.startsWith('aria-'))"
# Crude heuristic: identical foreground and background colors
HAS_CONTRAST_JS = """
el => {
    const style = window.getComputedStyle(el);
    return style.color !== style.backgroundColor;
}
"""
# getEventListeners only exists in devtools-enabled contexts
HAS_CLICK_HANDLER_JS = """
el => {
    const listeners = window.getEventListeners ? window.getEventListeners(el) : null;
    return !!(listeners && listeners.click && listeners.click.length > 0)
        || el.onclick !== null;
}
"""


class ElementAnalyzer:
    """Scores a single DOM element without mutating the page."""

    async def analyze(self, element: ElementHandle) -> ElementAnalysis:
        """Analyze one element.

        Raises DetachedElementError when any property read fails, which callers
        should treat as "skip this element".
        """
        try:
            tag, role, has_label, has_aria, has_contrast = await asyncio.gather(
                element.evaluate(TAG_JS),
                element.evaluate(ROLE_JS),
                element.evaluate(HAS_LABEL_JS),
                element.evaluate(HAS_ARIA_JS),
                element.evaluate(HAS_CONTRAST_JS),
            )
        except PlaywrightError as e:
            raise DetachedElementError(str(e)) from e

        score, issues = self._score_accessibility(
            has_label=bool(has_label),
            has_aria=bool(has_aria),
            has_contrast=bool(has_contrast),
        )
        return ElementAnalysis(
            is_interactive=await self._is_interactive(element, tag, role),
            is_form_element=tag in FORM_TAGS,
            is_navigational=tag == "a" or role in NAVIGATIONAL_ROLES,
            accessibility_score=score,
            potential_issues=issues,
        )

    async def _is_interactive(self, element: ElementHandle, tag: str, role: str | None) -> bool:
        if tag in INTERACTIVE_TAGS:
            return True
        if role and role in INTERACTIVE_ROLES:
            return True
        try:
            return bool(await element.evaluate(HAS_CLICK_HANDLER_JS))
        except PlaywrightError:
            logger.debug("click_handler_detection_failed", tag=tag)
            return False

    def _score_accessibility(
        self, has_label: bool, has_aria: bool, has_contrast: bool
    ) -> tuple[int, list[str]]:
        """Apply fixed penalties in label, aria, contrast order."""
        score = MAX_ACCESSIBILITY_SCORE
        issues: list[str] = []
        if not has_label:
            issues.append(ISSUE_MISSING_LABEL)
            score -= MISSING_LABEL_PENALTY
        if not has_aria:
            issues.append(ISSUE_MISSING_ARIA)
            score -= MISSING_ARIA_PENALTY
        if not has_contrast:
            issues.append(ISSUE_POOR_CONTRAST)
            score -= POOR_CONTRAST_PENALTY
        return max(0, score), issues
