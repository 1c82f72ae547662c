"""Selector, naming, ordering and performance helpers shared by both phases."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any

import structlog
from playwright.async_api import Error as PlaywrightError

from pagescribe.constants import DEFAULT_ELEMENT_WAIT_MS

if TYPE_CHECKING:
    from collections.abc import Iterable

    from playwright.async_api import ElementHandle, Page

    from pagescribe.models.domain import ElementMetadata

logger = structlog.get_logger(__name__)

_NON_ALNUM = re.compile(r"[^a-z0-9]+")

PERFORMANCE_JS = """
() => {
    const timing = performance.timing;
    const paint = performance.getEntriesByType('paint')[0];
    return {
        load_time: timing.loadEventEnd - timing.navigationStart,
        dom_content_loaded: timing.domContentLoadedEventEnd - timing.navigationStart,
        first_paint: paint ? paint.startTime : 0,
    };
}
"""


def slugify(name: str, separator: str = "_") -> str:
    """Lowercase, collapse non-alphanumeric runs to one separator, trim the ends."""
    return _NON_ALNUM.sub(separator, name.lower()).strip(separator)


def generate_unique_selector(metadata: ElementMetadata) -> str:
    """Pick the most specific selector available from an element's attributes."""
    attrs = metadata.attributes
    if attrs.get("id"):
        return f"#{attrs['id']}"
    if attrs.get("data-testid"):
        return f'[data-testid="{attrs["data-testid"]}"]'
    classes = attrs.get("class", "").split()
    if classes:
        return f".{classes[0]}"
    return metadata.selector


def prioritize_elements(elements: Iterable[ElementMetadata]) -> list[ElementMetadata]:
    """Order elements interactable first, then visible; ties keep input order."""
    return sorted(elements, key=lambda m: (not m.interactable, not m.visibility))


async def measure_performance(page: Page) -> dict[str, float]:
    """Read load, DOM-ready and first-paint timings (ms) from the page."""
    metrics: dict[str, Any] = await page.evaluate(PERFORMANCE_JS)
    return {key: float(value or 0) for key, value in metrics.items()}


async def wait_for_element(
    page: Page, selector: str, timeout: int = DEFAULT_ELEMENT_WAIT_MS
) -> ElementHandle | None:
    """Wait for a selector; None when it never shows up."""
    try:
        return await page.wait_for_selector(selector, timeout=timeout)
    except PlaywrightError:
        logger.debug("element_not_found", selector=selector, timeout=timeout)
        return None
