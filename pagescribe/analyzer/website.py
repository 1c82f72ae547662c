"""Page scan: enumerate candidate elements, record metadata, persist the snapshot."""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import structlog

from pagescribe.constants import CANDIDATE_SELECTOR
from pagescribe.exceptions import DetachedElementError, StorageError
from pagescribe.models.domain import (
    AccessibilityInfo,
    AnalysisSnapshot,
    ElementAnalysis,
    ElementMetadata,
)

if TYPE_CHECKING:
    from playwright.async_api import ElementHandle, Page

    from pagescribe.analyzer.element import ElementAnalyzer
    from pagescribe.rules.engine import RulesEngine
    from pagescribe.storage.artifacts import ArtifactStore

logger = structlog.get_logger(__name__)

IS_CONNECTED_JS = "el => el.isConnected"
SELECTOR_JS = """
el => {
    if (el.id) return '#' + el.id;
    const first = (typeof el.className === 'string' ? el.className : '').trim().split(/\\s+/)[0];
    if (first) return '.' + first;
    return el.tagName.toLowerCase();
}
"""
TAG_JS = "el => el.tagName.toLowerCase()"
ATTRIBUTES_JS = """
el => {
    const attrs = {};
    for (const attr of el.attributes) { attrs[attr.name] = attr.value; }
    return attrs;
}
"""
ACCESSIBILITY_JS = """
el => ({
    role: el.getAttribute('role') || '',
    label: el.getAttribute('aria-label') || el.getAttribute('alt') || '',
    required: el.hasAttribute('required'),
})
"""


class WebsiteAnalyzer:
    """Scans one page for interactive elements and records their metadata."""

    def __init__(
        self,
        page: Page,
        store: ArtifactStore,
        element_analyzer: ElementAnalyzer | None = None,
        rules: RulesEngine | None = None,
    ) -> None:
        self._page = page
        self._store = store
        self._element_analyzer = element_analyzer
        self._rules = rules
        self._elements: dict[str, ElementMetadata] = {}
        self._analyses: dict[str, ElementAnalysis] = {}

    @property
    def analyses(self) -> dict[str, ElementAnalysis]:
        """Per-selector element analyses from the last scan (only with an ElementAnalyzer)."""
        return dict(self._analyses)

    async def analyze_page(self) -> dict[str, ElementMetadata]:
        """Scan the page, persist the snapshot, return the selector -> metadata mapping.

        A failing element is logged and skipped; it never aborts the scan.
        """
        self._elements = {}
        self._analyses = {}
        handles = await self._page.query_selector_all(CANDIDATE_SELECTOR)
        logger.info("scan_started", url=self._page.url, candidates=len(handles))

        for index, handle in enumerate(handles):
            try:
                if not await self._is_attached(handle):
                    continue
                metadata = await self.collect_element_metadata(handle)
                if self._rules and not self._passes_rules(self._rules, metadata):
                    logger.debug("element_excluded_by_rules", selector=metadata.selector)
                    continue
                analysis = None
                if self._element_analyzer:
                    analysis = await self._element_analyzer.analyze(handle)
            except DetachedElementError as e:
                logger.info("element_detached", index=index, error=str(e))
                continue
            except Exception as e:
                logger.warning("element_skipped", index=index, error=str(e))
                continue

            if metadata.selector in self._elements:
                logger.warning("duplicate_selector", selector=metadata.selector, index=index)
            self._elements[metadata.selector] = metadata
            if analysis:
                self._analyses[metadata.selector] = analysis

        logger.info("scan_complete", url=self._page.url, elements=len(self._elements))
        self._save_results()
        return dict(self._elements)

    async def collect_element_metadata(self, handle: ElementHandle) -> ElementMetadata:
        """Read all metadata fields for one element concurrently."""
        selector, tag, attributes, visible, enabled, accessibility = await asyncio.gather(
            handle.evaluate(SELECTOR_JS),
            handle.evaluate(TAG_JS),
            handle.evaluate(ATTRIBUTES_JS),
            handle.is_visible(),
            handle.is_enabled(),
            handle.evaluate(ACCESSIBILITY_JS),
        )
        return ElementMetadata(
            selector=selector,
            type=tag,
            attributes={str(k): str(v) for k, v in (attributes or {}).items()},
            interactable=bool(enabled),
            visibility=bool(visible),
            accessibility=AccessibilityInfo(**accessibility),
        )

    async def _is_attached(self, handle: ElementHandle) -> bool:
        try:
            return bool(await handle.evaluate(IS_CONNECTED_JS))
        except Exception:
            return False

    def _passes_rules(self, rules: RulesEngine, metadata: ElementMetadata) -> bool:
        is_role_button = bool(metadata.accessibility and metadata.accessibility.role == "button")
        if not rules.is_allowed_type(metadata.type) and not is_role_button:
            return False
        href = metadata.attributes.get("href")
        return not (metadata.type == "a" and href and rules.should_skip_url(href))

    def _save_results(self) -> None:
        snapshot = AnalysisSnapshot(
            timestamp=datetime.now(UTC),
            url=self._page.url,
            elements=self._elements,
        )
        try:
            self._store.save_snapshot(snapshot)
        except StorageError as e:
            logger.error("snapshot_save_failed", error=str(e))

