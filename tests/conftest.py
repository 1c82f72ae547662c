"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock

import pytest
from playwright.async_api import Error as PlaywrightError

from pagescribe.analyzer import element as element_js
from pagescribe.analyzer import website as website_js
from pagescribe.config.settings import get_settings
from pagescribe.models.domain import AccessibilityInfo, ElementMetadata
from pagescribe.storage.artifacts import ArtifactStore


def make_handle(
    *,
    tag: str = "button",
    element_id: str = "",
    classes: str = "",
    attributes: dict[str, str] | None = None,
    role: str | None = None,
    label: str = "",
    required: bool = False,
    visible: bool = True,
    enabled: bool = True,
    connected: bool = True,
    has_label: bool = True,
    has_aria: bool = True,
    has_contrast: bool = True,
    click_handler: bool | Exception = False,
    fail_on: str | None = None,
) -> AsyncMock:
    """Build an ElementHandle mock answering the analyzers' evaluate() scripts.

    ``fail_on`` names a script constant (e.g. "TAG_JS") or "is_visible" whose
    read raises a Playwright error, simulating a detached element.
    """
    if element_id:
        selector = f"#{element_id}"
    elif classes:
        selector = f".{classes.split()[0]}"
    else:
        selector = tag

    answers: dict[str, Any] = {
        website_js.IS_CONNECTED_JS: connected,
        website_js.SELECTOR_JS: selector,
        website_js.TAG_JS: tag,
        website_js.ATTRIBUTES_JS: attributes or {},
        website_js.ACCESSIBILITY_JS: {"role": role or "", "label": label, "required": required},
        element_js.ROLE_JS: role,
        element_js.HAS_LABEL_JS: has_label,
        element_js.HAS_ARIA_JS: has_aria,
        element_js.HAS_CONTRAST_JS: has_contrast,
        element_js.HAS_CLICK_HANDLER_JS: click_handler,
    }
    failing: set[str] = set()
    if fail_on:
        failing.add(getattr(website_js, fail_on, None) or getattr(element_js, fail_on, fail_on))

    async def evaluate(script: str) -> Any:
        if script in failing:
            raise PlaywrightError("Element is not attached to the DOM")
        answer = answers[script]
        if isinstance(answer, Exception):
            raise answer
        return answer

    handle = AsyncMock()
    handle.evaluate = AsyncMock(side_effect=evaluate)
    if fail_on == "is_visible":
        handle.is_visible = AsyncMock(side_effect=PlaywrightError("Element is not attached"))
    else:
        handle.is_visible = AsyncMock(return_value=visible)
    handle.is_enabled = AsyncMock(return_value=enabled)
    return handle


@pytest.fixture()
def handle_factory() -> Callable[..., AsyncMock]:
    return make_handle


@pytest.fixture()
def mock_page() -> AsyncMock:
    page = AsyncMock()
    page.url = "https://example.com/"
    page.query_selector_all = AsyncMock(return_value=[])
    return page


@pytest.fixture()
def store(tmp_path: Path) -> ArtifactStore:
    return ArtifactStore(base_dir=tmp_path)


@pytest.fixture()
def submit_button() -> ElementMetadata:
    return ElementMetadata(
        selector="#submit",
        type="button",
        attributes={"id": "submit", "type": "submit"},
        interactable=True,
        visibility=True,
        accessibility=AccessibilityInfo(role="button", label="Submit"),
    )


@pytest.fixture(autouse=True)
def _clear_settings_cache() -> None:
    get_settings.cache_clear()
