"""Generates executable pytest + Playwright modules from test cases."""

from __future__ import annotations

import ast
import json
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

import structlog

from pagescribe.constants import (
    ARTIFACTS_DIR,
    AXE_CDN_URL,
    CONFTEST_FILENAME,
    DEBUG_ENV_VAR,
    DOM_READY_BUDGET_MS,
    FIRST_PAINT_BUDGET_MS,
    GENERATED_SUFFIX,
    LOAD_TIME_BUDGET_MS,
    PLACEHOLDER_INPUT,
    RERUNS_DELAY_SECONDS,
    SUITE_CONFIG_FILENAME,
)
from pagescribe.exceptions import GeneratorError
from pagescribe.generator.locator import Locator, to_locator
from pagescribe.types import AssertionKind, StepAction
from pagescribe.utils.helpers import PERFORMANCE_JS, slugify

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from pagescribe.config.settings import Settings
    from pagescribe.models.domain import TestCase, TestStep

logger = structlog.get_logger(__name__)

INDENT = "    "

# Module-level constants emitted into generated files on demand
SUPPORT_CONSTANTS: dict[str, str] = {
    "STATE_JS": """el => ({
    text: (el.textContent || '').trim(),
    classes: el.className,
    attributes: Object.fromEntries([...el.attributes].map(a => [a.name, a.value])),
})""",
    "ARIA_ATTRIBUTES_JS": """el => Object.fromEntries(
    [...el.attributes].filter(a => a.name.startsWith('aria-')).map(a => [a.name, a.value])
)""",
    "AXE_CONTRAST_JS": "el => axe.run(el, { runOnly: ['color-contrast'] })",
    "TIMING_JS": PERFORMANCE_JS.strip(),
}

SUITE_TITLES: tuple[tuple[str, str], ...] = (
    ("accessibility", "Accessibility Tests"),
    ("form validation", "Form Validation Tests"),
    ("interaction", "Interaction Tests"),
    ("performance", "Performance Tests"),
)


def _quote(value: Any) -> str:
    return json.dumps(str(value))


def _docstring(text: str) -> str:
    return text.replace("\\", "\\\\").replace('"', '\\"')


def _comment(text: str) -> str:
    return " ".join(str(text).split())


class TestCodeGenerator:
    """Renders TestCase objects into pytest modules driving Playwright's async API."""

    __test__ = False

    def generate_files(self, cases: Iterable[TestCase]) -> Mapping[str, str]:
        """Render every case; returns a read-only filename -> source mapping."""
        files: dict[str, str] = {}
        for case in cases:
            filename = self._unique_filename(self.filename_for(case), files)
            files[filename] = self.generate(case)
        logger.info("generated_test_files", count=len(files))
        return MappingProxyType(files)

    def filename_for(self, case: TestCase) -> str:
        return f"{self._slug(case)}{GENERATED_SUFFIX}"

    def generate(self, case: TestCase) -> str:
        """Generate the full module source for a single test case."""
        needs: set[str] = set()
        body: list[str] = []
        for step in case.steps:
            body.extend(self._render_step(step, needs))

        lines = [f'"""{self._module_docstring(case)}"""', "", "import os"]
        if "re" in needs:
            lines.append("import re")
        lines.extend(
            [
                "",
                "import pytest",
                "from playwright.async_api import Page, expect",
                "",
            ]
        )
        for name, value in SUPPORT_CONSTANTS.items():
            if name in needs:
                lines.append(f'{name} = """{value}"""')
        if "AXE_CDN_URL" in needs:
            lines.append(f"AXE_CDN_URL = {_quote(AXE_CDN_URL)}")
        lines.extend(["", ""])
        lines.extend(self._function(case, body))
        source = "\n".join(lines) + "\n"
        try:
            ast.parse(source, filename=self.filename_for(case))
        except SyntaxError as e:
            msg = f"Generated code for {case.name!r} is not valid Python: {e}"
            raise GeneratorError(msg) from e
        return source

    def render_conftest(self, settings: Settings) -> str:
        """Render the conftest.py providing the async page fixture for the suite.

        The fixture records a trace and a video for every test and keeps them,
        plus a full-page screenshot, only when the test body failed.
        """
        return "\n".join(
            [
                '"""Fixtures for the generated PageScribe suite."""',
                "",
                "import pytest",
                "import pytest_asyncio",
                "from playwright.async_api import async_playwright",
                "",
                f"BASE_URL = {_quote(settings.base_url)}",
                f"BROWSER = {_quote(settings.browser.value)}",
                f"HEADLESS = {settings.headless!r}",
                f"DEFAULT_TIMEOUT_MS = {int(settings.timeout)}",
                f"ARTIFACTS_DIR = {_quote(ARTIFACTS_DIR)}",
                "",
                "",
                "@pytest.hookimpl(hookwrapper=True)",
                "def pytest_runtest_makereport(item, call):",
                "    outcome = yield",
                "    report = outcome.get_result()",
                '    setattr(item, f"rep_{report.when}", report)',
                "",
                "",
                "@pytest_asyncio.fixture()",
                "async def page(request):",
                "    async with async_playwright() as playwright:",
                "        browser = await getattr(playwright, BROWSER).launch(headless=HEADLESS)",
                "        context = await browser.new_context(",
                "            base_url=BASE_URL, record_video_dir=ARTIFACTS_DIR",
                "        )",
                "        context.set_default_timeout(DEFAULT_TIMEOUT_MS)",
                "        await context.tracing.start(screenshots=True, snapshots=True)",
                "        current = await context.new_page()",
                "        yield current",
                "",
                '        report = getattr(request.node, "rep_call", None)',
                "        failed = report is not None and report.failed",
                "        name = request.node.name",
                "        if failed:",
                "            await current.screenshot(",
                '                path=f"{ARTIFACTS_DIR}/failure-{name}.png", full_page=True',
                "            )",
                '            await context.tracing.stop(path=f"{ARTIFACTS_DIR}/trace-{name}.zip")',
                "        else:",
                "            await context.tracing.stop()",
                "        await context.close()",
                "        if current.video and not failed:",
                "            await current.video.delete()",
                "        await browser.close()",
                "",
            ]
        )

    def render_suite_config(self, settings: Settings) -> str:
        """Render the pytest.ini carrying the runner policy for the generated suite."""
        addopts = [
            "-v",
            "--tb=short",
            f"--reruns={int(settings.retries)}",
            f"--reruns-delay={RERUNS_DELAY_SECONDS}",
        ]
        if settings.parallel:
            addopts.extend(["-n", "auto"])
        return "\n".join(
            [
                "[pytest]",
                f"addopts = {' '.join(addopts)}",
                f"junit_suite_name = pagescribe-{settings.browser.value}",
                "",
            ]
        )

    def render_support_files(self, settings: Settings) -> Mapping[str, str]:
        """Non-test files the generated suite needs to run."""
        return MappingProxyType(
            {
                CONFTEST_FILENAME: self.render_conftest(settings),
                SUITE_CONFIG_FILENAME: self.render_suite_config(settings),
            }
        )

    def _function(self, case: TestCase, body: list[str]) -> list[str]:
        slug = self._slug(case)
        return [
            "@pytest.mark.asyncio",
            f"async def test_{slug}(page: Page) -> None:",
            f'    """{_docstring(case.description)}"""',
            '    await page.goto("/")',
            f"    debug = bool(os.environ.get({_quote(DEBUG_ENV_VAR)}))",
            "    if debug:",
            '        await page.add_style_tag(content="[data-testid] { outline: 2px solid red; }")',
            f'        await page.screenshot(path="{ARTIFACTS_DIR}/before-{slug}.png")',
            "",
            *body,
            "",
            "    if debug:",
            f'        await page.screenshot(path="{ARTIFACTS_DIR}/after-{slug}.png")',
        ]

    def _render_step(self, step: TestStep, needs: set[str]) -> list[str]:
        """Dispatch on the step action; unknown actions become comments."""
        if step.action == StepAction.CLICK:
            return self._click(step, needs)
        if step.action == StepAction.INPUT:
            return self._input(step, needs)
        if step.action == StepAction.VERIFY:
            return self._verify(step, needs)
        if step.action == StepAction.MEASURE:
            return self._measure(step, needs)
        return [
            f"{INDENT}# Unsupported action: {_comment(step.action)}",
            f"{INDENT}# {_comment(step.expected_result)}",
        ]

    def _locator(self, selector: str, needs: set[str]) -> tuple[Locator, list[str]]:
        locator = to_locator(selector)
        if locator.uses_regex:
            needs.add("re")
        prefix = []
        if locator.needs_review:
            prefix.append(f"{INDENT}# Review: raw CSS locator for {_comment(selector)}")
        return locator, prefix

    def _click(self, step: TestStep, needs: set[str]) -> list[str]:
        locator, lines = self._locator(step.selector, needs)
        needs.add("STATE_JS")
        return [
            *lines,
            f"{INDENT}element = {locator.expression}",
            f"{INDENT}await expect(element).to_be_visible()",
            f"{INDENT}before_state = await element.evaluate(STATE_JS)",
            f"{INDENT}await element.click()",
            f"{INDENT}after_state = await element.evaluate(STATE_JS)",
            f"{INDENT}assert after_state != before_state, {_quote(step.expected_result)}",
        ]

    def _input(self, step: TestStep, needs: set[str]) -> list[str]:
        locator, lines = self._locator(step.selector, needs)
        if not step.data:
            return [*lines, f"{INDENT}await {locator.expression}.fill({_quote(PLACEHOLDER_INPUT)})"]
        valid = _quote(step.data.get("valid_input", ""))
        invalid = _quote(step.data.get("invalid_input", ""))
        return [
            *lines,
            f"{INDENT}field = {locator.expression}",
            f"{INDENT}await expect(field).to_be_visible()",
            f"{INDENT}await field.fill({valid})",
            f"{INDENT}await expect(field).to_have_value({valid})",
            f'{INDENT}await expect(field).not_to_have_attribute("aria-invalid", "true")',
            f"{INDENT}await field.fill({invalid})",
            f"{INDENT}await expect(field).to_have_value({invalid})",
            f'{INDENT}await field.press("Tab")',
            f'{INDENT}await expect(field).to_have_attribute("aria-invalid", "true")',
        ]

    def _verify(self, step: TestStep, needs: set[str]) -> list[str]:
        kind = step.assertion or AssertionKind.from_text(step.expected_result)
        if kind is None:
            return []
        locator, lines = self._locator(step.selector, needs)
        if kind == AssertionKind.VISIBLE:
            return [*lines, f"{INDENT}await expect({locator.expression}).to_be_visible()"]
        if kind == AssertionKind.ARIA:
            needs.add("ARIA_ATTRIBUTES_JS")
            return [
                *lines,
                f"{INDENT}aria_element = {locator.expression}",
                f"{INDENT}await expect(aria_element).to_be_visible()",
                f"{INDENT}aria_attrs = await aria_element.evaluate(ARIA_ATTRIBUTES_JS)",
                f"{INDENT}assert len(aria_attrs) > 0, {_quote(step.expected_result)}",
                f'{INDENT}assert await aria_element.get_attribute("role") is not None',
            ]
        needs.update({"AXE_CONTRAST_JS", "AXE_CDN_URL"})
        return [
            *lines,
            f"{INDENT}contrast_element = {locator.expression}",
            f"{INDENT}await expect(contrast_element).to_be_visible()",
            f"{INDENT}await page.add_script_tag(url=AXE_CDN_URL)",
            f"{INDENT}results = await contrast_element.evaluate(AXE_CONTRAST_JS)",
            f"{INDENT}violations = [",
            f'{INDENT}    v for v in results["violations"] if v["id"] == "color-contrast"',
            f"{INDENT}]",
            f"{INDENT}assert len(violations) == 0, {_quote(step.expected_result)}",
        ]

    def _measure(self, step: TestStep, needs: set[str]) -> list[str]:
        if not (step.data and step.data.get("metrics")):
            return [f"{INDENT}# {_comment(step.expected_result)}"]
        needs.add("TIMING_JS")
        return [
            f"{INDENT}# Metrics requested: {', '.join(map(str, step.data['metrics']))}",
            f"{INDENT}metrics = await page.evaluate(TIMING_JS)",
            f'{INDENT}assert metrics["load_time"] < {LOAD_TIME_BUDGET_MS}',
            f'{INDENT}assert metrics["dom_content_loaded"] < {DOM_READY_BUDGET_MS}',
            f'{INDENT}assert metrics["first_paint"] < {FIRST_PAINT_BUDGET_MS}',
        ]

    def _module_docstring(self, case: TestCase) -> str:
        lowered = case.name.lower()
        title = next((t for key, t in SUITE_TITLES if key in lowered), "Tests")
        lines = [f"{title}.", "", f"Target: {case.name}", "Elements tested:"]
        lines.extend(f"  - {s.selector}: {_comment(s.expected_result)}" for s in case.steps)
        return _docstring("\n".join(lines))

    def _slug(self, case: TestCase) -> str:
        return slugify(case.name) or "case"

    def _unique_filename(self, filename: str, existing: Mapping[str, str]) -> str:
        if filename not in existing:
            return filename
        stem = filename.removesuffix(GENERATED_SUFFIX)
        counter = 2
        while f"{stem}_{counter}{GENERATED_SUFFIX}" in existing:
            counter += 1
        renamed = f"{stem}_{counter}{GENERATED_SUFFIX}"
        logger.warning("duplicate_test_filename", filename=filename, renamed=renamed)
        return renamed
