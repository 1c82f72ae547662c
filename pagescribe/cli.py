"""Command line entry point: ``pagescribe analyze`` and ``pagescribe generate``."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import TYPE_CHECKING, Annotated, Optional

import structlog
import typer
from playwright.async_api import Error as PlaywrightError

import pagescribe
from pagescribe.analyzer.browser import BrowserManager
from pagescribe.analyzer.element import ElementAnalyzer
from pagescribe.analyzer.website import WebsiteAnalyzer
from pagescribe.config.logging import setup_logging
from pagescribe.config.settings import Settings, get_settings
from pagescribe.constants import (
    CANDIDATE_SELECTOR,
    DOM_READY_BUDGET_MS,
    FIRST_PAINT_BUDGET_MS,
    LOAD_TIME_BUDGET_MS,
    NAVIGATION_ATTEMPTS,
)
from pagescribe.exceptions import (
    ConfigError,
    GeneratorError,
    SnapshotError,
    SnapshotNotFoundError,
    StorageError,
)
from pagescribe.generator.case_builder import TestCaseGenerator
from pagescribe.generator.code_builder import TestCodeGenerator
from pagescribe.rules.engine import RulesEngine
from pagescribe.storage.artifacts import ArtifactStore
from pagescribe.utils.helpers import (
    generate_unique_selector,
    measure_performance,
    prioritize_elements,
    wait_for_element,
)
from pagescribe.utils.retry import retry
from pagescribe.utils.sanitize import sanitize_url
from pagescribe.utils.timing import timed

if TYPE_CHECKING:
    from pagescribe.models.domain import ElementAnalysis, ElementMetadata

app = typer.Typer(add_completion=False, help="Generate Playwright tests from a page scan.")

logger = structlog.get_logger(__name__)


def version_callback(value: bool) -> None:
    if value:
        typer.echo(f"pagescribe, version {pagescribe.__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        Optional[bool],
        typer.Option("--version", callback=version_callback, is_eager=True, help="Show version."),
    ] = None,
) -> None:
    """Scan a page for interactive elements and synthesize tests from the scan."""
    settings = get_settings()
    structlog.contextvars.clear_contextvars()
    setup_logging(log_level=settings.log_level, json_output=settings.json_logs)


@app.command()
def analyze(
    url: Annotated[
        Optional[str], typer.Option("--url", "-u", help="Page to analyze (defaults to base URL).")
    ] = None,
    rules_file: Annotated[
        Optional[Path],
        typer.Option("--rules", "-r", help="YAML analyzer rules (element allowlist, exclusions)."),
    ] = None,
    screenshot: Annotated[
        bool, typer.Option(help="Save a full-page screenshot after the scan.")
    ] = False,
) -> None:
    """Scan a page and write the analysis snapshot."""
    settings = get_settings()
    target = sanitize_url(url or settings.base_url)
    structlog.contextvars.bind_contextvars(command="analyze", url=target)
    rules_path = rules_file or (Path(settings.rules_file) if settings.rules_file else None)
    try:
        rules = RulesEngine.from_file(rules_path) if rules_path else None
    except ConfigError as e:
        logger.error("rules_invalid", error=str(e))
        raise typer.Exit(code=1) from e

    logger.info("analysis_started", browser=settings.browser.value)
    try:
        elements, analyses, timings = asyncio.run(
            _run_analysis(settings, target, rules, screenshot)
        )
    except PlaywrightError as e:
        logger.error("analysis_failed", error=str(e))
        raise typer.Exit(code=1) from e

    typer.echo(f"Found {len(elements)} interactive elements")
    _echo_summary(elements, analyses, rules or RulesEngine())
    _echo_timings(timings)


@app.command()
def generate(
    output_dir: Annotated[
        Optional[Path], typer.Option("--output-dir", "-o", help="Directory for generated tests.")
    ] = None,
) -> None:
    """Generate test modules from the last analysis snapshot."""
    settings = get_settings()
    structlog.contextvars.bind_contextvars(command="generate")
    store = ArtifactStore(Path(settings.workspace_dir))
    try:
        snapshot = store.load_snapshot()
    except SnapshotNotFoundError as e:
        logger.error("snapshot_missing", error=str(e), hint='Run "pagescribe analyze" first.')
        raise typer.Exit(code=1) from e
    except SnapshotError as e:
        logger.error("snapshot_invalid", error=str(e))
        raise typer.Exit(code=1) from e

    logger.info("generation_started", url=snapshot.url, elements=len(snapshot.elements))
    with timed("test_generation"):
        cases = TestCaseGenerator(snapshot.elements).generate_suite()
        code_generator = TestCodeGenerator()
        try:
            test_files = code_generator.generate_files(cases)
        except GeneratorError as e:
            logger.error("generation_failed", error=str(e))
            raise typer.Exit(code=1) from e
        files = {**test_files, **code_generator.render_support_files(settings)}

    target = output_dir or Path(settings.output_dir)
    # Absolute targets are written through a store rooted at the target itself
    if target.is_absolute():
        writer, relative = ArtifactStore(target), Path(".")
    else:
        writer, relative = store, target
    try:
        writer.write_test_files(files, relative)
    except StorageError as e:
        logger.error("test_files_write_failed", directory=str(target), error=str(e))
        raise typer.Exit(code=1) from e
    typer.echo(f"Generated {len(cases)} test cases in {len(test_files)} files under {target}")


async def _run_analysis(
    settings: Settings, url: str, rules: RulesEngine | None, screenshot: bool
) -> tuple[dict[str, ElementMetadata], dict[str, ElementAnalysis], dict[str, float]]:
    browser = BrowserManager(browser_name=settings.browser, headless=settings.headless)
    store = ArtifactStore(Path(settings.workspace_dir))
    try:
        await browser.launch()
        page = await browser.new_page(timeout_ms=settings.timeout)
        navigate = retry(max_attempts=NAVIGATION_ATTEMPTS, retry_on=(PlaywrightError,))(page.goto)
        await navigate(url, timeout=settings.timeout)
        await wait_for_element(page, CANDIDATE_SELECTOR)

        analyzer = WebsiteAnalyzer(page, store, element_analyzer=ElementAnalyzer(), rules=rules)
        with timed("page_scan"):
            elements = await analyzer.analyze_page()
        timings = await measure_performance(page)
        if screenshot:
            path = store.screenshot_path("analyzed-page")
            await page.screenshot(path=str(path), full_page=True)
            logger.info("screenshot_saved", path=str(path))
        return elements, analyzer.analyses, timings
    finally:
        await browser.close()


def _echo_summary(
    elements: dict[str, ElementMetadata],
    analyses: dict[str, ElementAnalysis],
    rules: RulesEngine,
) -> None:
    for metadata in prioritize_elements(elements.values()):
        label = metadata.accessibility.label if metadata.accessibility else ""
        priority = rules.priority_for(f"{metadata.selector} {label}")
        analysis = analyses.get(metadata.selector)
        typer.echo(f"\nElement: {metadata.selector}")
        suggested = generate_unique_selector(metadata)
        if suggested != metadata.selector:
            typer.echo(f"  Suggested selector: {suggested}")
        typer.echo(f"  Type: {metadata.type}")
        typer.echo(f"  Interactable: {metadata.interactable}")
        typer.echo(f"  Visible: {metadata.visibility}")
        typer.echo(f"  Priority: {priority.value if priority else '-'}")
        if analysis:
            typer.echo(f"  Accessibility score: {analysis.accessibility_score}")
            for issue in analysis.potential_issues:
                typer.echo(f"    ! {issue}")


def _echo_timings(timings: dict[str, float]) -> None:
    typer.echo("\nPage timings:")
    for key, budget in (
        ("load_time", LOAD_TIME_BUDGET_MS),
        ("dom_content_loaded", DOM_READY_BUDGET_MS),
        ("first_paint", FIRST_PAINT_BUDGET_MS),
    ):
        value = timings.get(key, 0.0)
        marker = "" if value < budget else f"  (over {budget} ms budget)"
        typer.echo(f"  {key}: {value:.0f} ms{marker}")


if __name__ == "__main__":
    app()
