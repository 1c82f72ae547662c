from collections.abc import Iterator
from datetime import UTC, datetime
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import structlog
from playwright.async_api import Error as PlaywrightError
from typer.testing import CliRunner

import pagescribe
from pagescribe.cli import _run_analysis, app
from pagescribe.config.settings import Settings
from pagescribe.models.domain import AnalysisSnapshot, ElementAnalysis, ElementMetadata
from pagescribe.storage.artifacts import ArtifactStore

runner = CliRunner()

TIMINGS = {"load_time": 1200.0, "dom_content_loaded": 800.0, "first_paint": 1500.0}


@pytest.fixture()
def workspace(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    monkeypatch.setenv("PAGESCRIBE_WORKSPACE_DIR", str(tmp_path))
    yield tmp_path
    structlog.contextvars.clear_contextvars()


@pytest.fixture()
def saved_snapshot(workspace: Path, submit_button: ElementMetadata) -> AnalysisSnapshot:
    snapshot = AnalysisSnapshot(
        timestamp=datetime.now(UTC),
        url="https://example.com/",
        elements={"#submit": submit_button},
    )
    ArtifactStore(workspace).save_snapshot(snapshot)
    return snapshot


@pytest.mark.unit
class TestCli:
    def test_version(self) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert pagescribe.__version__ in result.output

    def test_generate_without_snapshot_fails(self, workspace: Path) -> None:
        result = runner.invoke(app, ["generate"])
        assert result.exit_code == 1
        assert not (workspace / "tests" / "generated").exists()

    def test_generate_with_malformed_snapshot_fails(self, workspace: Path) -> None:
        path = ArtifactStore(workspace).snapshot_path
        path.parent.mkdir(parents=True)
        path.write_text("[]")
        result = runner.invoke(app, ["generate"])
        assert result.exit_code == 1

    def test_generate_writes_suite(self, workspace: Path, saved_snapshot: AnalysisSnapshot) -> None:
        result = runner.invoke(app, ["generate"])
        assert result.exit_code == 0, result.output
        assert "Generated 3 test cases in 3 files" in result.output

        generated = workspace / "tests" / "generated"
        assert sorted(p.name for p in generated.iterdir()) == [
            "accessibility_test_submit_test.py",
            "conftest.py",
            "interaction_test_submit_test.py",
            "page_load_performance_test_test.py",
            "pytest.ini",
        ]

    def test_generate_suite_config_follows_settings(
        self,
        workspace: Path,
        saved_snapshot: AnalysisSnapshot,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setenv("PAGESCRIBE_RETRIES", "4")
        monkeypatch.setenv("PAGESCRIBE_PARALLEL", "false")
        result = runner.invoke(app, ["generate"])
        assert result.exit_code == 0, result.output
        config = (workspace / "tests" / "generated" / "pytest.ini").read_text()
        assert "--reruns=4" in config
        assert "-n auto" not in config

    def test_generate_relative_output_dir(
        self, workspace: Path, saved_snapshot: AnalysisSnapshot
    ) -> None:
        result = runner.invoke(app, ["generate", "--output-dir", "e2e"])
        assert result.exit_code == 0, result.output
        assert (workspace / "e2e" / "conftest.py").is_file()

    def test_generate_absolute_output_dir(
        self,
        workspace: Path,
        saved_snapshot: AnalysisSnapshot,
        tmp_path_factory: pytest.TempPathFactory,
    ) -> None:
        target = tmp_path_factory.mktemp("suite") / "elsewhere"
        result = runner.invoke(app, ["generate", "-o", str(target)])
        assert result.exit_code == 0, result.output
        assert result.exception is None
        assert (target / "conftest.py").is_file()
        assert (target / "interaction_test_submit_test.py").is_file()

    def test_generate_write_failure_exits(
        self, workspace: Path, saved_snapshot: AnalysisSnapshot
    ) -> None:
        (workspace / "blocked").write_text("a file, not a directory")
        result = runner.invoke(app, ["generate", "-o", "blocked"])
        assert result.exit_code == 1
        assert isinstance(result.exception, SystemExit)

    def test_generate_binds_command_context(
        self, workspace: Path, saved_snapshot: AnalysisSnapshot
    ) -> None:
        runner.invoke(app, ["generate"])
        assert structlog.contextvars.get_contextvars()["command"] == "generate"

    def test_analyze_prints_summary(self, workspace: Path, submit_button: ElementMetadata) -> None:
        analysis = ElementAnalysis(
            is_interactive=True,
            accessibility_score=75,
            potential_issues=["Missing ARIA attributes"],
        )
        buy = ElementMetadata(
            selector=".btn", type="button", attributes={"class": "btn", "data-testid": "buy"}
        )
        with patch(
            "pagescribe.cli._run_analysis",
            AsyncMock(
                return_value=(
                    {"#submit": submit_button, ".btn": buy},
                    {"#submit": analysis},
                    TIMINGS,
                )
            ),
        ) as run:
            result = runner.invoke(app, ["analyze", "--url", "example.com"])

        assert result.exit_code == 0, result.output
        assert run.call_args.args[1] == "https://example.com"
        assert "Found 2 interactive elements" in result.output
        assert "Element: #submit" in result.output
        assert "Priority: high" in result.output
        assert "Accessibility score: 75" in result.output
        assert "! Missing ARIA attributes" in result.output
        assert 'Suggested selector: [data-testid="buy"]' in result.output
        assert "load_time: 1200 ms\n" in result.output
        assert "first_paint: 1500 ms  (over 1000 ms budget)" in result.output

    def test_analyze_browser_failure_exits(self, workspace: Path) -> None:
        with patch(
            "pagescribe.cli._run_analysis",
            AsyncMock(side_effect=PlaywrightError("net::ERR_NAME_NOT_RESOLVED")),
        ):
            result = runner.invoke(app, ["analyze", "--url", "https://nowhere.invalid"])
        assert result.exit_code == 1

    def test_analyze_missing_rules_file_exits(self, workspace: Path) -> None:
        with patch("pagescribe.cli._run_analysis", AsyncMock()) as run:
            result = runner.invoke(app, ["analyze", "--rules", str(workspace / "missing.yaml")])
        assert result.exit_code == 1
        run.assert_not_called()

    def test_analyze_passes_rules(self, workspace: Path) -> None:
        rules_path = workspace / "rules.yaml"
        rules_path.write_text("element_types: [button]\n")
        with patch(
            "pagescribe.cli._run_analysis", AsyncMock(return_value=({}, {}, TIMINGS))
        ) as run:
            result = runner.invoke(app, ["analyze", "--rules", str(rules_path)])
        assert result.exit_code == 0, result.output
        assert run.call_args.args[2].rules.element_types == ["button"]
        assert "Found 0 interactive elements" in result.output


@pytest.mark.unit
class TestRunAnalysis:
    @pytest.fixture()
    def browser(self) -> Iterator[MagicMock]:
        with patch("pagescribe.cli.BrowserManager") as manager_cls:
            browser = manager_cls.return_value
            browser.launch = AsyncMock()
            browser.close = AsyncMock()
            yield browser

    async def test_closes_browser_when_launch_fails(
        self, browser: MagicMock, tmp_path: Path
    ) -> None:
        browser.launch.side_effect = PlaywrightError("Executable doesn't exist")
        with pytest.raises(PlaywrightError):
            await _run_analysis(
                Settings(workspace_dir=str(tmp_path)), "https://x.test", None, False
            )
        browser.close.assert_awaited_once()

    async def test_scans_page_and_measures_timings(
        self, browser: MagicMock, mock_page: AsyncMock, tmp_path: Path
    ) -> None:
        mock_page.evaluate = AsyncMock(return_value=TIMINGS)
        browser.new_page = AsyncMock(return_value=mock_page)

        elements, analyses, timings = await _run_analysis(
            Settings(workspace_dir=str(tmp_path), timeout=9000), "https://example.com/", None, False
        )

        assert (elements, analyses) == ({}, {})
        assert timings == TIMINGS
        browser.new_page.assert_awaited_once_with(timeout_ms=9000)
        mock_page.goto.assert_awaited_once_with("https://example.com/", timeout=9000)
        assert ArtifactStore(tmp_path).snapshot_path.is_file()
        browser.close.assert_awaited_once()
