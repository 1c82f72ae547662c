"""File-backed storage for the analysis snapshot and generated test modules.

All paths are resolved under a single base directory with traversal
protection, so generated filenames can never escape the workspace.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING

import structlog
from pydantic import ValidationError

from pagescribe.constants import ARTIFACTS_DIR, SNAPSHOT_DIR, SNAPSHOT_FILENAME
from pagescribe.exceptions import SnapshotError, SnapshotNotFoundError, StorageError
from pagescribe.models.domain import AnalysisSnapshot

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = structlog.get_logger(__name__)


class ArtifactStore:
    """Reads and writes pipeline artifacts below a workspace directory."""

    def __init__(self, base_dir: Path | None = None) -> None:
        self._base = (base_dir or Path.cwd()).resolve()

    @property
    def base_dir(self) -> Path:
        return self._base

    def _safe_path(self, *parts: str | Path) -> Path:
        """Resolve path with traversal protection."""
        path = (self._base / Path(*parts)).resolve()
        if not path.is_relative_to(self._base):
            msg = f"Path traversal detected: {'/'.join(str(p) for p in parts)}"
            raise StorageError(msg)
        return path

    @property
    def snapshot_path(self) -> Path:
        return self._safe_path(SNAPSHOT_DIR, SNAPSHOT_FILENAME)

    def save_snapshot(self, snapshot: AnalysisSnapshot) -> Path:
        """Write the snapshot as indented JSON, creating the directory if absent."""
        path = self.snapshot_path
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(snapshot.model_dump_json(indent=2), encoding="utf-8")
        except OSError as e:
            msg = f"Could not write snapshot to {path}: {e}"
            raise StorageError(msg) from e
        logger.info("snapshot_saved", path=str(path), elements=len(snapshot.elements))
        return path

    def load_snapshot(self) -> AnalysisSnapshot:
        """Read the snapshot written by the analysis phase."""
        path = self.snapshot_path
        if not path.is_file():
            msg = f"Analysis results not found at {path}"
            raise SnapshotNotFoundError(msg)
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
            snapshot = AnalysisSnapshot.model_validate(raw)
        except (json.JSONDecodeError, ValidationError) as e:
            msg = f"Malformed snapshot at {path}: {e}"
            raise SnapshotError(msg) from e
        logger.debug("snapshot_loaded", path=str(path), elements=len(snapshot.elements))
        return snapshot

    def write_test_files(self, files: Mapping[str, str], output_dir: str | Path) -> list[Path]:
        """Write generated test modules into output_dir (relative to the base)."""
        target = self._safe_path(output_dir)
        written: list[Path] = []
        try:
            target.mkdir(parents=True, exist_ok=True)
            for filename, content in files.items():
                path = self._safe_path(output_dir, filename)
                path.write_text(content, encoding="utf-8")
                logger.debug("test_file_written", path=str(path))
                written.append(path)
        except OSError as e:
            msg = f"Could not write test files to {target}: {e}"
            raise StorageError(msg) from e
        logger.info("test_files_written", directory=str(target), count=len(written))
        return written

    def screenshot_path(self, name: str) -> Path:
        """Get path for a debug screenshot."""
        screenshots_dir = self._safe_path(ARTIFACTS_DIR)
        screenshots_dir.mkdir(parents=True, exist_ok=True)
        return screenshots_dir / f"{name}.png"
