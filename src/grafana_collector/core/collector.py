#!/usr/bin/env python3
"""Collect dashboards from source roots into a flat output directory."""

import logging
import os
import tempfile
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

from grafana_collector.core.content_creators import DashboardContentCreator, select_creator
from grafana_collector.core.errors import (
    DashboardReadError,
    DashboardWriteError,
    RootNotFoundError,
    ScriptEvaluationError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DashboardSource:
    """A discovered dashboard source file."""

    path: Path
    kind: str


@dataclass(frozen=True)
class Dashboard:
    """A resolved dashboard ready to be written."""

    name: str
    content: str
    source: DashboardSource


@dataclass(frozen=True)
class DashboardFailure:
    """A dashboard that could not be collected or uploaded."""

    path: Path
    error: Exception

    def __str__(self) -> str:
        return str(self.error)


@dataclass
class CollectionResult:
    """Outcome of one collection run."""

    output_dir: Path
    dashboards: dict[str, Dashboard] = field(default_factory=dict)
    failures: list[DashboardFailure] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.dashboards)

    @property
    def ok(self) -> bool:
        return not self.failures


class DashboardCollector:
    """
    Collects static and scripted dashboards into one output directory.

    The artifact root (dashboards shipped by libraries) is processed first and
    the directory root (dashboards authored in the project) second, so a
    project dashboard always replaces a library dashboard of the same name.
    """

    def __init__(
        self,
        output_dir: Path,
        creators: Sequence[DashboardContentCreator],
        fail_fast: bool = True,
        clean: bool = False,
    ):
        """
        Initialize the collector.

        Args:
            output_dir: Directory receiving one <name>.json file per dashboard
            creators: Content creators in priority order
            fail_fast: Raise on the first per-file error instead of recording it
            clean: Remove existing *.json files from output_dir before collecting
        """
        self.output_dir = Path(output_dir)
        self.creators = list(creators)
        self.fail_fast = fail_fast
        self.clean = clean

    @staticmethod
    def dashboard_name(path: Path) -> str:
        return Path(path).stem

    @staticmethod
    def _list_files(root: Path) -> list[Path]:
        return sorted(path for path in root.rglob("*") if path.is_file())

    def collect(self, directory_root: Path | None = None, artifact_root: Path | None = None) -> CollectionResult:
        """
        Resolve every dashboard source under the configured roots.

        Args:
            directory_root: Dashboards authored in the project
            artifact_root: Dashboards extracted from library artifacts

        Returns:
            CollectionResult with the written dashboards and recorded failures

        Raises:
            RootNotFoundError: If a configured root does not exist
            DashboardReadError: On a per-file read failure when fail_fast is set
            ScriptEvaluationError: On a per-file script failure when fail_fast is set
            DashboardWriteError: If the output directory or a dashboard file cannot be written
        """
        roots = [Path(root) for root in (artifact_root, directory_root) if root is not None]
        for root in roots:
            if not root.is_dir():
                raise RootNotFoundError(root)

        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            if self.clean:
                self._clean_output_dir()
        except OSError as e:
            raise DashboardWriteError(self.output_dir, e.strerror or str(e)) from e

        result = CollectionResult(output_dir=self.output_dir)
        for root in roots:
            logger.debug("Scanning %s", root)
            for path in self._list_files(root):
                dashboard = self._resolve(path, result)
                if dashboard is None:
                    continue

                previous = result.dashboards.get(dashboard.name)
                if previous is not None:
                    print(
                        f"  Warning: dashboard '{dashboard.name}' from {previous.source.path} "
                        f"overridden by {dashboard.source.path}"
                    )

                self._write(dashboard)
                result.dashboards[dashboard.name] = dashboard

        return result

    def _resolve(self, path: Path, result: CollectionResult) -> Dashboard | None:
        creator = select_creator(path, self.creators)
        if creator is None:
            logger.debug("Skipping %s: no content creator supports it", path)
            return None

        try:
            content = creator.create_content(path)
        except (DashboardReadError, ScriptEvaluationError) as e:
            if self.fail_fast:
                raise
            result.failures.append(DashboardFailure(path, e))
            print(f"  ✗ Failed: {path}: {e}")
            return None

        return Dashboard(
            name=self.dashboard_name(path),
            content=content,
            source=DashboardSource(path=path, kind=creator.kind),
        )

    def _write(self, dashboard: Dashboard):
        """Replace <output_dir>/<name>.json with the dashboard content."""
        target = self.output_dir / f"{dashboard.name}.json"
        try:
            fd, tmp_name = tempfile.mkstemp(dir=self.output_dir, prefix=f".{dashboard.name}.", suffix=".tmp")
        except OSError as e:
            raise DashboardWriteError(target, e.strerror or str(e)) from e
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(dashboard.content.encode("utf-8"))
            os.replace(tmp_name, target)
        except OSError as e:
            Path(tmp_name).unlink(missing_ok=True)
            raise DashboardWriteError(target, e.strerror or str(e)) from e
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.debug("Wrote %s (%s source %s)", target, dashboard.source.kind, dashboard.source.path)

    def _clean_output_dir(self):
        for stale in self.output_dir.glob("*.json"):
            if stale.is_file():
                stale.unlink()
                logger.debug("Removed stale dashboard %s", stale)
