"""Pytest configuration and shared fixtures."""

import tempfile
from pathlib import Path

import pytest


class SourceTree:
    """Helper for laying out dashboard source roots in a test directory."""

    def __init__(self, base_path: Path):
        self.base_path = base_path
        self.directory_root = base_path / "grafana"
        self.artifact_root = base_path / "build" / "grafana"
        self.output_dir = base_path / "build" / "grafana-dashboards"
        self.directory_root.mkdir(parents=True)
        self.artifact_root.mkdir(parents=True)

    def add(self, root: Path, relative_path: str, content: str | bytes) -> Path:
        """Write a file below the given root, creating parent directories."""
        path = root / relative_path
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_bytes(content.encode("utf-8"))
        return path

    def add_dir(self, relative_path: str, content: str | bytes) -> Path:
        return self.add(self.directory_root, relative_path, content)

    def add_artifact(self, relative_path: str, content: str | bytes) -> Path:
        return self.add(self.artifact_root, relative_path, content)

    def output(self, name: str) -> Path:
        return self.output_dir / f"{name}.json"

    def output_names(self) -> list[str]:
        return sorted(path.name for path in self.output_dir.glob("*.json"))


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def source_tree(temp_dir):
    """
    Fixture with an empty directory root, artifact root and output location.

    Usage:
        source_tree.add_dir("alpha.json", '{"a":1}')
        source_tree.add_artifact("lib/beta.jsonnet", "'{}'")
        source_tree.output("alpha").read_text()
    """
    return SourceTree(temp_dir)
