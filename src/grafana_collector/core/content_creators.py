#!/usr/bin/env python3
"""Turn dashboard source files into dashboard JSON text."""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from pathlib import Path

from grafana_collector.core.errors import DashboardReadError
from grafana_collector.core.script_engine import JsonnetScriptEngine


def read_text(path: Path) -> str:
    """Read a file as UTF-8, raising DashboardReadError on failure."""
    try:
        return Path(path).read_bytes().decode("utf-8")
    except OSError as e:
        raise DashboardReadError(path, e.strerror or str(e)) from e
    except UnicodeDecodeError as e:
        raise DashboardReadError(path, f"not valid UTF-8: {e}") from e


class DashboardContentCreator(ABC):
    """Produces the JSON content of a dashboard from one source file."""

    kind = ""

    @abstractmethod
    def is_supported(self, path: Path) -> bool:
        """Return True if this creator can handle the file."""

    @abstractmethod
    def create_content(self, path: Path) -> str:
        """Return the dashboard JSON text for the file."""


class StaticContentCreator(DashboardContentCreator):
    """Dashboards authored directly as JSON files."""

    kind = "static"

    def is_supported(self, path: Path) -> bool:
        return Path(path).suffix.lower() == ".json"

    def create_content(self, path: Path) -> str:
        return read_text(path)


class ScriptContentCreator(DashboardContentCreator):
    """Dashboards generated by evaluating a script."""

    kind = "script"

    def __init__(self, engine: JsonnetScriptEngine, extensions: Sequence[str] = (".jsonnet",)):
        """
        Initialize the script content creator.

        Args:
            engine: Initialized script engine shared by all scripts of a run
            extensions: File extensions treated as dashboard scripts
        """
        self.engine = engine
        self.extensions = tuple(ext.lower() for ext in extensions)

    def is_supported(self, path: Path) -> bool:
        return Path(path).suffix.lower() in self.extensions

    def create_content(self, path: Path) -> str:
        script = read_text(path)
        return self.engine.evaluate(script, filename=str(path))


def select_creator(path: Path, creators: Sequence[DashboardContentCreator]) -> DashboardContentCreator | None:
    """Return the first creator supporting the file, or None."""
    for creator in creators:
        if creator.is_supported(path):
            return creator
    return None
