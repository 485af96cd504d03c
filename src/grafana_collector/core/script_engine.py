#!/usr/bin/env python3
"""Jsonnet script engine for scripted dashboards."""

import json
import logging
import threading
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

import _jsonnet

from grafana_collector.core.errors import ScriptEvaluationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClasspathSet:
    """Ordered library search path made available to dashboard scripts."""

    entries: tuple[Path, ...] = ()

    @classmethod
    def from_paths(cls, *groups: Iterable[Path | str] | None) -> "ClasspathSet":
        """
        Build a classpath from one or more groups of paths.

        Groups are concatenated in order (e.g. the project's own libraries
        followed by an extra classpath). Duplicates keep their first position.

        Args:
            groups: Iterables of paths; None groups are ignored

        Returns:
            A new ClasspathSet
        """
        seen = []
        for group in groups:
            if group is None:
                continue
            for entry in group:
                path = Path(entry)
                if path not in seen:
                    seen.append(path)
        return cls(tuple(seen))

    def as_jpathdir(self) -> list[str]:
        return [str(entry) for entry in self.entries]

    def __len__(self) -> int:
        return len(self.entries)


class JsonnetScriptEngine:
    """
    Evaluates dashboard scripts written in Jsonnet.

    The classpath is handed to Jsonnet as its library search path, so scripts
    can ``import`` shared helpers (grafonnet, project libraries, ...).
    A script's final value must be a string holding the dashboard JSON.
    With ``allow_objects`` an object result is accepted too and manifested
    as JSON.
    """

    def __init__(self, classpath: ClasspathSet | None = None, allow_objects: bool = False):
        """
        Initialize the engine.

        Args:
            classpath: Optional classpath; when given the engine is ready to evaluate
            allow_objects: Accept object results and return them as manifested JSON
        """
        self._classpath = None
        self._lock = threading.Lock()
        self.allow_objects = allow_objects
        if classpath is not None:
            self.initialize(classpath)

    @property
    def classpath(self) -> ClasspathSet | None:
        return self._classpath

    def initialize(self, classpath: ClasspathSet):
        """Configure the library search path used by every later evaluation."""
        self._classpath = classpath
        logger.debug("Script engine classpath: %s", classpath.as_jpathdir())

    def evaluate(self, source_text: str, filename: str = "<script>") -> str:
        """
        Evaluate a dashboard script.

        Args:
            source_text: Jsonnet program text
            filename: Name reported in errors; relative imports resolve against its directory

        Returns:
            Dashboard JSON text

        Raises:
            ScriptEvaluationError: If the engine is not initialized, the script fails,
                or its final value is not a string (or an object, with allow_objects)
        """
        if self._classpath is None:
            raise ScriptEvaluationError(filename, "script engine is not initialized")

        with self._lock:
            try:
                output = _jsonnet.evaluate_snippet(
                    str(filename),
                    source_text,
                    jpathdir=self._classpath.as_jpathdir(),
                )
            except RuntimeError as e:
                raise ScriptEvaluationError(filename, str(e).strip()) from e

        value = json.loads(output)
        if isinstance(value, str):
            return value
        if isinstance(value, dict) and self.allow_objects:
            return output
        expected = "a string or an object" if self.allow_objects else "a string"
        raise ScriptEvaluationError(filename, f"script must evaluate to {expected}, got {type(value).__name__}")
