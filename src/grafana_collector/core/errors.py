#!/usr/bin/env python3
"""Exceptions raised by grafana-collector."""

from pathlib import Path


class CollectorError(Exception):
    """Base class for all grafana-collector errors."""


class ConfigurationError(CollectorError):
    """A required option is missing or invalid."""


class RootNotFoundError(CollectorError):
    """A configured source root does not exist."""

    def __init__(self, root: Path):
        self.root = Path(root)
        super().__init__(f"source root not found: {self.root}")


class DashboardReadError(CollectorError):
    """A dashboard source or archive could not be read."""

    def __init__(self, path: Path, reason: str):
        self.path = Path(path)
        super().__init__(f"cannot read file: path={self.path}: {reason}")


class ScriptEvaluationError(CollectorError):
    """A dashboard script failed to evaluate to dashboard JSON."""

    def __init__(self, filename: str, reason: str):
        self.filename = str(filename)
        super().__init__(f"cannot eval dashboard script: file={self.filename}: {reason}")


class UploadError(CollectorError):
    """A dashboard could not be uploaded to Grafana."""

    def __init__(self, path: Path, reason: str):
        self.path = Path(path)
        super().__init__(f"cannot upload dashboard: file={self.path}: {reason}")


class DashboardWriteError(CollectorError):
    """A collected dashboard could not be written to the output directory."""

    def __init__(self, path: Path, reason: str):
        self.path = Path(path)
        super().__init__(f"cannot write file: path={self.path}: {reason}")
