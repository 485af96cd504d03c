"""Core library classes for grafana-collector."""

from .artifact_extractor import ArtifactExtractor
from .client import GrafanaClient
from .collector import CollectionResult, Dashboard, DashboardCollector, DashboardFailure, DashboardSource
from .config_manager import GrafanaConfigManager, resolve_grafana_settings
from .content_creators import DashboardContentCreator, ScriptContentCreator, StaticContentCreator
from .errors import (
    CollectorError,
    ConfigurationError,
    DashboardReadError,
    DashboardWriteError,
    RootNotFoundError,
    ScriptEvaluationError,
    UploadError,
)
from .script_engine import ClasspathSet, JsonnetScriptEngine
from .uploader import DashboardUploader, UploadResult

__all__ = [
    "ArtifactExtractor",
    "ClasspathSet",
    "CollectionResult",
    "CollectorError",
    "ConfigurationError",
    "Dashboard",
    "DashboardCollector",
    "DashboardContentCreator",
    "DashboardFailure",
    "DashboardReadError",
    "DashboardSource",
    "DashboardUploader",
    "DashboardWriteError",
    "GrafanaClient",
    "GrafanaConfigManager",
    "JsonnetScriptEngine",
    "RootNotFoundError",
    "ScriptContentCreator",
    "ScriptEvaluationError",
    "StaticContentCreator",
    "UploadError",
    "UploadResult",
    "resolve_grafana_settings",
]
