#!/usr/bin/env python3
"""Configuration manager for grafana-collector."""

import os
from pathlib import Path

import yaml

from grafana_collector.core.errors import ConfigurationError

CONFIG_KEYS = ("server", "token", "user", "password", "org-id")


class GrafanaConfigManager:
    """Manager for the grafanactl-compatible context file."""

    def __init__(self, context: str | None = None):
        """
        Initialize config manager and determine config file path.

        Args:
            context: Optional context name. If None, the file's current-context is used.
        """
        self._config_path = self._find_config_path()
        self._config = None  # Lazy load
        self._context = context

    def _find_config_path(self) -> Path:
        """
        Find the path to the config file.

        Returns the path even if the file doesn't exist yet (for creating new configs).
        Lookup order:
        1. $XDG_CONFIG_HOME/grafanactl/config.yaml
        2. $HOME/.config/grafanactl/config.yaml
        3. $XDG_CONFIG_DIRS/grafanactl/config.yaml (first existing)

        Raises:
            ConfigurationError: If no location can be determined
        """
        xdg_config_home = os.environ.get("XDG_CONFIG_HOME")
        if xdg_config_home:
            config_path = Path(xdg_config_home) / "grafanactl" / "config.yaml"
            if config_path.exists():
                return config_path

        home = os.environ.get("HOME")
        if home:
            config_path = Path(home) / ".config" / "grafanactl" / "config.yaml"
            if config_path.exists() or not xdg_config_home:
                return config_path

        xdg_config_dirs = os.environ.get("XDG_CONFIG_DIRS")
        if xdg_config_dirs:
            for config_dir in xdg_config_dirs.split(":"):
                config_path = Path(config_dir) / "grafanactl" / "config.yaml"
                if config_path.exists():
                    return config_path

        if xdg_config_home:
            return Path(xdg_config_home) / "grafanactl" / "config.yaml"
        if home:
            return Path(home) / ".config" / "grafanactl" / "config.yaml"

        raise ConfigurationError("could not determine config file location (set HOME or XDG_CONFIG_HOME)")

    @property
    def config_path(self) -> Path:
        return self._config_path

    def load(self) -> dict:
        """Load the configuration file, returning the cached copy if already loaded."""
        if self._config is not None:
            return self._config

        if not self._config_path.exists():
            self._config = {"contexts": {}}
            return self._config

        with open(self._config_path) as f:
            self._config = yaml.safe_load(f) or {"contexts": {}}

        return self._config

    def save(self):
        """Write the configuration back to disk with 0600 permissions."""
        if self._config is None:
            return

        self._config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self._config_path, "w") as f:
            yaml.dump(self._config, f, default_flow_style=False, sort_keys=False)
        self._config_path.chmod(0o600)

    def add_context(
        self,
        name: str,
        server: str,
        token: str | None = None,
        user: str | None = None,
        password: str | None = None,
        org_id: int = 1,
    ):
        """Add or replace a context."""
        config = self.load()
        config.setdefault("contexts", {})

        grafana = {"server": server}
        if token:
            grafana["token"] = token
        if user:
            grafana["user"] = user
        if password:
            grafana["password"] = password
        grafana["org-id"] = org_id

        config["contexts"][name] = {"grafana": grafana}
        self.save()

    def _resolve_context_name(self) -> str:
        if self._context:
            return self._context

        current_context = self.get_current_context()
        if current_context:
            return current_context

        raise ConfigurationError(
            "no context specified; set GRAFANA_CONTEXT, pass --grafana-context, or run 'config use <name>'"
        )

    def get_context(self, name: str | None = None) -> dict:
        """
        Get a context's Grafana configuration.

        Args:
            name: Optional context name. If None, resolved from init param or current-context.

        Returns:
            Dictionary with server, credentials and org-id

        Raises:
            ConfigurationError: If the context doesn't exist or lacks server/credentials
        """
        if name is None:
            name = self._resolve_context_name()

        contexts = self.load().get("contexts") or {}
        if name not in contexts:
            available = ", ".join(contexts) or "none"
            raise ConfigurationError(f"context '{name}' not found in {self._config_path} (available: {available})")

        grafana_config = dict(contexts[name].get("grafana") or {})
        if not grafana_config.get("server"):
            raise ConfigurationError(f"context '{name}' is missing required field: server")
        if not has_credentials(grafana_config):
            raise ConfigurationError(f"context '{name}' is missing authentication (token or user/password)")

        grafana_config.setdefault("org-id", 1)
        return grafana_config

    def list_contexts(self) -> list[str]:
        return list((self.load().get("contexts") or {}).keys())

    def get_current_context(self) -> str | None:
        return self.load().get("current-context")

    def use_context(self, name: str):
        """
        Set the current context.

        Raises:
            ConfigurationError: If context doesn't exist
        """
        config = self.load()
        if name not in (config.get("contexts") or {}):
            raise ConfigurationError(f"context '{name}' not found")

        config["current-context"] = name
        self.save()

    def delete_context(self, name: str):
        """
        Delete a context, clearing current-context if it pointed at it.

        Raises:
            ConfigurationError: If context doesn't exist
        """
        config = self.load()
        if name not in (config.get("contexts") or {}):
            raise ConfigurationError(f"context '{name}' not found")

        del config["contexts"][name]
        if config.get("current-context") == name:
            config["current-context"] = None

        self.save()

    def set_value(self, path: str, value: str):
        """
        Set a config value using dot notation (contexts.<name>.grafana.<key>).

        Raises:
            ConfigurationError: If the path or value is invalid
        """
        parts = path.split(".")
        if len(parts) != 4 or parts[0] != "contexts" or parts[2] != "grafana":
            raise ConfigurationError("path must be in format: contexts.<name>.grafana.<key>")

        context_name, key = parts[1], parts[3]
        if key not in CONFIG_KEYS:
            raise ConfigurationError(f"unknown key '{key}' (expected one of: {', '.join(CONFIG_KEYS)})")

        if key == "org-id":
            try:
                value = int(value)
            except ValueError:
                raise ConfigurationError(f"org-id must be an integer, got: {value}") from None

        config = self.load()
        contexts = config.setdefault("contexts", {})
        context = contexts.setdefault(context_name, {})
        context.setdefault("grafana", {})[key] = value

        self.save()


def has_credentials(grafana_config: dict) -> bool:
    return bool(grafana_config.get("token")) or (
        bool(grafana_config.get("user")) and bool(grafana_config.get("password"))
    )


def resolve_grafana_settings(url: str | None = None, token: str | None = None, context: str | None = None) -> dict:
    """
    Resolve the Grafana server and credentials for an upload.

    An explicit URL and token take precedence. Missing values are filled in
    from the selected context of the config file.

    Returns:
        Dictionary with server, credentials and org-id

    Raises:
        ConfigurationError: If no server or no credentials can be resolved
    """
    if url and token:
        return {"server": url, "token": token, "org-id": 1}

    settings = GrafanaConfigManager(context=context).get_context()
    if url:
        settings["server"] = url
    if token:
        settings["token"] = token
    return settings
