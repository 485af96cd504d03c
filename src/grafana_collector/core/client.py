#!/usr/bin/env python3
"""Grafana API client."""

import base64
import logging

import requests

from grafana_collector.core.errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class GrafanaClient:
    """Client for the Grafana dashboard and folder APIs."""

    def __init__(
        self,
        server: str,
        token: str | None = None,
        user: str | None = None,
        password: str | None = None,
        org_id: int = 1,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        """
        Initialize Grafana client.

        Args:
            server: Grafana server URL
            token: API token or service account token (Bearer auth)
            user: Grafana username (Basic auth, used when no token is given)
            password: Grafana password
            org_id: Grafana organization ID
            timeout: Per-request timeout in seconds

        Raises:
            ConfigurationError: If the server or credentials are missing
        """
        if not server:
            raise ConfigurationError("Grafana server URL is not configured")

        self.server = server.rstrip("/")
        self.org_id = org_id
        self.timeout = timeout

        if token:
            authorization = f"Bearer {token}"
        elif user and password:
            credentials = base64.b64encode(f"{user}:{password}".encode()).decode()
            authorization = f"Basic {credentials}"
        else:
            raise ConfigurationError("Grafana credentials are not configured (token or user/password)")

        self._headers = {
            "Authorization": authorization,
            "Content-Type": "application/json",
        }
        if org_id:
            self._headers["X-Grafana-Org-Id"] = str(org_id)

    def _request(self, method: str, path: str, **kwargs) -> dict | list:
        url = f"{self.server}{path}"
        logger.debug("%s %s", method, url)
        response = requests.request(method, url, headers=self._headers, timeout=self.timeout, **kwargs)
        response.raise_for_status()
        return response.json()

    def get_folder_by_title(self, title: str) -> dict | None:
        """
        Get folder by title.

        Returns:
            Folder data if found, None otherwise

        Raises:
            requests.HTTPError: If the request fails
        """
        for folder in self._request("GET", "/api/folders"):
            if folder.get("title") == title:
                return folder
        return None

    def create_folder(self, title: str) -> dict:
        """Create a folder in Grafana."""
        return self._request("POST", "/api/folders", json={"title": title})

    def get_or_create_folder(self, title: str) -> dict:
        """Get folder by title, creating it if it doesn't exist."""
        folder = self.get_folder_by_title(title)
        if folder:
            return folder
        return self.create_folder(title)

    def upload_dashboard(
        self, dashboard_json: dict, folder_uid: str | None = None, overwrite: bool = True, message: str = None
    ) -> dict:
        """
        Upload a dashboard to Grafana.

        Args:
            dashboard_json: Dashboard JSON structure
            folder_uid: UID of the folder to place the dashboard in (None for General folder)
            overwrite: Whether to overwrite an existing dashboard with the same uid/title
            message: Version history message

        Returns:
            Response from Grafana API containing dashboard metadata

        Raises:
            requests.HTTPError: If Grafana answers with a non-2xx status
            requests.RequestException: On network errors and timeouts
        """
        payload = {
            "dashboard": dashboard_json,
            "overwrite": overwrite,
            "message": message or "Updated by grafana-collector",
        }
        if folder_uid:
            payload["folderUid"] = folder_uid

        return self._request("POST", "/api/dashboards/db", json=payload)
