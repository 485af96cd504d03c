#!/usr/bin/env python3
"""Upload collected dashboards to Grafana."""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path

import requests

from grafana_collector.core.client import GrafanaClient
from grafana_collector.core.collector import DashboardFailure
from grafana_collector.core.errors import RootNotFoundError, UploadError

logger = logging.getLogger(__name__)


@dataclass
class UploadResult:
    """Outcome of one upload run."""

    uploaded: list[str] = field(default_factory=list)
    failures: list[DashboardFailure] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.uploaded)

    @property
    def ok(self) -> bool:
        return not self.failures


class DashboardUploader:
    """Uploads every dashboard JSON file of a directory, one request per dashboard."""

    def __init__(
        self,
        client: GrafanaClient,
        folder: str | None = None,
        fail_fast: bool = False,
        message: str | None = None,
    ):
        """
        Initialize the uploader.

        Args:
            client: GrafanaClient used for all requests
            folder: Optional folder title all dashboards are placed in
            fail_fast: Raise on the first failed dashboard instead of recording it
            message: Version history message sent with each dashboard
        """
        self.client = client
        self.folder = folder
        self.fail_fast = fail_fast
        self.message = message

    def upload_directory(self, output_dir: Path) -> UploadResult:
        """
        Upload all <name>.json files found in output_dir.

        Returns:
            UploadResult listing uploaded dashboards and failures

        Raises:
            RootNotFoundError: If output_dir does not exist
            UploadError: On the first failure when fail_fast is set
        """
        output_dir = Path(output_dir)
        if not output_dir.is_dir():
            raise RootNotFoundError(output_dir)

        json_files = sorted(path for path in output_dir.glob("*.json") if path.is_file())
        result = UploadResult()
        if not json_files:
            print(f"No dashboards to upload in {output_dir}")
            return result

        print(f"Found {len(json_files)} dashboards to upload")
        folder_uid = self._resolve_folder()

        for json_file in json_files:
            try:
                title = self.upload_file(json_file, folder_uid)
            except UploadError as e:
                if self.fail_fast:
                    raise
                result.failures.append(DashboardFailure(json_file, e))
                print(f"  ✗ Failed to upload {json_file.name}: {e}")
                continue

            result.uploaded.append(json_file.stem)
            print(f"  ✓ Uploaded: {title}")

        return result

    def upload_file(self, json_file: Path, folder_uid: str | None = None) -> str:
        """
        Upload a single dashboard file.

        Returns:
            Dashboard title (or file name when the dashboard has none)

        Raises:
            UploadError: If the file is not valid JSON or the request fails
        """
        try:
            dashboard_json = json.loads(json_file.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise UploadError(json_file, f"invalid dashboard JSON: {e}") from e

        if not isinstance(dashboard_json, dict):
            raise UploadError(json_file, "dashboard JSON must be an object")

        try:
            self.client.upload_dashboard(dashboard_json, folder_uid=folder_uid, message=self.message)
        except requests.RequestException as e:
            raise UploadError(json_file, self._describe(e)) from e

        return dashboard_json.get("title", json_file.name)

    def _resolve_folder(self) -> str | None:
        if not self.folder:
            return None
        try:
            folder = self.client.get_or_create_folder(self.folder)
        except requests.RequestException as e:
            print(f"  Warning: Failed to get/create folder '{self.folder}': {self._describe(e)}")
            return None
        print(f"  Using folder: {self.folder}")
        return folder["uid"]

    @staticmethod
    def _describe(error: requests.RequestException) -> str:
        response = getattr(error, "response", None)
        if response is not None:
            return f"{response.status_code} {response.text}"
        return str(error)
