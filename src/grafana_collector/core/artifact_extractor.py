#!/usr/bin/env python3
"""Extract dashboards shipped inside library archives."""

import logging
import shutil
import zipfile
from collections.abc import Iterable
from pathlib import Path, PurePosixPath

from grafana_collector.core.errors import DashboardReadError

logger = logging.getLogger(__name__)


class ArtifactExtractor:
    """
    Unpacks zip/jar archives into the artifact root.

    Entries from all archives land in one tree. When two archives ship the
    same entry, the later archive wins and a warning is printed.
    """

    def __init__(self, target_dir: Path):
        self.target_dir = Path(target_dir)

    def extract(self, archives: Iterable[Path]) -> list[Path]:
        """
        Extract every file entry of the given archives.

        Args:
            archives: Archive paths, in precedence order (later overrides earlier)

        Returns:
            Sorted list of extracted file paths

        Raises:
            DashboardReadError: If an archive is missing, corrupt, or has unsafe entries
                (an archive with an unsafe entry is rejected before any of its entries is written)
        """
        self.target_dir.mkdir(parents=True, exist_ok=True)
        origins: dict[Path, Path] = {}

        for archive in archives:
            archive = Path(archive)
            print(f"Extracting {archive}")
            try:
                with zipfile.ZipFile(archive) as zf:
                    entries = [
                        (info, self._target_for(archive, info.filename)) for info in zf.infolist() if not info.is_dir()
                    ]
                    for info, target in entries:
                        if target in origins:
                            print(f"  Warning: duplicate entry {info.filename} in {archive} (already extracted from {origins[target]})")
                        target.parent.mkdir(parents=True, exist_ok=True)
                        with zf.open(info) as src, open(target, "wb") as dst:
                            shutil.copyfileobj(src, dst)
                        origins[target] = archive
                        logger.debug("Extracted %s -> %s", info.filename, target)
            except FileNotFoundError as e:
                raise DashboardReadError(archive, "archive not found") from e
            except zipfile.BadZipFile as e:
                raise DashboardReadError(archive, f"not a zip archive: {e}") from e

        return sorted(origins)

    def _target_for(self, archive: Path, name: str) -> Path:
        entry = PurePosixPath(name)
        if entry.is_absolute() or ".." in entry.parts:
            raise DashboardReadError(archive, f"unsafe archive entry: {name}")
        return self.target_dir.joinpath(*entry.parts)
