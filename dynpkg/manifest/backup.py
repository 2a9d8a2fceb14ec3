import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Optional

from ..errors import ManifestMissingError

logger = logging.getLogger(__name__)


def _atomic_copy(src: Path, dst: Path) -> None:
    fd, tmp = tempfile.mkstemp(prefix=dst.name + ".", suffix=".tmp", dir=dst.parent)
    os.close(fd)
    try:
        shutil.copyfile(src, tmp)
        os.replace(tmp, dst)
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise


class ManifestBackup:
    """
    Write-once snapshot of the pristine manifest.

    The snapshot lives next to the manifest as '<name>.backup'. Once it
    exists it is never overwritten by ensure_backup(), and restore() only
    reads it, so the original content stays recoverable across any number
    of patch/restore cycles.
    """

    def __init__(self, manifest: Path, backup: Optional[Path] = None):
        self.manifest = Path(manifest)
        self.backup = Path(backup) if backup else self.manifest.with_name(self.manifest.name + ".backup")

    @property
    def has_backup(self) -> bool:
        return self.backup.is_file()

    def ensure_backup(self) -> bool:
        """Snapshot the manifest unless a snapshot exists. True if one was written."""
        if self.has_backup:
            logger.debug("Backup %s already present, leaving it untouched", self.backup)
            return False
        if not self.manifest.is_file():
            logger.error("Cannot back up %s: file not found", self.manifest)
            raise ManifestMissingError(self.manifest)

        _atomic_copy(self.manifest, self.backup)
        logger.info("Backed up %s", self.manifest.name)
        return True

    def restore(self) -> bool:
        """Copy the snapshot over the manifest. True if anything was restored."""
        if not self.has_backup:
            logger.debug("No backup at %s, nothing to restore", self.backup)
            return False

        self.manifest.parent.mkdir(parents=True, exist_ok=True)
        _atomic_copy(self.backup, self.manifest)
        logger.info("Restored %s from backup", self.manifest.name)
        return True
