import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, Optional

from pydantic import ValidationError

from ..contracts.identity_record import IdentityRecord
from ..errors import StoreCorruptError
from . import properties

logger = logging.getLogger(__name__)

PACKAGE_NAME_KEY = "package.name"
GENERATED_TIME_KEY = "generated.time"
HEADER = "Auto-generated random package name for CMFA"


class IdentityStore:
    """The single identity record of a workspace, kept in a .properties file."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.is_file()

    def load_properties(self) -> Optional[Dict[str, str]]:
        """All key/value pairs in the file, or None when it is absent"""
        if not self.path.exists():
            return None
        try:
            text = self.path.read_text(encoding="latin-1")
            return properties.loads(text)
        except (OSError, properties.PropertiesSyntaxError) as exc:
            logger.error("Cannot read identity store %s: %s", self.path, exc)
            raise StoreCorruptError(self.path, str(exc)) from exc

    def load(self) -> Optional[IdentityRecord]:
        props = self.load_properties()
        if props is None:
            return None

        identity = props.get(PACKAGE_NAME_KEY)
        if identity is None:
            logger.warning("%s has no %s entry", self.path, PACKAGE_NAME_KEY)
            return None

        try:
            return IdentityRecord(
                identity=identity,
                created_at=props.get(GENERATED_TIME_KEY, "Unknown"),
            )
        except ValidationError as exc:
            reason = f"illegal {PACKAGE_NAME_KEY} value {identity!r}"
            logger.error("Cannot read identity store %s: %s", self.path, reason)
            raise StoreCorruptError(self.path, reason) from exc

    def save(self, record: IdentityRecord) -> None:
        """Replace the file with this record (last write wins)"""
        text = properties.dumps(
            [(PACKAGE_NAME_KEY, record.identity), (GENERATED_TIME_KEY, record.created_at)],
            comments=[HEADER, record.created_at],
        )
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(prefix=self.path.name + ".", suffix=".tmp", dir=self.path.parent)
        try:
            with os.fdopen(fd, "w", encoding="latin-1", newline="\n") as f:
                f.write(text)
            os.replace(tmp, self.path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise
        logger.debug("Saved identity %s to %s", record.identity, self.path)

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()
            logger.info("Removed identity store %s", self.path)
