"""
Sequential download-and-place of the build's external data files.
"""
from __future__ import annotations

import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional

import requests

from ..contracts.asset_spec import AssetSpec
from ..errors import AssetFetchError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


@dataclass
class AssetReport:
    downloaded: List[Path] = field(default_factory=list)
    failed: List[AssetFetchError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


class AssetProvisioner:
    """
    Downloads AssetSpecs strictly in order, one at a time.

    Each file is streamed into a temporary sibling and moved over the
    destination only once the transfer completed. Nothing is retried.
    By default the first failure aborts the run; with continue_on_error
    the failure is recorded in the report and the next spec is processed.
    """

    def __init__(
        self,
        root: Path,
        session: Optional[requests.Session] = None,
        timeout: float = 60.0,
        continue_on_error: bool = False,
    ):
        self.root = Path(root)
        self.session = session or requests.Session()
        self.timeout = timeout
        self.continue_on_error = continue_on_error

    def destination(self, spec: AssetSpec) -> Path:
        path = Path(spec.destination_path)
        return path if path.is_absolute() else self.root / path

    def fetch(self, spec: AssetSpec) -> Path:
        """Download one spec, overwriting whatever is at its destination"""
        target = self.destination(spec)
        target.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(prefix=target.name + ".", suffix=".part", dir=target.parent)
        try:
            with os.fdopen(fd, "wb") as out:
                with self.session.get(spec.source_url, stream=True, timeout=self.timeout) as response:
                    response.raise_for_status()
                    for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                        if chunk:
                            out.write(chunk)
            os.replace(tmp, target)
        except requests.RequestException as exc:
            Path(tmp).unlink(missing_ok=True)
            logger.error("Download of %s failed: %s", spec.source_url, exc)
            raise AssetFetchError(spec.source_url, exc) from exc
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise

        logger.info("%s downloaded to %s", target.name, target)
        return target

    def provision(self, specs: Iterable[AssetSpec]) -> AssetReport:
        report = AssetReport()
        for spec in specs:
            try:
                report.downloaded.append(self.fetch(spec))
            except AssetFetchError as exc:
                if not self.continue_on_error:
                    raise
                logger.warning("Continuing after failed download of %s", exc.url)
                report.failed.append(exc)
        return report

    def discard(self, specs: Iterable[AssetSpec]) -> List[Path]:
        """Delete previously downloaded files; absent files are skipped"""
        removed = []
        for spec in specs:
            target = self.destination(spec)
            if target.is_file():
                target.unlink()
                removed.append(target)
                logger.info("Removed %s", target)
        return removed

