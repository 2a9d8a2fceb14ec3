"""
Error kinds raised by the provisioning pipeline.
"""
from __future__ import annotations

from pathlib import Path
from typing import Optional


class DynPkgError(Exception):
    """Base class for all pipeline failures."""


class StoreCorruptError(DynPkgError):
    """The identity properties file exists but cannot be parsed."""

    def __init__(self, path: Path, reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"identity store {self.path} is corrupt: {reason}")


class ManifestMissingError(DynPkgError):
    """The working manifest is absent."""

    def __init__(self, path: Path):
        self.path = Path(path)
        super().__init__(f"manifest not found: {self.path}")


class AssetFetchError(DynPkgError):
    """Downloading one asset failed (network error or non-2xx response)."""

    def __init__(self, url: str, cause: Optional[BaseException] = None):
        self.url = url
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"failed to fetch {url}{detail}")
