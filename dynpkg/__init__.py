"""
dynpkg - build-time package identity provisioning and asset fetching.
"""

from __future__ import annotations

__all__ = [
    "BuildPipeline",
    "PipelineConfig",
    "IdentityRecord",
    "AssetSpec",
    "DynPkgError",
    "StoreCorruptError",
    "ManifestMissingError",
    "AssetFetchError",
]

__version__ = "1.0.0"

from .config import PipelineConfig
from .contracts.asset_spec import AssetSpec
from .contracts.identity_record import IdentityRecord
from .errors import AssetFetchError, DynPkgError, ManifestMissingError, StoreCorruptError
from .pipeline import BuildPipeline
