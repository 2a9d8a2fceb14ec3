#!/usr/bin/env python3
"""
Explicit build provisioning pipeline.

Assembly order:  backup -> ensure identity -> patch -> assets -> package
Clean order:     discard assets -> restore manifest
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import requests

from .assets.provisioner import AssetProvisioner, AssetReport
from .config import PipelineConfig, get_default_config
from .contracts.identity_record import IdentityRecord
from .errors import AssetFetchError, ManifestMissingError
from .identity.generator import IdentityGenerator
from .identity.provisioning import ProvisionResult, provision_identity, regenerate_identity
from .manifest.backup import ManifestBackup
from .manifest.patcher import ManifestPatcher, PatchResult
from .memory.store import IdentityStore
from .utils.jsonl import append_jsonl, read_jsonl
from .utils.time_utils import format_duration, get_current_utc_time

logger = logging.getLogger(__name__)


@dataclass
class ApplyResult:
    provision: ProvisionResult
    patch: PatchResult
    backed_up: bool

    @property
    def identity(self) -> str:
        return self.provision.identity


@dataclass
class PrepareResult:
    apply: ApplyResult
    assets: AssetReport


@dataclass
class AssembleResult:
    prepare: PrepareResult
    output: Any


@dataclass
class CleanResult:
    removed_assets: List[Path]
    restored: bool


class BuildPipeline:
    def __init__(
        self,
        config: Optional[PipelineConfig] = None,
        session: Optional[requests.Session] = None,
        generator: Optional[IdentityGenerator] = None,
    ):
        self.config = config or get_default_config()
        self.store = IdentityStore(self.config.properties)
        self.generator = generator or IdentityGenerator(self.config.identity_length)
        self.backup = ManifestBackup(self.config.manifest, self.config.backup)
        self.patcher = ManifestPatcher(
            self.config.manifest,
            base_token=self.config.base_token,
            suffix=self.config.identity_suffix,
        )
        self.assets = AssetProvisioner(
            self.config.workspace,
            session=session,
            timeout=self.config.download_timeout,
            continue_on_error=self.config.continue_on_error,
        )

    def _record(self, event: str, **data: Any) -> None:
        journal = self.config.journal
        if journal is None:
            return
        try:
            append_jsonl(str(journal), {"event": event, **data})
        except OSError as exc:
            logger.warning("Failed to record %s in %s: %s", event, journal, exc)

    def history(self, event: Optional[str] = None) -> List[Dict[str, Any]]:
        """Journal entries, optionally only those of one event kind"""
        journal = self.config.journal
        return read_jsonl(str(journal), event=event) if journal is not None else []

    # -- identity ---------------------------------------------------------

    def show_identity(self) -> Optional[IdentityRecord]:
        return self.store.load()

    def ensure_identity(self) -> ProvisionResult:
        result = provision_identity(self.store, self.generator)
        event = "identity_generated" if result.generated else "identity_reused"
        self._record(event, identity=result.identity)
        return result

    def regenerate_identity(self) -> ProvisionResult:
        result = regenerate_identity(self.store, self.generator)
        self._record("identity_generated", identity=result.identity, regenerated=True)
        return result

    # -- manifest ---------------------------------------------------------

    def apply_identity(self) -> ApplyResult:
        """
        Back up the manifest, make sure an identity exists and patch it in.

        A missing manifest skips the backup but the identity is still
        provisioned; the patch step then raises ManifestMissingError.
        """
        try:
            backed_up = self.backup.ensure_backup()
        except ManifestMissingError as exc:
            logger.warning("Skipping manifest backup: %s", exc)
            backed_up = False
        if backed_up:
            self._record("manifest_backed_up", backup=str(self.backup.backup))

        provision = self.ensure_identity()
        patch = self.patcher.apply_identity(provision.identity)
        self._record(
            "manifest_patched",
            identity=provision.identity,
            replacements=patch.replacements,
            already_patched=patch.already_patched,
        )
        return ApplyResult(provision=provision, patch=patch, backed_up=backed_up)

    def restore_manifest(self) -> bool:
        restored = self.backup.restore()
        if restored:
            self._record("manifest_restored", manifest=str(self.backup.manifest))
            if self.patcher.count_token() == 0:
                logger.warning(
                    "Restored manifest %s contains no '%s'; the backup may have been taken after patching",
                    self.backup.manifest,
                    self.patcher.base_token,
                )
        return restored

    # -- assets -----------------------------------------------------------

    def provision_assets(self) -> AssetReport:
        try:
            report = self.assets.provision(self.config.assets)
        except AssetFetchError as exc:
            self._record("asset_failed", url=exc.url, error=str(exc.cause))
            raise
        for path in report.downloaded:
            self._record("asset_downloaded", path=str(path))
        for failure in report.failed:
            self._record("asset_failed", url=failure.url, error=str(failure.cause))
        return report

    # -- composite --------------------------------------------------------

    def prepare(self) -> PrepareResult:
        apply = self.apply_identity()
        assets = self.provision_assets()
        return PrepareResult(apply=apply, assets=assets)

    def assemble(self, packager: Callable[[], Any]) -> AssembleResult:
        """Run every provisioning step, then hand over to the packaging step"""
        started = get_current_utc_time()
        prepared = self.prepare()
        logger.info("Provisioning finished in %s, packaging", format_duration(started))
        return AssembleResult(prepare=prepared, output=packager())

    def clean(self) -> CleanResult:
        removed = self.assets.discard(self.config.assets)
        if removed:
            self._record("assets_discarded", paths=[str(p) for p in removed])
        restored = self.restore_manifest()
        return CleanResult(removed_assets=removed, restored=restored)
