"""
Configuration for the build provisioning pipeline
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from .contracts.asset_spec import AssetSpec

CONFIG = {
    "WORKSPACE": os.getenv("DYNPKG_WORKSPACE", "."),
    "MANIFEST_PATH": os.getenv("DYNPKG_MANIFEST_PATH", "app/src/main/AndroidManifest.xml"),
    "PROPERTIES_FILE": os.getenv("DYNPKG_PROPERTIES_FILE", "dynamic_package.properties"),
    "JOURNAL_PATH": os.getenv("DYNPKG_JOURNAL_PATH", ".dynpkg/events.jsonl"),
    "LOG_LEVEL": os.getenv("DYNPKG_LOG_LEVEL", "INFO"),
    "CONTINUE_ON_ERROR": os.getenv("DYNPKG_CONTINUE_ON_ERROR", "false").lower() == "true",
    "DOWNLOAD_TIMEOUT": float(os.getenv("DYNPKG_DOWNLOAD_TIMEOUT", "60")),
}

BASE_TOKEN = "com.github.metacubex.clash.meta"
IDENTITY_SUFFIX = ".action"

ASSETS_DIR = "app/src/main/assets"
GEO_RELEASE_URL = "https://github.com/MetaCubeX/meta-rules-dat/releases/download/latest"

DEFAULT_ASSETS = [
    AssetSpec(source_url=f"{GEO_RELEASE_URL}/geoip.metadb", destination_path=f"{ASSETS_DIR}/geoip.metadb"),
    AssetSpec(source_url=f"{GEO_RELEASE_URL}/geosite.dat", destination_path=f"{ASSETS_DIR}/geosite.dat"),
    AssetSpec(source_url=f"{GEO_RELEASE_URL}/GeoLite2-ASN.mmdb", destination_path=f"{ASSETS_DIR}/ASN.mmdb"),
]


@dataclass
class PipelineConfig:
    """Everything the pipeline needs; relative paths resolve against the workspace"""
    workspace: Path = field(default_factory=lambda: Path(CONFIG["WORKSPACE"]))
    manifest_path: Path = field(default_factory=lambda: Path(CONFIG["MANIFEST_PATH"]))
    properties_file: Path = field(default_factory=lambda: Path(CONFIG["PROPERTIES_FILE"]))
    journal_path: Optional[Path] = field(default_factory=lambda: Path(CONFIG["JOURNAL_PATH"]))

    # Manifest rewrite
    base_token: str = BASE_TOKEN
    identity_suffix: str = IDENTITY_SUFFIX
    identity_length: int = 12

    # Asset provisioning
    assets: List[AssetSpec] = field(default_factory=lambda: list(DEFAULT_ASSETS))
    continue_on_error: bool = field(default_factory=lambda: CONFIG["CONTINUE_ON_ERROR"])
    download_timeout: float = field(default_factory=lambda: CONFIG["DOWNLOAD_TIMEOUT"])

    def __post_init__(self):
        self.workspace = Path(self.workspace)
        self.manifest_path = Path(self.manifest_path)
        self.properties_file = Path(self.properties_file)
        if self.journal_path is not None:
            self.journal_path = Path(self.journal_path)
        self.assets = [a if isinstance(a, AssetSpec) else AssetSpec(**a) for a in self.assets]

    def resolve(self, path: Path) -> Path:
        """Anchor a relative path at the workspace root"""
        path = Path(path)
        return path if path.is_absolute() else self.workspace / path

    @property
    def manifest(self) -> Path:
        return self.resolve(self.manifest_path)

    @property
    def backup(self) -> Path:
        manifest = self.manifest
        return manifest.with_name(manifest.name + ".backup")

    @property
    def properties(self) -> Path:
        return self.resolve(self.properties_file)

    @property
    def journal(self) -> Optional[Path]:
        return self.resolve(self.journal_path) if self.journal_path is not None else None


def load_config_from_file(config_path: str, **overrides: Any) -> PipelineConfig:
    """
    Load pipeline configuration from a JSON file

    Args:
        config_path: Path to config file
        overrides: Keyword values that win over the file

    Returns:
        PipelineConfig object
    """
    config_file = Path(config_path)

    if not config_file.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_file, encoding="utf-8") as f:
        data: Dict[str, Any] = json.load(f)

    known = set(PipelineConfig.__dataclass_fields__)
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"Unknown config keys: {', '.join(unknown)}")

    data.update({k: v for k, v in overrides.items() if v is not None})
    return PipelineConfig(**data)


def get_default_config() -> PipelineConfig:
    """Get default configuration"""
    return PipelineConfig()


# Example config file for reference
EXAMPLE_CONFIG = {
    "workspace": ".",
    "manifest_path": "app/src/main/AndroidManifest.xml",
    "properties_file": "dynamic_package.properties",
    "identity_length": 12,
    "continue_on_error": False,
    "download_timeout": 60,
    "assets": [
        {"source_url": f"{GEO_RELEASE_URL}/geosite.dat", "destination_path": f"{ASSETS_DIR}/geosite.dat"},
    ],
}
