from .backup import ManifestBackup
from .patcher import ManifestPatcher, PatchResult

__all__ = ["ManifestBackup", "ManifestPatcher", "PatchResult"]
