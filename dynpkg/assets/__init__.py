from .provisioner import AssetProvisioner, AssetReport

__all__ = ["AssetProvisioner", "AssetReport"]
