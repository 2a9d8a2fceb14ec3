from .asset_spec import AssetSpec
from .identity_record import IdentityRecord

__all__ = ["AssetSpec", "IdentityRecord"]
