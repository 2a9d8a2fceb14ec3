from .generator import IdentityGenerator
from .provisioning import ProvisionOutcome, ProvisionResult, provision_identity, regenerate_identity

__all__ = [
    "IdentityGenerator",
    "ProvisionOutcome",
    "ProvisionResult",
    "provision_identity",
    "regenerate_identity",
]
