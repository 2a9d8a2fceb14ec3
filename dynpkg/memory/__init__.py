from .store import IdentityStore

__all__ = ["IdentityStore"]
