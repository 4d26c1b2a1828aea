from .attribute_store import InMemoryTwoFactorAttributeStore

__all__ = [
    "InMemoryTwoFactorAttributeStore",
]
