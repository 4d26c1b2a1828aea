from .in_memory import InMemoryTwoFactorAttributeStore

__all__ = [
    "InMemoryTwoFactorAttributeStore",
]
