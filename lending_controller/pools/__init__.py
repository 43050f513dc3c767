"""Pool gateway implementations."""
from .memory import InMemoryPools

__all__ = ["InMemoryPools"]
