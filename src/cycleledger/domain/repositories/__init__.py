"""Repository protocol definitions for domain layer."""

from .settings import KeyValueStore

__all__ = ["KeyValueStore"]
