"""Cache module for Mini-Cache."""

from .store import ExpiringStore

__all__ = ["ExpiringStore"]
