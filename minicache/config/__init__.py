"""Configuration module for Mini-Cache."""

from .settings import Settings, settings

__all__ = ["Settings", "settings"]
