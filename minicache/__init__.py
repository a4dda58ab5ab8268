"""
Mini-Cache: Per-Connection Expiring Key-Value Cache

A minimal in-memory key-value cache server built with Python asyncio,
speaking a small subset of the RESP array protocol over raw TCP sockets.
"""

__version__ = "1.0.0"
