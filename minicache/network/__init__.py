"""Network module for Mini-Cache."""

from .session import ProtocolSession, SessionState
from .tcp_server import CacheServer, run_server

__all__ = ["ProtocolSession", "SessionState", "CacheServer", "run_server"]
