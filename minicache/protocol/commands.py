"""
Protocol Command and Reply Definitions

This module defines the data structures for decoded commands and the
replies produced by dispatching them.
"""

from dataclasses import dataclass
from enum import Enum, auto


class CommandType(Enum):
    """Enumeration of supported command types."""
    PING = auto()
    ECHO = auto()
    SET = auto()
    SET_WITH_TTL = auto()
    GET = auto()
    UNRECOGNIZED = auto()


class ReplyKind(Enum):
    """Enumeration of reply kinds, valued by their wire prefix."""
    SIMPLE = b"+"
    NIL = b"$-1"
    ERROR = b"-"


@dataclass(frozen=True)
class Command:
    """
    Represents a decoded protocol command.

    Attributes:
        type: The type of command
        key: The key for SET, SET_WITH_TTL and GET
        value: The value for SET and SET_WITH_TTL, or the text for ECHO
        ttl_ms: Time-to-live in milliseconds for SET_WITH_TTL
        reason: Why decoding failed (UNRECOGNIZED only)
        raw: The bytes the command was decoded from
    """
    type: CommandType
    key: bytes = b""
    value: bytes = b""
    ttl_ms: int = 0
    reason: str = ""
    raw: bytes = b""

    @classmethod
    def unrecognized(cls, reason: str, raw: bytes = b"") -> "Command":
        """Create a command for input that could not be decoded."""
        return cls(type=CommandType.UNRECOGNIZED, reason=reason, raw=raw)


@dataclass(frozen=True)
class Reply:
    """
    Represents a protocol reply.

    Attributes:
        kind: SIMPLE, NIL or ERROR
        text: Reply payload (empty for NIL)
    """
    kind: ReplyKind
    text: bytes = b""

    @classmethod
    def simple(cls, text: bytes) -> "Reply":
        """Create a positive simple-string reply."""
        return cls(kind=ReplyKind.SIMPLE, text=text)

    @classmethod
    def pong(cls) -> "Reply":
        return cls.simple(b"PONG")

    @classmethod
    def ok(cls) -> "Reply":
        """Create the reply for a successful write."""
        return cls.simple(b"OK")

    @classmethod
    def nil(cls) -> "Reply":
        """Create an explicit "no value" reply."""
        return cls(kind=ReplyKind.NIL)

    @classmethod
    def error(cls, text: bytes = b"ERR") -> "Reply":
        """Create an error reply."""
        return cls(kind=ReplyKind.ERROR, text=text)
