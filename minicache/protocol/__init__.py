"""Protocol module for Mini-Cache."""

from .commands import Command, CommandType, Reply, ReplyKind
from .parser import CommandDecoder, encode_command

__all__ = [
    "Command",
    "CommandType",
    "Reply",
    "ReplyKind",
    "CommandDecoder",
    "encode_command",
]
