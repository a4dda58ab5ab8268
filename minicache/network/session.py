"""
Protocol Session Module

A ProtocolSession drives one client connection: it reads raw bytes,
decodes them into a Command, runs the command against the session's own
ExpiringStore and writes exactly one encoded reply per read.

Each session owns its store; nothing is shared between connections, so
no locking is needed. The store is discarded when the session closes.
"""

import logging
from asyncio import StreamReader, StreamWriter
from enum import Enum, auto
from typing import Optional

from ..cache.store import ExpiringStore
from ..config.settings import settings
from ..protocol.commands import Command, CommandType, Reply
from ..protocol.parser import CommandDecoder

logger = logging.getLogger(__name__)


class SessionState(Enum):
    """Lifecycle states of a session."""
    READING = auto()
    DECODING = auto()
    DISPATCHING = auto()
    REPLYING = auto()
    CLOSED = auto()


class ProtocolSession:
    """
    Per-connection command loop.

    Attributes:
        store: The ExpiringStore owned by this connection
        decoder: The CommandDecoder used for requests and replies
        state: Current SessionState
        commands_processed: Number of replies written so far
    """

    def __init__(
            self,
            store: ExpiringStore = None,
            decoder: CommandDecoder = None,
    ):
        self.store = store if store is not None else ExpiringStore()
        self.decoder = decoder if decoder is not None else CommandDecoder()
        self.state = SessionState.READING
        self.commands_processed = 0

    def dispatch(self, command: Command) -> Reply:
        """
        Execute a decoded command on the store.

        Args:
            command: The Command object to execute

        Returns:
            Exactly one Reply for the command
        """
        if command.type == CommandType.PING:
            return Reply.pong()

        if command.type == CommandType.ECHO:
            return Reply.simple(command.value)

        if command.type == CommandType.SET:
            self.store.set(command.key, command.value)
            return Reply.ok()

        if command.type == CommandType.SET_WITH_TTL:
            self.store.set_with_ttl(command.key, command.value, command.ttl_ms)
            return Reply.ok()

        if command.type == CommandType.GET:
            value = self.store.get(command.key)
            return Reply.simple(value) if value is not None else Reply.nil()

        logger.debug(f"Unrecognized command: {command.reason} (raw={command.raw[:64]!r})")
        return Reply.error()

    def handle(self, data: bytes) -> bytes:
        """
        Decode one read, dispatch it and return the encoded reply.

        Never raises for any input; malformed requests produce an error reply.
        """
        self.state = SessionState.DECODING
        command = self.decoder.decode(data)

        self.state = SessionState.DISPATCHING
        reply = self.dispatch(command)

        self.state = SessionState.REPLYING
        self.commands_processed += 1
        return self.decoder.encode_reply(reply)

    async def run(
            self,
            reader: StreamReader,
            writer: StreamWriter,
            read_size: Optional[int] = None,
    ) -> None:
        """
        Serve the connection until the peer closes it.

        Reads and writes are the only suspension points. Transport errors
        (ConnectionError, OSError) propagate to the caller; the session is
        marked CLOSED either way.

        Args:
            reader: StreamReader for reading from the client
            writer: StreamWriter for writing to the client
            read_size: Maximum bytes per read (default from settings)
        """
        read_size = read_size or settings.READ_BUFFER_SIZE

        try:
            while True:
                self.state = SessionState.READING
                data = await reader.read(read_size)
                if not data:
                    # Peer closed the transport
                    break

                writer.write(self.handle(data))
                await writer.drain()
        finally:
            self.state = SessionState.CLOSED
