"""
Async TCP Server Module

This module implements the asynchronous TCP server for Mini-Cache.

Every accepted connection gets its own ProtocolSession, and with it its
own ExpiringStore. Data written on one connection is not visible on any
other connection.
"""

import asyncio
import logging
from asyncio import StreamReader, StreamWriter
from typing import Optional, Set

from ..config.settings import settings
from .session import ProtocolSession

logger = logging.getLogger(__name__)


class CacheServer:
    """
    Asynchronous TCP server for the Mini-Cache service.

    Each client connection is handled in a separate coroutine spawned
    by asyncio.start_server, so sessions run concurrently without
    threading.

    Usage:
        server = CacheServer(host='127.0.0.1', port=6379)
        await server.start()  # Runs forever

    Attributes:
        host: Server bind address
        port: Server port number
    """

    def __init__(self, host: str = None, port: int = None):
        """
        Initialize the server.

        Args:
            host: Bind address (default from settings)
            port: Port number (default from settings)
        """
        self.host = host if host is not None else settings.HOST
        self.port = port if port is not None else settings.PORT

        # Server state
        self._server: Optional[asyncio.Server] = None
        self._running = False
        self._sessions: Set[ProtocolSession] = set()
        self._connection_count = 0
        self._total_commands = 0

    async def handle_client(
            self,
            reader: StreamReader,
            writer: StreamWriter
    ) -> None:
        """
        Handle a single client connection.

        Runs a fresh ProtocolSession until the client disconnects or the
        transport fails. A transport failure ends only this connection.

        Args:
            reader: StreamReader for reading from the client
            writer: StreamWriter for writing to the client
        """
        addr = writer.get_extra_info('peername')
        self._connection_count += 1
        logger.debug(f"Client connected: {addr}")

        session = ProtocolSession()
        self._sessions.add(session)

        try:
            await session.run(reader, writer)
            logger.debug(f"Client disconnected: {addr}")
        except ConnectionError:
            # Reset, aborted or broken pipe
            logger.debug(f"Connection lost: {addr}")
        except asyncio.CancelledError:
            logger.debug(f"Session cancelled: {addr}")
            raise
        except Exception as exc:  # Log unexpected errors but keep server alive
            logger.exception(f"Error handling client {addr}: {exc}")
        finally:
            self._sessions.discard(session)
            self._total_commands += session.commands_processed
            logger.debug(
                f"Discarding store for {addr} "
                f"({session.store.size()} keys, {session.commands_processed} commands)"
            )
            try:
                writer.close()
                await writer.wait_closed()
            except (ConnectionError, OSError):
                pass

    async def start(self) -> None:
        """
        Start the server and begin accepting connections.

        Runs until cancelled or until stop() is called.

        Example:
            server = CacheServer(port=6379)
            asyncio.run(server.start())
        """
        if self._running:
            return

        self._server = await asyncio.start_server(
            self.handle_client,
            self.host,
            self.port,
        )
        self._running = True

        addrs = ', '.join(str(sock.getsockname()) for sock in self._server.sockets or [])
        logger.info(f"Serving on {addrs}")

        try:
            async with self._server:
                await self._server.serve_forever()
        except asyncio.CancelledError:
            # Expected during shutdown/fixture cleanup
            logger.debug("Server start cancelled")
        finally:
            self._running = False

    async def stop(self) -> None:
        """
        Stop the server gracefully.

        Closes the listening socket and waits for it to fully shut down.
        """
        if self._server is None:
            return

        self._server.close()
        try:
            await self._server.wait_closed()
        finally:
            self._server = None
            self._running = False

    def is_running(self) -> bool:
        """Check if the server is currently running."""
        return self._running

    def get_stats(self) -> dict:
        """
        Get server statistics.

        Returns:
            Dictionary with connection counts and the number of commands
            processed by sessions that have finished, plus those still open.
        """
        live_commands = sum(s.commands_processed for s in self._sessions)
        return {
            "running": self._running,
            "host": self.host,
            "port": self.port,
            "total_connections": self._connection_count,
            "active_sessions": len(self._sessions),
            "total_commands": self._total_commands + live_commands,
        }


async def run_server(host: str = None, port: int = None) -> None:
    """
    Convenience function to create and run the server.

    Usage:
        asyncio.run(run_server(port=6379))
    """
    server = CacheServer(host=host, port=port)

    try:
        await server.start()
    except asyncio.CancelledError:
        logger.info("Server shutdown requested")
    finally:
        await server.stop()
