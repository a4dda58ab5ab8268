"""
Pytest Configuration and Fixtures

This module provides shared fixtures and configuration for all tests.
"""

import asyncio
import socket
import pytest
import pytest_asyncio
from contextlib import closing
from typing import AsyncGenerator, Union

from minicache.cache.store import ExpiringStore
from minicache.network.session import ProtocolSession
from minicache.network.tcp_server import CacheServer
from minicache.protocol.parser import CommandDecoder, encode_command


def find_free_port() -> int:
    """Find an available port for testing."""
    with closing(socket.socket(socket.AF_INET, socket.SOCK_STREAM)) as s:
        s.bind(('', 0))
        s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        return s.getsockname()[1]


# ============================================================================
# Store Fixtures
# ============================================================================

@pytest.fixture
def store() -> ExpiringStore:
    """Create a fresh ExpiringStore instance."""
    return ExpiringStore()


# ============================================================================
# Protocol Fixtures
# ============================================================================

@pytest.fixture
def decoder() -> CommandDecoder:
    """Create a CommandDecoder instance."""
    return CommandDecoder()


@pytest.fixture
def session() -> ProtocolSession:
    """Create a ProtocolSession with its own store."""
    return ProtocolSession()


# ============================================================================
# Server Fixtures
# ============================================================================

@pytest.fixture
def server_port() -> int:
    """Get a free port for server testing."""
    return find_free_port()


@pytest_asyncio.fixture
async def server(server_port: int) -> AsyncGenerator[CacheServer, None]:
    """
    Create and start a server instance for testing.

    This fixture:
    1. Creates a CacheServer on a random free port
    2. Starts it in a background task
    3. Yields the server for testing
    4. Cleans up after the test
    """
    srv = CacheServer(host='127.0.0.1', port=server_port)

    # Start server in background task
    server_task = asyncio.create_task(srv.start())

    # Wait for server to be ready
    await asyncio.sleep(0.1)

    yield srv

    # Cleanup
    await srv.stop()
    server_task.cancel()
    try:
        await server_task
    except asyncio.CancelledError:
        pass


# ============================================================================
# Client Fixtures
# ============================================================================

class AsyncClient:
    """
    Helper class for testing server interactions.

    Sends commands as RESP arrays and reads back one reply line.

    Usage:
        async with AsyncClient('127.0.0.1', 6379) as client:
            response = await client.send_command("set", "key", "value")
            assert response == "+OK"
    """

    def __init__(self, host: str, port: int):
        self.host = host
        self.port = port
        self.reader = None
        self.writer = None

    async def connect(self) -> None:
        """Establish connection to server."""
        self.reader, self.writer = await asyncio.open_connection(
            self.host, self.port
        )

    async def disconnect(self) -> None:
        """Close connection to server."""
        if self.writer:
            self.writer.close()
            try:
                await self.writer.wait_closed()
            except (ConnectionError, OSError):
                pass

    async def send_raw(self, data: bytes) -> str:
        """
        Send raw bytes and receive the reply.

        Returns:
            Reply line without the trailing delimiter (e.g. "+PONG")
        """
        self.writer.write(data)
        await self.writer.drain()

        response = await self.reader.readline()
        return response.decode().rstrip('\r\n')

    async def send_command(self, *args: Union[str, bytes]) -> str:
        """Encode the arguments as a RESP array, send it and return the reply."""
        return await self.send_raw(encode_command(*args))

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.disconnect()


@pytest.fixture
def client_factory(server_port: int):
    """
    Factory fixture to create test clients.

    Usage:
        async def test_something(server, client_factory):
            async with client_factory() as client:
                response = await client.send_command("get", "key")
    """
    def factory() -> AsyncClient:
        return AsyncClient('127.0.0.1', server_port)
    return factory


# ============================================================================
# Pytest Configuration
# ============================================================================

def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
