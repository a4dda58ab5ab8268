#!/usr/bin/env python3
"""
Interactive Test Client for Mini-Cache

A simple command-line client for manually testing the Mini-Cache server.
Typed commands are split on whitespace and sent as RESP arrays.

Usage:
    python scripts/client.py                  # Connect to 127.0.0.1:6379
    python scripts/client.py --host 1.2.3.4   # Connect to specific host
    python scripts/client.py --port 8080      # Connect to specific port

Commands:
    ping                      - Check the server is alive
    echo <text>               - Echo text back
    set <key> <value>         - Store a key-value pair
    set <key> <value> px <ms> - Store with a TTL in milliseconds
    get <key>                 - Retrieve a value
    help                      - Show this help
    exit                      - Exit client
"""

import argparse
import socket
import sys

from minicache.config.settings import settings
from minicache.protocol.parser import encode_command

# Enable command history with arrow keys (works on Unix systems)
try:
    import readline  # noqa: F401
except ImportError:
    pass  # readline not available on Windows by default


class CacheClient:
    """Simple TCP client for Mini-Cache."""

    def __init__(self, host: str, port: int, timeout: float = 5.0):
        self.host = host
        self.port = port
        self.timeout = timeout
        self.socket = None

    def connect(self) -> bool:
        """Connect to the server."""
        try:
            self.socket = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
            self.socket.settimeout(self.timeout)
            self.socket.connect((self.host, self.port))
            return True
        except OSError as e:
            print(f"Connection error: {e}")
            return False

    def disconnect(self):
        """Disconnect from the server."""
        if self.socket:
            try:
                self.socket.close()
            except OSError:
                pass
            self.socket = None

    def send_command(self, *args: str) -> str:
        """Send one command as a RESP array and receive the reply line."""
        if not self.socket:
            return "ERROR: Not connected"

        try:
            self.socket.sendall(encode_command(*args))

            # Receive response
            response = b''
            while not response.endswith(settings.DELIMITER):
                chunk = self.socket.recv(4096)
                if not chunk:
                    return "ERROR: Connection closed by server"
                response += chunk

            return response.decode('utf-8', errors='replace').rstrip('\r\n')

        except socket.timeout:
            return "ERROR: Request timed out"
        except OSError as e:
            return f"ERROR: {e}"

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.disconnect()


def print_help():
    """Print help message."""
    print("""
Mini-Cache Commands:
--------------------
  ping                      Check the server is alive (+PONG)
  echo <text>               Echo text back
  set <key> <value>         Store a key-value pair
  set <key> <value> px <ms> Store with a TTL in milliseconds
  get <key>                 Retrieve the value for a key ($-1 if absent)

Client Commands:
----------------
  help                      Show this help message
  exit                      Exit the client
  reconnect                 Reconnect to the server (starts an empty store)
  status                    Show connection status

Note: every connection has its own store; data is lost on disconnect.
""")


def main():
    parser = argparse.ArgumentParser(
        description="Interactive test client for Mini-Cache"
    )
    parser.add_argument(
        "--host",
        type=str,
        default=settings.HOST,
        help=f"Server host (default: {settings.HOST})"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=settings.PORT,
        help=f"Server port (default: {settings.PORT})"
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=5.0,
        help="Socket timeout in seconds (default: 5.0)"
    )

    args = parser.parse_args()

    print("Mini-Cache Client")
    print("=================")
    print(f"Connecting to {args.host}:{args.port}...")

    client = CacheClient(args.host, args.port, args.timeout)

    if not client.connect():
        print("Failed to connect. Is the server running?")
        print(f"  Try: python -m minicache.server --port {args.port}")
        sys.exit(1)

    print("Connected! Type 'help' for commands.\n")

    try:
        while True:
            try:
                command = input(">>> ").strip()

                if not command:
                    continue

                lower_cmd = command.lower()

                if lower_cmd == "help":
                    print_help()
                    continue

                if lower_cmd in ("exit", "quit"):
                    print("Goodbye!")
                    break

                if lower_cmd == "reconnect":
                    client.disconnect()
                    if client.connect():
                        print("Reconnected!")
                    else:
                        print("Reconnection failed.")
                    continue

                if lower_cmd == "status":
                    status = "Connected" if client.socket else "Disconnected"
                    print(f"Status: {status}")
                    print(f"Server: {args.host}:{args.port}")
                    continue

                print(client.send_command(*command.split()))

            except EOFError:
                print("\nGoodbye!")
                break

    except KeyboardInterrupt:
        print("\n\nInterrupted. Goodbye!")
    finally:
        client.disconnect()


if __name__ == "__main__":
    main()
