"""
Protocol Decoder Module

This module turns the bytes of one transport read into a Command and
encodes Reply objects back into wire bytes.

Request grammar (minimal subset of a RESP array):

    *<count>\\r\\n$<len>\\r\\n<verb>\\r\\n$<len>\\r\\n<arg>\\r\\n ...

After splitting on the delimiter, the first token is the array header and
the remaining tokens come in (length marker, payload) pairs. Only the
payloads are used:

    ping                        -> +PONG
    echo <text>                 -> +<text>
    set <key> <value>           -> +OK
    set <key> <value> <opt> <ttl_ms>
                                -> +OK
    get <key>                   -> +<value> | $-1

Known limitations:
    - A command split across two reads is not reassembled.
    - Several commands in one read are not pipelined; only the first
      array is interpreted.
    - Payloads containing the delimiter are not supported; length
      markers are not used to frame payloads.
"""

import logging
from typing import Callable, Dict, List, Union

from .commands import Command, CommandType, Reply
from ..config.settings import settings

logger = logging.getLogger(__name__)


class CommandDecoder:
    """
    Decoder for the Mini-Cache request protocol.

    decode() never raises: any input that cannot be interpreted yields a
    Command of type UNRECOGNIZED carrying the reason.
    """

    def __init__(self):
        self.delimiter = settings.DELIMITER
        self.max_ttl_ms = settings.MAX_TTL_MS
        self.max_ttl_digits = len(str(settings.MAX_TTL_MS))
        self._verbs: Dict[bytes, Callable[[List[bytes], bytes], Command]] = {
            b"ping": self._decode_ping,
            b"echo": self._decode_echo,
            b"set": self._decode_set,
            b"get": self._decode_get,
        }

    def decode(self, data: bytes) -> Command:
        """
        Decode the bytes of one read into a Command.

        Args:
            data: Exactly the bytes returned by one transport read

        Returns:
            The decoded Command, or an UNRECOGNIZED Command for empty,
            malformed or incomplete requests.

        Examples:
            >>> decoder = CommandDecoder()
            >>> cmd = decoder.decode(b"*2\\r\\n$4\\r\\necho\\r\\n$2\\r\\nhi\\r\\n")
            >>> cmd.type == CommandType.ECHO
            True
            >>> cmd.value
            b'hi'
        """
        raw = bytes(data)
        tokens = self._tokenize(raw)
        if not tokens:
            return Command.unrecognized("empty request", raw)

        args = self._payloads(tokens[1:])
        if not args:
            return Command.unrecognized("missing command verb", raw)

        handler = self._verbs.get(args[0])
        if handler is None:
            return Command.unrecognized(f"unknown command {args[0]!r}", raw)

        return handler(args, raw)

    def _tokenize(self, raw: bytes) -> List[bytes]:
        """Split on the delimiter, dropping the empty token after a final delimiter."""
        tokens = raw.split(self.delimiter)
        if tokens and tokens[-1] == b"":
            tokens.pop()
        return tokens

    @staticmethod
    def _payloads(body: List[bytes]) -> List[bytes]:
        """
        Consume (length marker, payload) pairs and keep the payloads.

        A trailing marker with no payload after it is dropped, so the
        argument it announced counts as missing.
        """
        return [payload for _marker, payload in zip(body[0::2], body[1::2])]

    def _decode_ping(self, args: List[bytes], raw: bytes) -> Command:
        return Command(type=CommandType.PING, raw=raw)

    def _decode_echo(self, args: List[bytes], raw: bytes) -> Command:
        """
        Decode an ECHO command.

        Format: echo <text>
        """
        if len(args) < 2:
            return Command.unrecognized("echo: missing text", raw)

        return Command(type=CommandType.ECHO, value=args[1], raw=raw)

    def _decode_get(self, args: List[bytes], raw: bytes) -> Command:
        """
        Decode a GET command.

        Format: get <key>
        """
        if len(args) < 2:
            return Command.unrecognized("get: missing key", raw)

        return Command(type=CommandType.GET, key=args[1], raw=raw)

    def _decode_set(self, args: List[bytes], raw: bytes) -> Command:
        """
        Decode a SET command.

        Format: set <key> <value> [<option> <ttl_ms>]

        The option name is not inspected; the TTL is always milliseconds.
        """
        if len(args) < 2:
            return Command.unrecognized("set: missing key", raw)
        if len(args) < 3:
            return Command.unrecognized("set: missing value", raw)

        key, value = args[1], args[2]
        if len(args) < 5:
            return Command(type=CommandType.SET, key=key, value=value, raw=raw)

        ttl_token = args[4]
        # bytes.isdigit() is ASCII-only and rejects signs and whitespace
        if not ttl_token.isdigit():
            return Command.unrecognized(f"set: invalid ttl {ttl_token!r}", raw)

        # Length check first: int() refuses very long digit strings
        if len(ttl_token.lstrip(b"0")) > self.max_ttl_digits:
            return Command.unrecognized("set: ttl out of range", raw)
        ttl_ms = int(ttl_token)
        if ttl_ms > self.max_ttl_ms:
            return Command.unrecognized("set: ttl out of range", raw)

        return Command(
            type=CommandType.SET_WITH_TTL,
            key=key,
            value=value,
            ttl_ms=ttl_ms,
            raw=raw,
        )

    def encode_reply(self, reply: Reply) -> bytes:
        """
        Encode a Reply into wire bytes.

        Examples:
            >>> decoder = CommandDecoder()
            >>> decoder.encode_reply(Reply.pong())
            b'+PONG\\r\\n'
            >>> decoder.encode_reply(Reply.nil())
            b'$-1\\r\\n'
            >>> decoder.encode_reply(Reply.error())
            b'-ERR\\r\\n'
        """
        return reply.kind.value + reply.text + self.delimiter


def encode_command(*args: Union[str, bytes]) -> bytes:
    """
    Encode a command as a RESP array of bulk strings.

    Used by clients and tests to build requests.

    Example:
        >>> encode_command("get", "a")
        b'*2\\r\\n$3\\r\\nget\\r\\n$1\\r\\na\\r\\n'
    """
    delimiter = settings.DELIMITER
    parts = [b"*%d" % len(args)]
    for arg in args:
        if isinstance(arg, str):
            arg = arg.encode()
        parts.append(b"$%d" % len(arg))
        parts.append(arg)
    return delimiter.join(parts) + delimiter
