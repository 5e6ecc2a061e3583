"""Line oriented TCP transport used by the handshake monitors"""
import asyncio
import errno
import logging
import time
from typing import Optional

from .errors import (
    ConnectionRefused,
    EndOfStream,
    HostUnreachable,
    ProbeIOError,
    ProbeTimeout,
)

logger = logging.getLogger("SvcWatch.Transport")

UNREACHABLE_ERRNOS = {errno.EHOSTUNREACH, errno.ENETUNREACH}


class LineTransport:
    """
    One TCP connection that reads text lines and writes CRLF commands.

    Every read, write and the connect itself are bounded by ``timeout``
    (seconds). The caller bounds the total attempt duration.
    """

    def __init__(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter,
                 timeout: float, encoding: str = "latin-1"):
        self._reader = reader
        self._writer = writer
        self.timeout = timeout
        self.encoding = encoding
        self.first_line_at: Optional[float] = None
        self._closed = False

    @classmethod
    async def connect(cls, address: str, port: int, timeout: float) -> "LineTransport":
        """
        Open a connection to address:port.

        Raises:
            ProbeTimeout, ConnectionRefused, HostUnreachable or ProbeIOError
        """
        try:
            reader, writer = await asyncio.wait_for(
                asyncio.open_connection(address, port), timeout
            )
        except asyncio.TimeoutError:
            raise ProbeTimeout(f"connect to {address}:{port} timed out after {timeout}s")
        except ConnectionRefusedError as e:
            raise ConnectionRefused(f"connection refused by {address}:{port}") from e
        except OSError as e:
            if e.errno in UNREACHABLE_ERRNOS:
                raise HostUnreachable(f"no route to host {address}") from e
            raise ProbeIOError(f"connect to {address}:{port} failed: {e}") from e

        logger.debug(f"Connected to {address}:{port}")
        return cls(reader, writer, timeout)

    async def read_line(self) -> str:
        """Return the next line without its line terminator"""
        try:
            raw = await asyncio.wait_for(self._reader.readline(), self.timeout)
        except asyncio.TimeoutError:
            raise ProbeTimeout(f"no data within {self.timeout}s")
        except ValueError as e:
            # StreamReader line limit exceeded
            raise ProbeIOError(f"line too long: {e}") from e
        except OSError as e:
            raise ProbeIOError(f"read failed: {e}") from e

        if not raw:
            raise EndOfStream("connection closed by peer")

        if self.first_line_at is None:
            self.first_line_at = time.monotonic()

        line = raw.decode(self.encoding, errors="replace").rstrip("\r\n")
        logger.debug(f"<<< {line}")
        return line

    async def write_command(self, text: str):
        """Send one command terminated by CRLF"""
        # Log the verb only, arguments may carry credentials
        logger.debug(f">>> {text.split(' ', 1)[0]}")
        try:
            self._writer.write(f"{text}\r\n".encode(self.encoding, errors="replace"))
            await asyncio.wait_for(self._writer.drain(), self.timeout)
        except asyncio.TimeoutError:
            raise ProbeTimeout(f"write not drained within {self.timeout}s")
        except OSError as e:
            raise ProbeIOError(f"write failed: {e}") from e

    async def close(self):
        if self._closed:
            return
        self._closed = True
        self._writer.close()
        try:
            await asyncio.wait_for(self._writer.wait_closed(), self.timeout)
        except (OSError, asyncio.TimeoutError) as e:
            logger.debug(f"Error closing socket: {e}")

    async def __aenter__(self) -> "LineTransport":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()
