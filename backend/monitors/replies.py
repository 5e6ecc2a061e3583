"""Reply line parsing and multi-line reply reader"""
import logging
import re
from dataclasses import dataclass
from typing import Optional

from .errors import EndOfStream, ProtocolError

logger = logging.getLogger("SvcWatch.Replies")

# Three digit code followed by a hyphen (continuation), a space (final line)
# or nothing at all.
REPLY_CODE = re.compile(r"^(\d{3})(-| |$)")

CONTINUATION_MARKER = "-"
SEPARATOR = " "


@dataclass(frozen=True)
class ReplyLine:
    """A single line of a server reply"""
    text: str
    code: Optional[int]
    is_continuation: bool = False

    @classmethod
    def parse(cls, text: str) -> "ReplyLine":
        match = REPLY_CODE.match(text)
        if not match:
            return cls(text=text, code=None)
        return cls(
            text=text,
            code=int(match.group(1)),
            is_continuation=match.group(2) == CONTINUATION_MARKER,
        )


async def read_reply(transport, first: Optional[ReplyLine] = None) -> ReplyLine:
    """
    Read one complete reply and return its effective (final) line.

    A reply whose first line is "<code>-..." continues until a line starting
    with "<code> " arrives. Everything in between is discarded.

    Args:
        transport: LineTransport (or anything with an async read_line())
        first: first line if the caller already read it

    Raises:
        ProtocolError: stream closed before the terminating line
    """
    if first is None:
        first = ReplyLine.parse(await transport.read_line())

    if not first.is_continuation:
        return first

    terminator = first.text[:3] + SEPARATOR
    skipped = 0
    while True:
        try:
            text = await transport.read_line()
        except EndOfStream as e:
            raise ProtocolError(
                f"stream closed inside multi-line {first.text[:3]} reply after {skipped} lines"
            ) from e
        if text.startswith(terminator):
            logger.debug(f"Multi-line {first.text[:3]} reply ended after {skipped} continuation lines")
            return ReplyLine.parse(text)
        skipped += 1
