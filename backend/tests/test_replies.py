import pytest
import sys
import os

# Add backend to path so we can import modules
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from monitors.errors import ProtocolError
from monitors.replies import ReplyLine, read_reply
from scripted_server import ScriptedTransport


class TestReplyLineParse:

    def test_final_line(self):
        reply = ReplyLine.parse("220 Service ready")
        assert reply.code == 220
        assert reply.is_continuation is False

    def test_continuation_line(self):
        reply = ReplyLine.parse("220-Welcome")
        assert reply.code == 220
        assert reply.is_continuation is True

    def test_bare_code(self):
        reply = ReplyLine.parse("221")
        assert reply.code == 221
        assert reply.is_continuation is False

    def test_unparsable_lines_have_no_code(self):
        for text in ["", "hello", "22 short", "2200 too long", "abc ready", " 220 indented"]:
            reply = ReplyLine.parse(text)
            assert reply.code is None, f"{text!r} should not parse"
            assert reply.is_continuation is False


@pytest.mark.asyncio
async def test_single_line_reply_reads_nothing_more():
    transport = ScriptedTransport(["230 should stay unread"])
    reply = await read_reply(transport, ReplyLine.parse("220 ready"))

    assert reply.text == "220 ready"
    assert transport.reads == 0

@pytest.mark.asyncio
async def test_reads_first_line_when_not_given():
    transport = ScriptedTransport(["220 ready"])
    reply = await read_reply(transport)
    assert reply.code == 220
    assert transport.reads == 1

@pytest.mark.asyncio
async def test_multi_line_reply_stops_at_matching_final_line():
    transport = ScriptedTransport([
        "220-line1",
        "this line has no code",
        "230 different code, not the end",
        "220-still going",
        "220 ready",
        "221 next reply",
    ])
    reply = await read_reply(transport)

    assert reply.text == "220 ready"
    assert reply.code == 220
    assert transport.lines == ["221 next reply"]

@pytest.mark.asyncio
async def test_trailing_text_is_ignored_when_matching():
    transport = ScriptedTransport(["211-Features:", " MDTM", " SIZE", "211 "])
    reply = await read_reply(transport)
    assert reply.text == "211 "
    assert reply.code == 211

@pytest.mark.asyncio
async def test_stream_end_inside_multi_line_reply_is_protocol_error():
    transport = ScriptedTransport(["220-line1", "220-line2"])
    with pytest.raises(ProtocolError) as exc_info:
        await read_reply(transport)
    assert "multi-line 220" in str(exc_info.value)
