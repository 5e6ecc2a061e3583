"""
Handshake state machine for line oriented request/reply protocols.

The machine walks banner -> optional login -> quit. Each step is a pure
function of (profile, context, reply, credentials) returning the next context
and the command to send, so no state is shared between concurrent probes.
"""
import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Tuple

from .errors import AuthenticationFailed, HandshakeRejected, ProtocolError
from .replies import ReplyLine, read_reply

logger = logging.getLogger("SvcWatch.Handshake")


class HandshakeState(str, Enum):
    AWAITING_BANNER = "AwaitingBanner"
    AWAITING_AUTH_CHALLENGE = "AwaitingAuthChallenge"
    AWAITING_AUTH_RESULT = "AwaitingAuthResult"
    AWAITING_TERMINATION_REPLY = "AwaitingTerminationReply"
    DONE = "Done"


@dataclass(frozen=True)
class CodeRange:
    low: int
    high: int

    def __contains__(self, code: Optional[int]) -> bool:
        return code is not None and self.low <= code <= self.high


@dataclass(frozen=True)
class BenignReply:
    """An error reply that still proves the service is alive"""
    context: HandshakeState
    code: int
    fragment: str

    def matches(self, state: HandshakeState, reply: ReplyLine) -> bool:
        return state == self.context and reply.code == self.code and self.fragment in reply.text


@dataclass(frozen=True)
class Credentials:
    username: Optional[str] = None
    password: Optional[str] = None

    @property
    def complete(self) -> bool:
        return bool(self.username) and bool(self.password)


@dataclass(frozen=True)
class ProtocolProfile:
    """Reply code ranges, commands and benign replies of one protocol"""
    name: str
    default_port: int
    greeting: CodeRange
    success: CodeRange
    proceed: CodeRange = CodeRange(200, 399)
    user_command: Optional[str] = None
    password_command: Optional[str] = None
    quit_command: str = "QUIT"
    benign_replies: Tuple[BenignReply, ...] = ()

    @property
    def supports_auth(self) -> bool:
        return self.user_command is not None and self.password_command is not None

    def is_benign(self, state: HandshakeState, reply: ReplyLine) -> bool:
        return any(entry.matches(state, reply) for entry in self.benign_replies)


@dataclass(frozen=True)
class HandshakeContext:
    state: HandshakeState = HandshakeState.AWAITING_BANNER
    auth_failure: Optional[AuthenticationFailed] = None


def advance(profile: ProtocolProfile, context: HandshakeContext, reply: ReplyLine,
            credentials: Credentials) -> Tuple[HandshakeContext, Optional[str]]:
    """
    Consume one reply and move the handshake forward.

    Returns:
        Tuple of (next context, command to send or None)

    Raises:
        ProtocolError: unparsable quit reply
        HandshakeRejected: well-formed reply that rules the service out
    """
    state = context.state

    if state == HandshakeState.AWAITING_BANNER:
        # An unparsable banner counts as a wrong code, not as a broken stream
        if reply.code not in profile.greeting:
            raise HandshakeRejected(state.value, reply.code, reply.text)
        if profile.supports_auth and credentials.complete:
            return (replace(context, state=HandshakeState.AWAITING_AUTH_CHALLENGE),
                    profile.user_command.format(credentials.username))
        return replace(context, state=HandshakeState.AWAITING_TERMINATION_REPLY), profile.quit_command

    if state == HandshakeState.AWAITING_AUTH_CHALLENGE:
        if reply.code in profile.proceed:
            return (replace(context, state=HandshakeState.AWAITING_AUTH_RESULT),
                    profile.password_command.format(credentials.password))
        failure = AuthenticationFailed(f"username rejected: {reply.text!r}")
        logger.debug(f"{profile.name}: {failure}")
        return (replace(context, state=HandshakeState.AWAITING_TERMINATION_REPLY, auth_failure=failure),
                profile.quit_command)

    if state == HandshakeState.AWAITING_AUTH_RESULT:
        if reply.code in profile.success:
            logger.debug(f"{profile.name}: login successful, reply code {reply.code}")
            return replace(context, state=HandshakeState.AWAITING_TERMINATION_REPLY), profile.quit_command
        failure = AuthenticationFailed(f"password rejected: {reply.text!r}")
        logger.debug(f"{profile.name}: {failure}")
        return (replace(context, state=HandshakeState.AWAITING_TERMINATION_REPLY, auth_failure=failure),
                profile.quit_command)

    if state == HandshakeState.AWAITING_TERMINATION_REPLY:
        if reply.code is None:
            raise ProtocolError(f"quit reply has no reply code: {reply.text!r}")
        if profile.is_benign(state, reply):
            logger.debug(f"{profile.name}: accepting benign reply {reply.text!r}")
            return replace(context, state=HandshakeState.DONE), None
        if context.auth_failure is None and reply.code in profile.success:
            return replace(context, state=HandshakeState.DONE), None
        raise HandshakeRejected(state.value, reply.code, reply.text) from context.auth_failure

    raise ValueError(f"handshake already finished, cannot consume {reply.text!r}")


async def run_handshake(transport, profile: ProtocolProfile,
                        credentials: Credentials = Credentials()) -> HandshakeContext:
    """Drive the state machine over a connected transport until Done"""
    context = HandshakeContext()
    while context.state != HandshakeState.DONE:
        reply = await read_reply(transport)
        context, command = advance(profile, context, reply, credentials)
        if command is not None:
            await transport.write_command(command)
    return context
