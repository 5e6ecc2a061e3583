"""Protocol profiles for the line based monitors"""
from typing import Dict

from .handshake import BenignReply, CodeRange, HandshakeState, ProtocolProfile

# Some FTP servers answer QUIT with an error when nobody logged in:
#   "530 QUIT : User not logged in. Please login with USER and PASS first."
#   "425 Session is disconnected."
FTP_ERROR_530_TEXT = "User not logged in. Please login with USER and PASS first"
FTP_ERROR_425_TEXT = "425 Session is disconnected."

FTP = ProtocolProfile(
    name="ftp",
    default_port=21,
    greeting=CodeRange(200, 299),
    proceed=CodeRange(200, 399),
    success=CodeRange(200, 299),
    user_command="USER {}",
    password_command="PASS {}",
    quit_command="QUIT",
    benign_replies=(
        BenignReply(HandshakeState.AWAITING_TERMINATION_REPLY, 530, FTP_ERROR_530_TEXT),
        BenignReply(HandshakeState.AWAITING_TERMINATION_REPLY, 425, FTP_ERROR_425_TEXT),
    ),
)

SMTP = ProtocolProfile(
    name="smtp",
    default_port=25,
    greeting=CodeRange(200, 299),
    success=CodeRange(200, 299),
    quit_command="QUIT",
)

NNTP = ProtocolProfile(
    name="nntp",
    default_port=119,
    greeting=CodeRange(200, 299),
    proceed=CodeRange(300, 399),
    success=CodeRange(200, 299),
    user_command="AUTHINFO USER {}",
    password_command="AUTHINFO PASS {}",
    quit_command="QUIT",
)

PROFILES: Dict[str, ProtocolProfile] = {p.name: p for p in (FTP, SMTP, NNTP)}
