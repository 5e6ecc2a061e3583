"""Monitors for line oriented protocols (FTP, SMTP, NNTP)"""
import asyncio
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from pydantic import ValidationError

from config import ProbeParameters
from .base import BaseMonitor, MonitorResult, ServiceStatus
from .errors import (
    ConnectionRefused,
    HandshakeRejected,
    HostUnreachable,
    ProbeError,
    ProbeTimeout,
    ProtocolError,
)
from .handshake import Credentials, ProtocolProfile, run_handshake
from .protocols import FTP, NNTP, SMTP
from .reporter import report
from .retry_policy import RetryDecision, classify_failure
from .transport import LineTransport

logger = logging.getLogger("SvcWatch.LineMonitor")

# Replies one handshake waits for at most: banner, user, password, quit.
# The whole attempt gets this many timeouts.
HANDSHAKE_STEPS = 4


class AttemptOutcome(str, Enum):
    SUCCESS = "success"
    TIMEOUT = "timeout"
    CONNECTION_REFUSED = "connection-refused"
    HOST_UNREACHABLE = "host-unreachable"
    PROTOCOL_ERROR = "protocol-error"
    IO_ERROR = "io-error"


@dataclass
class Attempt:
    """One connect/handshake/close cycle"""
    number: int
    started_at: float
    connected: bool = False
    outcome: Optional[AttemptOutcome] = None
    status: ServiceStatus = ServiceStatus.UNAVAILABLE
    latency_ms: Optional[float] = None
    error: Optional[ProbeError] = None


def outcome_for(error: ProbeError) -> AttemptOutcome:
    if isinstance(error, ProbeTimeout):
        return AttemptOutcome.TIMEOUT
    if isinstance(error, ConnectionRefused):
        return AttemptOutcome.CONNECTION_REFUSED
    if isinstance(error, HostUnreachable):
        return AttemptOutcome.HOST_UNREACHABLE
    if isinstance(error, ProtocolError):
        return AttemptOutcome.PROTOCOL_ERROR
    return AttemptOutcome.IO_ERROR


class LineProtocolMonitor(BaseMonitor):
    """
    Checks a line oriented service by walking its banner, optional login and
    quit exchange. Holds no per-probe state, so one instance can serve many
    concurrent probes.
    """

    def __init__(self, profile: ProtocolProfile, recorder=None):
        self.profile = profile
        self.recorder = recorder

    @property
    def protocol(self) -> str:
        return self.profile.name

    async def check(self, ip: str, **parameters) -> MonitorResult:
        """
        Perform the health check.

        Args:
            ip: Target address
            **parameters: retry, port, timeout (ms), userid, password,
                rrd-repository, ds-name

        Returns:
            MonitorResult; never raises for network or protocol problems
        """
        try:
            params = ProbeParameters.from_parameters(ip, parameters, self.profile.default_port)
        except ValidationError as e:
            logger.error(f"{self.protocol} check for {ip} has invalid parameters: {e}")
            return MonitorResult(status=ServiceStatus.UNAVAILABLE, latency_ms=None,
                                 protocol=self.protocol, error=str(e))

        try:
            result = await self.poll(params)
        except Exception as e:
            logger.error(f"{self.protocol} check exception for {ip}: {e}")
            return MonitorResult(status=ServiceStatus.UNAVAILABLE, latency_ms=None,
                                 protocol=self.protocol, error=str(e))

        return await report(result, params, self.recorder)

    async def poll(self, params: ProbeParameters) -> MonitorResult:
        """Run attempts 0..retry, stopping at the first Available one"""
        logger.debug(f"Polling {self.protocol} on {params.address}:{params.port} "
                     f"timeout: {params.timeout}ms retry: {params.retry}")

        status = ServiceStatus.UNAVAILABLE
        last: Optional[Attempt] = None
        attempts = 0

        for number in range(params.retry + 1):
            attempts += 1
            last = await self._attempt(params, number)

            # Attempts that never connected leave the last known status alone
            if last.connected:
                status = last.status
            if last.status == ServiceStatus.AVAILABLE:
                break
            if last.error is not None and classify_failure(last.error) == RetryDecision.ABORT:
                logger.warning(f"{self.protocol}: no route to host {params.address}, giving up")
                break

        return MonitorResult(
            status=status,
            latency_ms=last.latency_ms if status == ServiceStatus.AVAILABLE else None,
            protocol=self.protocol,
            attempts=attempts,
            raw_data={"outcome": last.outcome.value if last and last.outcome else None,
                      "port": params.port},
            error=str(last.error) if last and last.error and status != ServiceStatus.AVAILABLE else None,
        )

    async def _attempt(self, params: ProbeParameters, number: int) -> Attempt:
        attempt = Attempt(number=number, started_at=time.monotonic())
        credentials = Credentials(username=params.userid, password=params.password)
        try:
            transport = await LineTransport.connect(params.address, params.port, params.timeout_seconds)
        except ProbeError as e:
            logger.debug(f"{self.protocol}: attempt {number} to {params.address} failed to connect: {e}")
            attempt.outcome = outcome_for(e)
            attempt.error = e
            return attempt

        # We're connected, so upgrade status to unresponsive
        attempt.connected = True
        attempt.status = ServiceStatus.UNRESPONSIVE

        async with transport:
            try:
                await asyncio.wait_for(run_handshake(transport, self.profile, credentials),
                                       params.timeout_seconds * HANDSHAKE_STEPS)
            except asyncio.TimeoutError:
                logger.debug(f"{self.protocol}: attempt {number} to {params.address} exceeded "
                             f"{params.timeout * HANDSHAKE_STEPS}ms")
                attempt.outcome = AttemptOutcome.TIMEOUT
                attempt.error = ProbeTimeout(f"handshake not finished within {params.timeout * HANDSHAKE_STEPS}ms")
                return attempt
            except HandshakeRejected as e:
                logger.debug(f"{self.protocol}: {params.address} rejected handshake: {e}")
                attempt.status = ServiceStatus.UNAVAILABLE
                attempt.outcome = AttemptOutcome.PROTOCOL_ERROR
                attempt.error = e
                return attempt
            except ProbeError as e:
                logger.debug(f"{self.protocol}: attempt {number} to {params.address} failed: {e}")
                attempt.outcome = outcome_for(e)
                attempt.error = e
                return attempt

        attempt.status = ServiceStatus.AVAILABLE
        attempt.outcome = AttemptOutcome.SUCCESS
        if transport.first_line_at is not None:
            attempt.latency_ms = max(0.0, (transport.first_line_at - attempt.started_at) * 1000)
        logger.debug(f"{self.protocol}: {params.address} available, latency {attempt.latency_ms}ms")
        return attempt


class FtpMonitor(LineProtocolMonitor):
    """FTP: banner, optional USER/PASS, QUIT"""

    def __init__(self, recorder=None):
        super().__init__(FTP, recorder)


class SmtpMonitor(LineProtocolMonitor):
    """SMTP: banner, QUIT"""

    def __init__(self, recorder=None):
        super().__init__(SMTP, recorder)


class NntpMonitor(LineProtocolMonitor):
    """NNTP: banner, optional AUTHINFO USER/PASS, QUIT"""

    def __init__(self, recorder=None):
        super().__init__(NNTP, recorder)
