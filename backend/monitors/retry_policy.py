"""Decides whether a failed attempt is worth retrying"""
from enum import Enum

from .errors import HostUnreachable


class RetryDecision(str, Enum):
    ABORT = "abort"
    RETRY = "retry"


def classify_failure(error: BaseException) -> RetryDecision:
    """Host unreachable ends the probe, everything else consumes the retry budget"""
    if isinstance(error, HostUnreachable):
        return RetryDecision.ABORT
    return RetryDecision.RETRY
