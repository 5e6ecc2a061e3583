"""Monitor module exports"""
from .base import BaseMonitor, MonitorResult, ServiceStatus
from .line_monitor import LineProtocolMonitor, FtpMonitor, SmtpMonitor, NntpMonitor
from .protocols import PROFILES

__all__ = ['BaseMonitor', 'MonitorResult', 'ServiceStatus', 'LineProtocolMonitor',
           'FtpMonitor', 'SmtpMonitor', 'NntpMonitor', 'PROFILES', 'build_monitors']


def build_monitors(recorder=None) -> dict:
    """One monitor per known protocol, keyed by protocol name"""
    return {name: LineProtocolMonitor(profile, recorder) for name, profile in PROFILES.items()}
