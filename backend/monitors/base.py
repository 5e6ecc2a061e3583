"""Base classes for monitoring protocols"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Dict, Any


class ServiceStatus(str, Enum):
    AVAILABLE = "Available"
    UNRESPONSIVE = "Unresponsive"  # connected, handshake never validated
    UNAVAILABLE = "Unavailable"    # no connection, or handshake explicitly failed


@dataclass
class MonitorResult:
    """Standardized result from any monitor"""
    status: ServiceStatus
    latency_ms: Optional[float]
    protocol: str  # "ftp", "smtp", "nntp"
    attempts: int = 0
    raw_data: Dict[str, Any] = field(default_factory=dict)
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.status == ServiceStatus.AVAILABLE


class BaseMonitor:
    """Base class for all monitors"""

    async def check(self, ip: str, **kwargs) -> MonitorResult:
        """
        Perform health check on the given IP.
        Returns MonitorResult with the service status and latency.
        """
        raise NotImplementedError("Subclasses must implement check()")
