from pydantic import BaseModel, field_validator
from typing import Optional, Dict, Any

from validation import validate_host


# Pydantic Models (API)
class ProbeRequest(BaseModel):
    host: str
    # retry, port, timeout, userid, password, rrd-repository, ds-name
    parameters: Dict[str, Any] = {}

    @field_validator('host')
    @classmethod
    def validate_host_address(cls, v: str) -> str:
        v = v.strip()
        if not validate_host(v):
            raise ValueError('Invalid host: expected an IPv4 address or host name')
        return v

class ProbeResponse(BaseModel):
    monitor: str
    host: str
    status: str  # Available / Unresponsive / Unavailable
    latency_ms: Optional[float] = None
    attempts: int = 0
    error: Optional[str] = None
    timestamp: float

class MonitorInfo(BaseModel):
    name: str
    default_port: int
    supports_auth: bool
