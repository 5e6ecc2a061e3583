import time
import logging
from fastapi import APIRouter, HTTPException, Request
from typing import List

from config import monitor_defaults
from models import MonitorInfo, ProbeRequest, ProbeResponse

logger = logging.getLogger("SvcWatch.Probes")

router = APIRouter(tags=["probes"])


@router.get("/monitors", response_model=List[MonitorInfo])
def list_monitors(request: Request):
    monitors = request.app.state.monitors
    return [
        MonitorInfo(
            name=name,
            default_port=monitor.profile.default_port,
            supports_auth=monitor.profile.supports_auth,
        )
        for name, monitor in sorted(monitors.items())
    ]

@router.post("/probes/{monitor_name}", response_model=ProbeResponse)
async def run_probe(monitor_name: str, probe: ProbeRequest, request: Request):
    """Run one probe now and return its status"""
    monitor = request.app.state.monitors.get(monitor_name)
    if monitor is None:
        raise HTTPException(status_code=404, detail=f"Unknown monitor '{monitor_name}'")

    # Request parameters win over config.json defaults
    parameters = monitor_defaults(request.app.state.app_config, monitor_name)
    parameters.update(probe.parameters)

    result = await monitor.check(probe.host, **parameters)
    response = ProbeResponse(
        monitor=monitor_name,
        host=probe.host,
        status=result.status.value,
        latency_ms=round(result.latency_ms, 2) if result.latency_ms is not None else None,
        attempts=result.attempts,
        error=result.error,
        timestamp=time.time(),
    )
    request.app.state.latest_results[f"{monitor_name}:{probe.host}"] = response.model_dump()

    lat_str = f"{response.latency_ms:.2f}ms" if response.latency_ms is not None else "N/A"
    logger.info(f"Result for {monitor_name} on {probe.host}: {response.status}, Latency: {lat_str}")
    return response
