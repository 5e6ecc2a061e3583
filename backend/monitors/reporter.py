"""Forwards latency of available services to the recorder"""
import logging

from .base import MonitorResult, ServiceStatus

logger = logging.getLogger("SvcWatch.Reporter")


async def report(result: MonitorResult, params, recorder) -> MonitorResult:
    """
    Hand the latency sample to the recorder when the service is Available.

    The returned result is always the one passed in: a failing recorder is
    logged and never changes the status.
    """
    if result.status != ServiceStatus.AVAILABLE or result.latency_ms is None:
        return result

    if not params.rrd_repository:
        logger.info(f"{result.protocol}: latency repository not specified, latency data will not be stored")
        return result
    if recorder is None:
        logger.debug(f"{result.protocol}: no recorder attached, dropping latency sample")
        return result

    try:
        await recorder.record(
            params.rrd_repository,
            params.ds_name,
            result.latency_ms,
            address=params.address,
            protocol=result.protocol,
        )
    except Exception as e:
        logger.warning(f"There was a problem writing latency for {params.address}: {e}")
    return result
