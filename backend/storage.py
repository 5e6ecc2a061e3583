import os
import json
import logging
import asyncio
import weakref
from datetime import datetime
from typing import Optional
from influxdb_client import InfluxDBClient, Point
from influxdb_client.client.write_api import SYNCHRONOUS
import aiofiles

from monitors.errors import RecorderWriteFailed

logger = logging.getLogger("SvcWatch.Storage")


class LatencyRecorder:
    """
    Sink for latency samples.

    Writes to InfluxDB when INFLUXDB_* is configured, otherwise appends JSON
    lines to <location>/<address>/<series>.jsonl. Safe for concurrent probes:
    file writes are serialized per path.
    """

    def __init__(self, max_lines: Optional[int] = None):
        self.use_influx = False
        self.influx_client = None
        self.write_api = None
        self.max_lines = max_lines or int(os.getenv("LATENCY_MAX_LINES", "200"))
        # A path keeps its lock only while some write holds or waits on it
        self._locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()

        # Influx Config
        self.url = os.getenv("INFLUXDB_URL")
        self.token = os.getenv("INFLUXDB_TOKEN")
        self.org = os.getenv("INFLUXDB_ORG")
        self.bucket = os.getenv("INFLUXDB_BUCKET")

        if self.url and self.token and self.org and self.bucket:
            try:
                self.influx_client = InfluxDBClient(url=self.url, token=self.token, org=self.org)
                self.write_api = self.influx_client.write_api(write_options=SYNCHRONOUS)
                self.use_influx = True
                logger.info(f"Connected to InfluxDB at {self.url}")
            except Exception as e:
                logger.error(f"Failed to connect to InfluxDB: {e}. Falling back to file logging.")
        else:
            logger.info("InfluxDB not configured. Using file logging.")

    async def record(self, location: str, series_name: str, latency_ms: float, address: Optional[str] = None,
                     protocol: Optional[str] = None):
        """
        Persist one latency sample.

        location: recorder location (the rrd-repository parameter)
        series_name: data series, e.g. "response-time"
        latency_ms: response time in milliseconds

        Raises:
            RecorderWriteFailed when neither InfluxDB nor the file accepted it
        """
        timestamp = datetime.now()

        if self.use_influx:
            try:
                point = (
                    Point("latency")
                    .tag("location", location)
                    .tag("address", address or "unknown")
                    .tag("protocol", protocol or "unknown")
                    .field(series_name, float(latency_ms))
                    .time(timestamp)
                )
                await asyncio.to_thread(self.write_api.write, bucket=self.bucket, org=self.org, record=point)
                return
            except Exception as e:
                logger.error(f"Error writing to InfluxDB: {e}")

        # Fallback or Default to File (async)
        entry = {
            "timestamp": timestamp.strftime("%Y-%m-%dT%H:%M:%S.%f"),
            "address": address,
            "protocol": protocol,
            "series": series_name,
            "latency": round(float(latency_ms), 2),
        }
        path = self.series_path(location, series_name, address)

        try:
            async with self._lock_for(path):
                os.makedirs(os.path.dirname(path), exist_ok=True)
                async with aiofiles.open(path, "a") as f:
                    await f.write(json.dumps(entry) + "\n")

                await self._rotate_log(path)
        except OSError as e:
            raise RecorderWriteFailed(f"could not write {path}: {e}") from e

    def series_path(self, location: str, series_name: str, address: Optional[str] = None) -> str:
        directory = os.path.join(location, address) if address else location
        return os.path.join(directory, f"{series_name}.jsonl")

    def _lock_for(self, path: str) -> asyncio.Lock:
        lock = self._locks.get(path)
        if lock is None:
            lock = self._locks[path] = asyncio.Lock()
        return lock

    async def _rotate_log(self, path: str):
        """Keep only the last max_lines entries in the file."""
        try:
            async with aiofiles.open(path, "r") as f:
                content = await f.read()
                lines = content.splitlines(keepends=True)

            if len(lines) > self.max_lines:
                async with aiofiles.open(path, "w") as f:
                    await f.writelines(lines[-self.max_lines:])
        except OSError as e:
            logger.debug(f"Log rotation skipped: {e}")

    def close(self):
        if self.influx_client is not None:
            self.influx_client.close()

recorder = LatencyRecorder()
