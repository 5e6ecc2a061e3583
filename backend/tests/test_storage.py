import asyncio
import gc
import json
import pytest
import sys
import os

# Add backend to path so we can import modules
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from monitors.errors import RecorderWriteFailed
from storage import LatencyRecorder


@pytest.fixture
def file_recorder(monkeypatch):
    for key in ("INFLUXDB_URL", "INFLUXDB_TOKEN", "INFLUXDB_ORG", "INFLUXDB_BUCKET"):
        monkeypatch.delenv(key, raising=False)
    return LatencyRecorder(max_lines=5)


@pytest.mark.asyncio
async def test_record_appends_json_line(tmp_path, file_recorder):
    await file_recorder.record(str(tmp_path), "response-time", 12.3456, address="10.0.0.1", protocol="ftp")

    path = tmp_path / "10.0.0.1" / "response-time.jsonl"
    lines = path.read_text().splitlines()
    assert len(lines) == 1
    entry = json.loads(lines[0])
    assert entry["latency"] == 12.35
    assert entry["protocol"] == "ftp"
    assert entry["series"] == "response-time"

@pytest.mark.asyncio
async def test_record_without_address_uses_location_root(tmp_path, file_recorder):
    await file_recorder.record(str(tmp_path), "ftp", 1.0)
    assert (tmp_path / "ftp.jsonl").exists()

@pytest.mark.asyncio
async def test_rotation_keeps_last_lines(tmp_path, file_recorder):
    for i in range(8):
        await file_recorder.record(str(tmp_path), "response-time", float(i), address="10.0.0.1")

    lines = (tmp_path / "10.0.0.1" / "response-time.jsonl").read_text().splitlines()
    assert [json.loads(line)["latency"] for line in lines] == [3.0, 4.0, 5.0, 6.0, 7.0]

@pytest.mark.asyncio
async def test_concurrent_writes_are_not_lost(tmp_path, monkeypatch):
    for key in ("INFLUXDB_URL", "INFLUXDB_TOKEN", "INFLUXDB_ORG", "INFLUXDB_BUCKET"):
        monkeypatch.delenv(key, raising=False)
    recorder = LatencyRecorder(max_lines=100)

    await asyncio.gather(*[
        recorder.record(str(tmp_path), "response-time", float(i), address="10.0.0.2") for i in range(20)
    ])

    lines = (tmp_path / "10.0.0.2" / "response-time.jsonl").read_text().splitlines()
    assert len(lines) == 20

@pytest.mark.asyncio
async def test_path_locks_released_after_writes(tmp_path, file_recorder):
    await asyncio.gather(*[
        file_recorder.record(str(tmp_path), "response-time", 1.0, address=f"10.0.1.{i}") for i in range(10)
    ])
    gc.collect()

    assert len(file_recorder._locks) == 0

@pytest.mark.asyncio
async def test_unwritable_location_raises_recorder_error(tmp_path, file_recorder):
    blocker = tmp_path / "not-a-directory"
    blocker.write_text("")
    with pytest.raises(RecorderWriteFailed):
        await file_recorder.record(str(blocker), "response-time", 1.0, address="10.0.0.1")
