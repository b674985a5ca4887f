import json
from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest

import deflux.services.forwarder as forwarder_module
from deflux.core.errors import EventStreamClosed
from deflux.domain.interfaces import PointWriter
from deflux.domain.models import RawSensorEvent, SensorInfo
from deflux.drivers.deconz_events import SensorCache, SensorEventDecoder
from deflux.sensors.climate import TemperatureNormalizer
from deflux.sensors.registry import default_registry
from deflux.services.event_source import EventStream
from deflux.services.forwarder import Forwarder

FIXED_NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


class RecordingWriter:
    def __init__(self):
        self.points = []
        self.closed = False

    def write(self, point):
        self.points.append(point)

    def close(self):
        self.closed = True


async def events_of(*events):
    for e in events:
        yield e


def _event(sensor_type, state, sid="1"):
    return RawSensorEvent(sensor_id=sid, sensor_type=sensor_type, sensor_name=f"sensor {sid}", state=state)


@pytest.fixture(autouse=True)
def fixed_clock(monkeypatch):
    monkeypatch.setattr(forwarder_module, "now_utc", lambda: FIXED_NOW)


def test_recording_writer_satisfies_protocol():
    assert isinstance(RecordingWriter(), PointWriter)


@pytest.mark.asyncio
async def test_unknown_event_between_two_temperatures():
    registry = default_registry()
    registry.register(TemperatureNormalizer(), "temperature")
    writer = RecordingWriter()
    events = events_of(
        _event("temperature", {"temperature": 2000}, "1"),
        _event("unknown", {"whatever": 1}, "2"),
        _event("temperature", {"temperature": 2250}, "3"),
    )
    fwd = Forwarder(events, writer, registry)

    await fwd.run()

    assert [p.measurement for p in writer.points] == ["deflux_temperature", "deflux_temperature"]
    assert [p.fields for p in writer.points] == [{"temperature": 20.0}, {"temperature": 22.5}]
    assert fwd.stats.received == 3
    assert fwd.stats.forwarded == 2
    assert fwd.stats.dropped == 1


@pytest.mark.asyncio
async def test_points_use_processing_time_not_event_time():
    writer = RecordingWriter()
    event = _event("ZHATemperature", {"temperature": 1800, "lastupdated": "2020-01-01T00:00:00"})

    await Forwarder(events_of(event), writer).run()

    (point,) = writer.points
    assert point.ts_utc == FIXED_NOW
    assert point.measurement == "deflux_ZHATemperature"
    assert point.tags == {"id": "1", "name": "sensor 1", "type": "ZHATemperature"}


@pytest.mark.asyncio
async def test_malformed_payload_never_reaches_writer(caplog):
    writer = RecordingWriter()

    await Forwarder(events_of(_event("ZHASwitch", {"buttonevent": None})), writer).run()

    assert writer.points == []
    assert "not adding event to influx batch" in caplog.text


def test_measurement_prefix_is_configurable():
    fwd = Forwarder(events_of(), RecordingWriter(), prefix="home")
    assert fwd.measurement("ZHAPressure") == "home_ZHAPressure"


@pytest.mark.asyncio
async def test_gateway_messages_end_to_end():
    sensors = {
        "1": SensorInfo(id="1", name="Living room", type="ZHATemperature"),
        "2": SensorInfo(id="2", name="Mystery", type="ZHAUnknownThing"),
    }
    messages = [
        json.dumps({"t": "event", "e": "changed", "r": "sensors", "id": "1", "state": {"temperature": 2110}}),
        json.dumps({"t": "event", "e": "changed", "r": "sensors", "id": "2", "state": {"x": 1}}),
        json.dumps({"t": "event", "e": "changed", "r": "sensors", "id": "1", "state": {"temperature": 2120}}),
    ]

    async def connection():
        for m in messages:
            yield m

    decoder = SensorEventDecoder(SensorCache(AsyncMock(return_value=sensors), sensors))
    stream = EventStream(connection(), decoder)
    writer = RecordingWriter()

    with pytest.raises(EventStreamClosed):
        await Forwarder(stream, writer).run()

    assert [p.measurement for p in writer.points] == ["deflux_ZHATemperature", "deflux_ZHATemperature"]
    assert [p.fields["temperature"] for p in writer.points] == [21.1, 21.2]
    assert all(p.tags["name"] == "Living room" for p in writer.points)
