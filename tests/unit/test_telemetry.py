"""Best-effort delivery: telemetry and change notifications never raise."""

import asyncio

from rentflow.core import get_settings
from rentflow.infrastructure import change_feed, telemetry
from rentflow.infrastructure.change_feed import EntityChanged

# Nothing listens on the discard port; connections are refused immediately.
UNREACHABLE = "http://127.0.0.1:9/capture"


async def test_unconfigured_sink_is_a_no_op(monkeypatch):
    monkeypatch.setattr(get_settings(), "TELEMETRY_URL", "")

    await telemetry.send_event("tenant-T1", "application_status_updated", application_id=1)


async def test_unreachable_sink_is_logged_not_raised(monkeypatch, caplog):
    monkeypatch.setattr(get_settings(), "TELEMETRY_URL", UNREACHABLE)

    await telemetry.send_event("tenant-T1", "application_status_updated", application_id=1)

    assert "dropped" in caplog.text


async def test_fire_and_forget_returns_before_delivery(monkeypatch):
    monkeypatch.setattr(get_settings(), "TELEMETRY_URL", UNREACHABLE)

    telemetry.track_async_event("tenant-T1", "application_status_updated", application_id=1)

    pending = list(telemetry._background_tasks)
    assert pending
    await asyncio.gather(*pending)


def test_change_listeners_receive_notifications():
    received = []
    unsubscribe = change_feed.subscribe(received.append)
    try:
        change_feed.publish(EntityChanged("Application", 5))
    finally:
        unsubscribe()

    assert received == [EntityChanged("Application", 5)]
    assert str(received[0]) == "Application #5"


def test_failing_listener_does_not_stop_others():
    received = []

    def broken(change):
        raise RuntimeError("cache down")

    unsubscribe_broken = change_feed.subscribe(broken)
    unsubscribe_ok = change_feed.subscribe(received.append)
    try:
        change_feed.publish(EntityChanged("Lease", 9))
    finally:
        unsubscribe_broken()
        unsubscribe_ok()

    assert received == [EntityChanged("Lease", 9)]
