"""Tests for fire-and-forget usage tracking."""

import asyncio
import uuid

from roome.rendering.tracking import UsageRecord, UsageTracker


class TestUsageRecord:
    """Tests for the wire payload."""

    def test_payload(self) -> None:
        component_id = uuid.uuid4()
        record = UsageRecord(
            component_id=component_id,
            page="/home",
            context={"slot": "hero"},
            load_time=12.5,
            user_agent="pytest",
        )
        assert record.to_payload() == {
            "componentId": str(component_id),
            "page": "/home",
            "context": {"slot": "hero"},
            "performanceMetrics": {"loadTime": 12.5},
            "userAgent": "pytest",
        }

    def test_payload_omits_empty_metrics(self) -> None:
        payload = UsageRecord(component_id=uuid.uuid4()).to_payload()
        assert payload["page"] == "unknown"
        assert "performanceMetrics" not in payload
        assert "userAgent" not in payload


class TestUsageTracker:
    """Tests for scheduling and failure isolation."""

    async def test_track_does_not_block(self) -> None:
        release = asyncio.Event()
        sent: list[UsageRecord] = []

        async def send(record: UsageRecord) -> None:
            await release.wait()
            sent.append(record)

        tracker = UsageTracker(send)
        record = UsageRecord(component_id=uuid.uuid4())
        tracker.track(record)

        assert sent == []
        assert tracker.pending == 1

        release.set()
        await tracker.drain()
        assert sent == [record]
        assert tracker.pending == 0

    async def test_failures_are_swallowed(self) -> None:
        async def send(record: UsageRecord) -> None:
            raise RuntimeError("network down")

        tracker = UsageTracker(send)
        task = tracker.track(UsageRecord(component_id=uuid.uuid4()))
        await tracker.drain()

        assert task.done()
        assert task.exception() is None

    async def test_drain_with_nothing_pending(self) -> None:
        async def send(record: UsageRecord) -> None:
            return None

        tracker = UsageTracker(send)
        await tracker.drain()
        assert tracker.pending == 0
