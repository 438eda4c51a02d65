"""Unit tests for routing inbound frames."""

from __future__ import annotations

import json
import logging

import pytest

from glazewm_ipc.errors import CommandFailed
from glazewm_ipc.protocol.events import WmEvent
from glazewm_ipc.sdk.demux import ResponseDemultiplexer
from glazewm_ipc.sdk.dispatcher import EventDispatcher
from glazewm_ipc.sdk.pending import PendingRequestTable


@pytest.fixture
def pending() -> PendingRequestTable:
    return PendingRequestTable()


@pytest.fixture
def dispatcher() -> EventDispatcher:
    return EventDispatcher()


@pytest.fixture
def demux(pending: PendingRequestTable, dispatcher: EventDispatcher) -> ResponseDemultiplexer:
    return ResponseDemultiplexer(pending, dispatcher)


class TestResponses:
    """Tests for matching responses to pending requests."""

    @pytest.mark.asyncio
    async def test_success_resolves_with_data(
        self, demux: ResponseDemultiplexer, pending: PendingRequestTable
    ) -> None:
        future = pending.register(1, "query monitors", 1.0)

        demux.route(json.dumps({"success": True, "data": {"monitors": []}}))

        assert await future == {"monitors": []}

    @pytest.mark.asyncio
    async def test_failure_rejects_with_error(
        self, demux: ResponseDemultiplexer, pending: PendingRequestTable
    ) -> None:
        future = pending.register(1, "command bogus", 1.0)

        demux.route(json.dumps({"success": False, "error": "X"}))

        with pytest.raises(CommandFailed, match="X") as exc_info:
            await future
        assert exc_info.value.command == "command bogus"

    @pytest.mark.asyncio
    async def test_failure_without_error_uses_default(
        self, demux: ResponseDemultiplexer, pending: PendingRequestTable
    ) -> None:
        future = pending.register(1, "command bogus", 1.0)

        demux.route(json.dumps({"success": False}))

        with pytest.raises(CommandFailed, match="Command failed"):
            await future

    @pytest.mark.asyncio
    async def test_response_goes_to_newest(
        self, demux: ResponseDemultiplexer, pending: PendingRequestTable
    ) -> None:
        older = pending.register(1, "a", 1.0)
        newer = pending.register(2, "b", 1.0)

        demux.route(json.dumps({"success": True, "data": "b-result"}))

        assert await newer == "b-result"
        assert not older.done()
        pending.cancel_all()

    def test_response_with_nothing_pending_dropped(self, demux: ResponseDemultiplexer) -> None:
        demux.route(json.dumps({"success": True, "data": 1}))


class TestEvents:
    """Tests for routing event notifications."""

    @pytest.mark.asyncio
    async def test_event_does_not_resolve_request(
        self,
        demux: ResponseDemultiplexer,
        pending: PendingRequestTable,
        dispatcher: EventDispatcher,
    ) -> None:
        received: list[WmEvent] = []
        dispatcher.subscribe("focus_changed", received.append)
        future = pending.register(1, "query focused", 1.0)

        demux.route(json.dumps({"type": "focus_changed", "data": {"focusedContainer": {"id": "w1"}}}))

        assert len(received) == 1
        assert not future.done()
        pending.cancel_all()


class TestRawFrames:
    """Tests for frames that are not JSON objects."""

    @pytest.mark.asyncio
    async def test_raw_resolves_sole_request(
        self, demux: ResponseDemultiplexer, pending: PendingRequestTable
    ) -> None:
        future = pending.register(1, "query monitors", 1.0)

        demux.route("plain text reply")

        assert await future == "plain text reply"

    @pytest.mark.asyncio
    async def test_raw_dropped_when_ambiguous(
        self,
        demux: ResponseDemultiplexer,
        pending: PendingRequestTable,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        first = pending.register(1, "a", 1.0)
        second = pending.register(2, "b", 1.0)

        with caplog.at_level(logging.WARNING):
            demux.route("garbage")

        assert not first.done()
        assert not second.done()
        assert "Dropping undecodable frame" in caplog.text
        pending.cancel_all()

    def test_raw_with_nothing_pending_dropped(self, demux: ResponseDemultiplexer) -> None:
        demux.route("garbage")

    @pytest.mark.asyncio
    async def test_deeply_nested_resolves_sole_request(
        self, demux: ResponseDemultiplexer, pending: PendingRequestTable
    ) -> None:
        future = pending.register(1, "query monitors", 1.0)
        text = "[" * 200_000

        demux.route(text)

        assert await future == text
