"""Tests for the glazewm-ipc command line."""

from __future__ import annotations

import asyncio
import json

import pytest
from click.testing import CliRunner

from glazewm_ipc import cli
from glazewm_ipc.sdk.client import WmClient
from glazewm_ipc.transport.mock import MockTransport, OpenBehavior

MONITOR = {
    "id": "m1",
    "name": "DISPLAY1",
    "width": 1920,
    "height": 1080,
    "x": 0,
    "y": 0,
    "isPrimary": True,
}


@pytest.fixture
def transport(monkeypatch: pytest.MonkeyPatch) -> MockTransport:
    """Route every CLI client through a mock transport."""
    transport = MockTransport()
    monkeypatch.setattr(
        cli,
        "_make_client",
        lambda ctx: WmClient(ctx.obj["options"], transport=transport),
    )
    return transport


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


# =============================================================================
# query
# =============================================================================


class TestQueryCommand:
    """Tests for `glazewm-ipc query`."""

    def test_monitors_table(self, runner: CliRunner, transport: MockTransport) -> None:
        transport.set_response(
            "query monitors", [json.dumps({"success": True, "data": {"monitors": [MONITOR]}})]
        )

        result = runner.invoke(cli.main, ["query", "monitors"])

        assert result.exit_code == 0
        assert "DISPLAY1" in result.output
        assert "1920x1080" in result.output

    def test_monitors_json(self, runner: CliRunner, transport: MockTransport) -> None:
        transport.set_response(
            "query monitors", [json.dumps({"success": True, "data": {"monitors": [MONITOR]}})]
        )

        result = runner.invoke(cli.main, ["query", "monitors", "--format", "json"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data[0]["isPrimary"] is True

    def test_connect_failure(self, runner: CliRunner, transport: MockTransport) -> None:
        transport.open_behavior = OpenBehavior.FAIL

        result = runner.invoke(cli.main, ["query", "windows"])

        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_invalid_target(self, runner: CliRunner, transport: MockTransport) -> None:
        result = runner.invoke(cli.main, ["query", "everything"])

        assert result.exit_code == 2

    def test_invalid_port(self, runner: CliRunner, transport: MockTransport) -> None:
        result = runner.invoke(cli.main, ["--port", "0", "query", "monitors"])

        assert result.exit_code == 2


# =============================================================================
# command
# =============================================================================


class TestRunCommand:
    """Tests for `glazewm-ipc command`."""

    def test_command_with_options(self, runner: CliRunner, transport: MockTransport) -> None:
        transport.set_response(
            "command focus --workspace 1", [json.dumps({"success": True, "data": None})]
        )

        result = runner.invoke(cli.main, ["command", "focus", "--workspace", "1"])

        assert result.exit_code == 0
        assert transport.sent == ["command focus --workspace 1"]

    def test_command_with_subject(self, runner: CliRunner, transport: MockTransport) -> None:
        transport.set_response("command --id w1 close", [json.dumps({"success": True})])

        result = runner.invoke(cli.main, ["command", "--id", "w1", "close"])

        assert result.exit_code == 0
        assert transport.sent == ["command --id w1 close"]

    def test_command_failure(self, runner: CliRunner, transport: MockTransport) -> None:
        transport.set_response("command bogus", [json.dumps({"success": False, "error": "X"})])

        result = runner.invoke(cli.main, ["command", "bogus"])

        assert result.exit_code == 1
        assert "Error: X" in result.output


# =============================================================================
# Diagnostics
# =============================================================================


class TestDiagnostics:
    """Tests for check and status."""

    def test_check(self, runner: CliRunner, transport: MockTransport) -> None:
        transport.set_response("query monitors", [json.dumps({"success": True, "data": [MONITOR]})])
        transport.set_response("query workspaces", [json.dumps({"success": True, "data": []})])

        result = runner.invoke(cli.main, ["check"])

        assert result.exit_code == 0
        assert "1 monitor(s)" in result.output
        assert "IPC client working" in result.output

    def test_check_failure(
        self, runner: CliRunner, transport: MockTransport, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(WmClient, "is_wm_running", lambda self: False)
        transport.open_behavior = OpenBehavior.FAIL

        result = runner.invoke(cli.main, ["check"])

        assert result.exit_code == 1
        assert "GlazeWM does not appear to be running" in result.output
        assert "IPC test failed" in result.output

    def test_status_running(self, runner: CliRunner, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(cli, "is_glazewm_running", lambda: True)

        result = runner.invoke(cli.main, ["status"])

        assert result.exit_code == 0
        assert "GlazeWM is running" in result.output

    def test_status_not_running(self, runner: CliRunner, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(cli, "is_glazewm_running", lambda: False)

        result = runner.invoke(cli.main, ["status"])

        assert result.exit_code == 1
        assert "not running" in result.output


class TestTruncate:
    def test_short_text_unchanged(self) -> None:
        assert cli.truncate("abc", 10) == "abc"

    def test_long_text_truncated(self) -> None:
        assert cli.truncate("abcdefghij", 6) == "abc..."

    def test_none(self) -> None:
        assert cli.truncate(None) == ""


# =============================================================================
# watch
# =============================================================================


class ScriptedTransport(MockTransport):
    """Emits one event after opening, then drops the connection."""

    async def accept(self) -> None:
        await super().accept()
        asyncio.get_running_loop().create_task(self._script())

    async def _script(self) -> None:
        await asyncio.sleep(0.01)
        await self.receive(
            json.dumps({"type": "focus_changed", "data": {"focusedContainer": {"id": "w1"}}})
        )
        await self.drop()


class TestWatch:
    """Tests for `glazewm-ipc watch`."""

    def test_prints_events_until_closed(
        self, runner: CliRunner, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        transport = ScriptedTransport()
        monkeypatch.setattr(
            cli,
            "_make_client",
            lambda ctx: WmClient(ctx.obj["options"], transport=transport),
        )

        result = runner.invoke(cli.main, ["watch", "focus_changed"])

        assert result.exit_code == 1
        event = json.loads(result.output.splitlines()[0])
        assert event["type"] == "focus_changed"
        assert event["focusedContainer"] == {"id": "w1"}
        assert "Connection closed by GlazeWM" in result.output

    def test_rejects_unknown_kind(self, runner: CliRunner, transport: MockTransport) -> None:
        result = runner.invoke(cli.main, ["watch", "not_an_event"])

        assert result.exit_code == 2
