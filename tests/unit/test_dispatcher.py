"""Tests for the tool dispatcher."""
import json
from unittest.mock import Mock

import pytest

from tmux_debug_mcp.audit import AuditLogger
from tmux_debug_mcp.dispatcher import ToolDispatcher
from tmux_debug_mcp.models.pane import PaneStatus


def _create(dispatcher, command="bash", name=None):
    args = {"command": command}
    if name is not None:
        args["name"] = name
    return dispatcher.call("create_pane", args)


class TestCreatePane:
    """Tests for create_pane."""

    def test_creates_and_registers(self, dispatcher, registry, executor):
        result = _create(dispatcher, "cargo run", "server")

        assert not result.is_error
        assert result.text == "Created pane 'server' (id: debug-1) running: cargo run"
        assert registry.get("debug-1").name == "server"
        assert executor.calls[-1][-2:] == ["cargo run", "Enter"]

    def test_name_defaults_to_id(self, dispatcher, registry):
        result = _create(dispatcher, "bash")

        assert result.text == "Created pane 'debug-1' (id: debug-1) running: bash"
        assert registry.get("debug-1").name == "debug-1"

    def test_rollback_on_tmux_failure(self, dispatcher, registry, executor):
        executor.failures["new-window"] = "create window failed"

        result = _create(dispatcher)

        assert result.is_error
        assert result.text.startswith("Failed to create pane:")
        assert registry.is_empty()

    def test_ids_not_reused_after_rollback(self, dispatcher, registry, executor):
        executor.failures["new-window"] = "create window failed"
        _create(dispatcher)
        del executor.failures["new-window"]

        result = _create(dispatcher)

        assert "(id: debug-2)" in result.text
        assert [pane.id for pane in registry] == ["debug-2"]

    def test_missing_command(self, dispatcher, registry, executor):
        result = dispatcher.call("create_pane", {"name": "x"})

        assert result.is_error
        assert result.text.startswith("Missing required parameter 'command'.")
        assert registry.is_empty()
        assert executor.calls == []

    def test_wrong_command_type(self, dispatcher):
        result = dispatcher.call("create_pane", {"command": 5})

        assert result.is_error
        assert result.text == "Invalid parameter 'command': expected a string"

    def test_null_name_is_absent(self, dispatcher, registry):
        result = dispatcher.call("create_pane", {"command": "bash", "name": None})

        assert not result.is_error
        assert registry.get("debug-1").name == "debug-1"


class TestSendKeys:
    """Tests for send_keys."""

    def test_sends_verbatim(self, dispatcher, executor, engine):
        _create(dispatcher)

        result = dispatcher.call("send_keys", {"pane_id": "debug-1", "keys": "echo hi"})

        assert not result.is_error
        assert result.text == "Sent keys to pane 'debug-1'"
        assert executor.calls[-1] == ["send-keys", "-t", f"{engine.session_name}:debug-1", "echo hi"]

    def test_unknown_pane_never_reaches_tmux(self, dispatcher, executor):
        result = dispatcher.call("send_keys", {"pane_id": "debug-9", "keys": "x"})

        assert result.is_error
        assert result.text == "Pane 'debug-9' not found. Use list_panes to see active panes."
        assert executor.calls == []

    @pytest.mark.parametrize("args,param", [
        ({"keys": "x"}, "pane_id"),
        ({"pane_id": "debug-1"}, "keys"),
    ])
    def test_missing_arguments(self, dispatcher, args, param):
        _create(dispatcher)

        result = dispatcher.call("send_keys", args)

        assert result.is_error
        assert result.text.startswith(f"Missing required parameter '{param}'.")

    def test_tmux_failure(self, dispatcher, executor):
        _create(dispatcher)
        executor.failures["send-keys"] = "unknown key"

        result = dispatcher.call("send_keys", {"pane_id": "debug-1", "keys": "x"})

        assert result.is_error
        assert result.text.startswith("Failed to send keys:")


class TestCapturePane:
    """Tests for capture_pane."""

    def test_returns_output(self, dispatcher, executor, engine):
        _create(dispatcher)

        result = dispatcher.call("capture_pane", {"pane_id": "debug-1"})

        assert not result.is_error
        assert result.text == "line 1\nline 2\nline 3\n"
        capture = [c for c in executor.calls if c[0] == "capture-pane"][-1]
        assert capture == ["capture-pane", "-t", f"{engine.session_name}:debug-1", "-p", "-S", "-100"]

    @pytest.mark.parametrize("lines,expected", [(5000, "-1000"), (0, "-1"), (-3, "-1"), (250, "-250")])
    def test_lines_clamped(self, dispatcher, executor, lines, expected):
        _create(dispatcher)

        dispatcher.call("capture_pane", {"pane_id": "debug-1", "lines": lines})

        capture = [c for c in executor.calls if c[0] == "capture-pane"][-1]
        assert capture[-1] == expected

    @pytest.mark.parametrize("lines", ["50", True, 2.5])
    def test_lines_wrong_type(self, dispatcher, lines):
        _create(dispatcher)

        result = dispatcher.call("capture_pane", {"pane_id": "debug-1", "lines": lines})

        assert result.is_error
        assert result.text == "Invalid parameter 'lines': expected an integer"

    def test_refreshes_status(self, dispatcher, registry, executor):
        _create(dispatcher)
        executor.outputs["list-windows"] = "debug-1|123|1\n"

        dispatcher.call("capture_pane", {"pane_id": "debug-1"})

        assert registry.get("debug-1").status == PaneStatus.EXITED

    def test_status_refresh_failure_tolerated(self, dispatcher, registry, executor):
        _create(dispatcher)
        executor.failures["list-windows"] = "server exited unexpectedly"

        result = dispatcher.call("capture_pane", {"pane_id": "debug-1"})

        assert not result.is_error
        assert registry.get("debug-1").status == PaneStatus.RUNNING

    def test_unknown_pane(self, dispatcher, executor):
        result = dispatcher.call("capture_pane", {"pane_id": "debug-1"})

        assert result.is_error
        assert "not found" in result.text
        assert executor.calls == []


class TestKillPane:
    """Tests for kill_pane."""

    def test_kills_and_forgets(self, dispatcher, registry, executor, engine):
        _create(dispatcher)

        result = dispatcher.call("kill_pane", {"pane_id": "debug-1"})

        assert result.text == "Killed pane 'debug-1'"
        assert executor.calls[-1] == ["kill-window", "-t", f"{engine.session_name}:debug-1"]
        assert not registry.contains("debug-1")

    def test_second_kill_is_not_found(self, dispatcher):
        _create(dispatcher)
        dispatcher.call("kill_pane", {"pane_id": "debug-1"})

        result = dispatcher.call("kill_pane", {"pane_id": "debug-1"})

        assert result.is_error
        assert "not found" in result.text

    def test_failure_keeps_record(self, dispatcher, registry, executor):
        _create(dispatcher)
        executor.failures["kill-window"] = "can't find window: debug-1"

        result = dispatcher.call("kill_pane", {"pane_id": "debug-1"})

        assert result.is_error
        assert result.text.startswith("Failed to kill pane:")
        assert registry.contains("debug-1")


class TestListPanes:
    """Tests for list_panes."""

    def test_empty(self, dispatcher):
        result = dispatcher.call("list_panes", {})

        assert not result.is_error
        assert result.text == "No active panes. Use create_pane to create one."

    def test_lists_with_refreshed_status(self, dispatcher, executor):
        _create(dispatcher, "bash", "shell")
        _create(dispatcher, "make test")
        executor.outputs["list-windows"] = "debug-1|10|0\ndebug-2|11|1\nstray|12|0\n"

        result = dispatcher.call("list_panes")

        assert json.loads(result.text) == [
            {"id": "debug-1", "name": "shell", "status": "running", "command": "bash"},
            {"id": "debug-2", "name": "debug-2", "status": "exited", "command": "make test"},
        ]

    def test_list_failure_uses_last_status(self, dispatcher, registry, executor):
        _create(dispatcher)
        registry.update_status("debug-1", PaneStatus.EXITED)
        executor.failures["list-windows"] = "server exited unexpectedly"

        result = dispatcher.call("list_panes", {})

        assert not result.is_error
        assert json.loads(result.text)[0]["status"] == "exited"


def test_unknown_tool(dispatcher):
    result = dispatcher.call("resize_pane", {})

    assert result.is_error
    assert result.text == (
        "Unknown tool 'resize_pane'. Available tools: "
        "create_pane, send_keys, capture_pane, kill_pane, list_panes"
    )


def test_unexpected_exception_is_tool_error(registry):
    engine = Mock()
    engine.create_pane.side_effect = RuntimeError("boom")
    dispatcher = ToolDispatcher(registry, engine)

    result = dispatcher.call("create_pane", {"command": "bash"})

    assert result.is_error
    assert result.text == "Internal error: boom"
    assert registry.is_empty()


class TestAudit:
    """Tests for audit logging through the dispatcher."""

    def test_entries_written(self, registry, engine, tmp_path):
        audit = AuditLogger(tmp_path / "audit.jsonl", tmp_path / "captures")
        dispatcher = ToolDispatcher(registry, engine, audit)

        _create(dispatcher, "bash", "sh")
        dispatcher.call("send_keys", {"pane_id": "debug-1", "keys": "ls"})
        dispatcher.call("capture_pane", {"pane_id": "debug-1", "lines": 10})
        dispatcher.call("list_panes", {})
        dispatcher.call("kill_pane", {"pane_id": "debug-1"})

        entries = [json.loads(line) for line in (tmp_path / "audit.jsonl").read_text().splitlines()]
        assert [e["tool"] for e in entries] == [
            "create_pane", "send_keys", "capture_pane", "list_panes", "kill_pane",
        ]
        assert entries[0]["name"] == "sh"
        assert entries[1]["keys"] == "ls"
        assert entries[2]["lines"] == 10
        assert entries[2]["output_bytes"] == len("line 1\nline 2\nline 3\n")
        assert "output" not in entries[2]
        capture = tmp_path / "captures" / "debug-1-capture-001.txt"
        assert capture.read_text() == "line 1\nline 2\nline 3\n"

    def test_failed_calls_not_audited(self, registry, engine, tmp_path):
        audit = AuditLogger(tmp_path / "audit.jsonl")
        dispatcher = ToolDispatcher(registry, engine, audit)

        dispatcher.call("send_keys", {"pane_id": "debug-1", "keys": "x"})

        assert not (tmp_path / "audit.jsonl").exists()

    def test_audit_failure_ignored(self, registry, engine):
        audit = Mock()
        audit.log_create_pane.side_effect = OSError("disk full")
        dispatcher = ToolDispatcher(registry, engine, audit)

        result = _create(dispatcher)

        assert not result.is_error
        assert registry.contains("debug-1")
