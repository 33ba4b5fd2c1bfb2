"""Shared test fixtures."""
import os
import subprocess
from typing import Dict, List, Optional

import pytest

from tmux_debug_mcp.dispatcher import ToolDispatcher
from tmux_debug_mcp.panes import PaneRegistry
from tmux_debug_mcp.server import McpServer
from tmux_debug_mcp.tmux import CommandExecutor, TmuxSession

DEFAULT_OUTPUTS = {
    "list-windows": "debug-1|12345|0\n",
    "capture-pane": "line 1\nline 2\nline 3\n",
}


class FakeExecutor(CommandExecutor):
    """Records tmux invocations and answers from canned output."""

    def __init__(self, outputs: Optional[Dict[str, str]] = None,
                 failures: Optional[Dict[str, str]] = None):
        self.calls: List[List[str]] = []
        self.outputs = dict(DEFAULT_OUTPUTS if outputs is None else outputs)
        # subcommand -> stderr of a failing run
        self.failures = dict(failures or {})

    def execute(self, args):
        self.calls.append(list(args))
        subcommand = args[0]
        if subcommand in self.failures:
            return subprocess.CompletedProcess(["tmux", *args], 1, "", self.failures[subcommand])
        return subprocess.CompletedProcess(["tmux", *args], 0, self.outputs.get(subcommand, ""), "")

    @property
    def subcommands(self) -> List[str]:
        return [call[0] for call in self.calls]


@pytest.fixture
def executor():
    return FakeExecutor()


@pytest.fixture
def engine(executor):
    return TmuxSession(executor=executor)


@pytest.fixture
def registry():
    return PaneRegistry()


@pytest.fixture
def dispatcher(registry, engine):
    return ToolDispatcher(registry, engine)


@pytest.fixture
def server(dispatcher):
    return McpServer(dispatcher)


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every TMUX_DEBUG_* variable for the duration of a test."""
    for key in list(os.environ):
        if key.startswith("TMUX_DEBUG"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", "/nonexistent/xdg")
    return monkeypatch
