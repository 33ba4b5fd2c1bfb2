"""Tool definitions advertised through tools/list."""
from typing import Dict, List

from pydantic import BaseModel, Field

CREATE_PANE = "create_pane"
SEND_KEYS = "send_keys"
CAPTURE_PANE = "capture_pane"
KILL_PANE = "kill_pane"
LIST_PANES = "list_panes"

TOOL_NAMES = (CREATE_PANE, SEND_KEYS, CAPTURE_PANE, KILL_PANE, LIST_PANES)

DEFAULT_CAPTURE_LINES = 100
MIN_CAPTURE_LINES = 1
MAX_CAPTURE_LINES = 1000


class PropertyDefinition(BaseModel):
    """JSON schema for one tool argument."""

    type: str
    description: str


class InputSchema(BaseModel):
    """JSON schema for a tool's argument object."""

    type: str = "object"
    properties: Dict[str, PropertyDefinition] = Field(default_factory=dict)
    required: List[str] = Field(default_factory=list)

    def to_wire(self) -> dict:
        data = self.model_dump()
        if not data["required"]:
            del data["required"]
        return data


class ToolDefinition(BaseModel):
    """A tool as described to the client."""

    name: str
    description: str
    input_schema: InputSchema

    def to_wire(self) -> dict:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema.to_wire(),
        }


def _prop(type_: str, description: str) -> PropertyDefinition:
    return PropertyDefinition(type=type_, description=description)


def get_tool_definitions() -> List[ToolDefinition]:
    """The five pane tools, in a stable order."""
    return [
        ToolDefinition(
            name=CREATE_PANE,
            description=(
                "Create a new tmux pane running a command. Use for spawning servers, "
                "test runners, or interactive shells. Returns a pane ID for subsequent "
                "operations."
            ),
            input_schema=InputSchema(
                properties={
                    "command": _prop(
                        "string", "Command to run in the pane (e.g., 'RUST_LOG=debug cargo run')"
                    ),
                    "name": _prop("string", "Optional human-readable name for the pane"),
                },
                required=["command"],
            ),
        ),
        ToolDefinition(
            name=SEND_KEYS,
            description=(
                "Send keystrokes to a tmux pane. Use for interactive input, running "
                "additional commands, or sending signals (e.g., Ctrl-C as 'C-c')."
            ),
            input_schema=InputSchema(
                properties={
                    "pane_id": _prop("string", "Target pane ID from create_pane or list_panes"),
                    "keys": _prop(
                        "string", "Keystrokes to send. Use 'C-c' for Ctrl-C, 'Enter' for newline."
                    ),
                },
                required=["pane_id", "keys"],
            ),
        ),
        ToolDefinition(
            name=CAPTURE_PANE,
            description=(
                "Capture recent output from a tmux pane. Use to read logs, command "
                "output, or error messages. Works on both running and exited panes."
            ),
            input_schema=InputSchema(
                properties={
                    "pane_id": _prop("string", "Target pane ID"),
                    "lines": _prop(
                        "integer",
                        f"Number of lines to capture (default: {DEFAULT_CAPTURE_LINES}, "
                        f"max: {MAX_CAPTURE_LINES})",
                    ),
                },
                required=["pane_id"],
            ),
        ),
        ToolDefinition(
            name=KILL_PANE,
            description=(
                "Terminate a tmux pane and its running process. Use for cleanup after debugging."
            ),
            input_schema=InputSchema(
                properties={"pane_id": _prop("string", "Target pane ID")},
                required=["pane_id"],
            ),
        ),
        ToolDefinition(
            name=LIST_PANES,
            description=(
                "List all active tmux panes with their IDs, names, status (running/exited), "
                "and running commands."
            ),
            input_schema=InputSchema(),
        ),
    ]
