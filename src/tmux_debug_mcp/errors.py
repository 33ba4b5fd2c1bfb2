"""Errors raised while serving requests.

Protocol errors become JSON-RPC error responses. Everything else is
reported to the client as a tool result with isError set.
"""

# Standard JSON-RPC error codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603


class ProtocolError(Exception):
    """A request that can't be served at the protocol level."""

    def __init__(self, code: int, message: str, request_id=None):
        self.code = code
        self.message = message
        # Set when the id of the offending request could be recovered
        self.request_id = request_id
        super().__init__(message)


class ToolValidationError(Exception):
    """A tool argument is missing or has the wrong type."""

    def __init__(self, parameter: str, message: str):
        self.parameter = parameter
        super().__init__(message)


class PaneNotFoundError(Exception):
    """The pane ID isn't known to the registry."""

    def __init__(self, pane_id: str):
        self.pane_id = pane_id
        super().__init__(f"Pane '{pane_id}' not found. Use list_panes to see active panes.")
