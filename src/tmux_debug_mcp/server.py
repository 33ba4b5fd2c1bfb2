"""Stdio MCP server.

Reads one JSON-RPC message per line from stdin and writes at most one
response line to stdout. Requests are handled strictly one at a time.
"""
import logging
import os
import signal
import sys
from typing import Optional, TextIO

from .audit import AuditLogger
from .config import Config, get_config
from .dispatcher import ToolDispatcher
from .errors import INTERNAL_ERROR, METHOD_NOT_FOUND, ProtocolError
from .mcp.protocol import (
    JsonRpcResponse,
    McpHandler,
    Method,
    parse_request,
    parse_tool_call_params,
    serialize_response,
)
from .panes import PaneRegistry
from .tmux import TmuxExecutor, TmuxSession

logger = logging.getLogger(__name__)


def setup_logging(level: Optional[str] = None):
    """Configure logging for the application.

    Logs go to stderr; stdout carries the protocol.
    """
    # Get log level from argument, then environment, default to WARNING
    log_level = (level or os.getenv('TMUX_DEBUG_LOG_LEVEL', 'WARNING')).upper()

    logging.basicConfig(
        level=getattr(logging, log_level, logging.WARNING),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stderr),
        ],
        force=True,
    )

    logging.getLogger('tmux_debug_mcp').setLevel(getattr(logging, log_level, logging.WARNING))


class McpServer:
    """Protocol state machine wired to the tool dispatcher."""

    def __init__(self, dispatcher: ToolDispatcher, handler: Optional[McpHandler] = None):
        self.dispatcher = dispatcher
        self.handler = handler or McpHandler()

    @property
    def registry(self) -> PaneRegistry:
        return self.dispatcher.registry

    @property
    def engine(self) -> TmuxSession:
        return self.dispatcher.engine

    def process_line(self, line: str) -> Optional[str]:
        """Handle one input line, returning the encoded response if any."""
        response = self.process_request(line)
        if response is None:
            return None
        return serialize_response(response)

    def process_request(self, line: str) -> Optional[JsonRpcResponse]:
        """Handle one input line. Returns None for notifications."""
        try:
            request = parse_request(line)
        except ProtocolError as e:
            logger.warning(f"Rejected input: {e.message}")
            return JsonRpcResponse.from_protocol_error(e, e.request_id)

        method = Method.from_name(request.method)
        try:
            result = self._handle(method, request.method, request.params)
        except ProtocolError as e:
            response = JsonRpcResponse.from_protocol_error(e, request.id)
        except Exception as e:
            logger.exception(f"Unhandled error processing {request.method}")
            response = JsonRpcResponse.failure(request.id, INTERNAL_ERROR, f"Internal error: {e}")
        else:
            response = JsonRpcResponse.success(request.id, result) if result is not None else None

        if request.is_notification or method == Method.INITIALIZED:
            return None
        return response

    def _handle(self, method: Method, name: str, params) -> Optional[dict]:
        # Malformed tools/call params are reported even before initialize
        call = parse_tool_call_params(params) if method == Method.TOOLS_CALL else None
        self.handler.validate_request(method)

        if method == Method.INITIALIZE:
            return self.handler.handle_initialize()
        if method == Method.INITIALIZED:
            self.handler.handle_initialized()
            return None
        if method == Method.TOOLS_LIST:
            return self.handler.handle_tools_list()
        if call is not None:
            return self.dispatcher.call(call.name, call.arguments).to_wire()

        raise ProtocolError(METHOD_NOT_FOUND, f"Unknown method: {name}")

    def serve(self, stdin: TextIO, stdout: TextIO) -> None:
        """Process lines until EOF. I/O errors propagate to the caller."""
        for line in stdin:
            if not line.strip():
                continue

            output = self.process_line(line)
            if output is not None:
                stdout.write(output + "\n")
                stdout.flush()


def build_server(config: Config, engine: TmuxSession) -> McpServer:
    dispatcher = ToolDispatcher(PaneRegistry(), engine, AuditLogger.from_config(config))
    return McpServer(dispatcher)


def _exit_on_signal(signum, frame):
    # SystemExit unwinds the engine context so the session gets killed
    logger.info(f"Received signal {signum}, shutting down")
    sys.exit(0)


def run_server(config: Optional[Config] = None, stdin: Optional[TextIO] = None,
               stdout: Optional[TextIO] = None) -> int:
    """Run the stdio server until EOF or a signal.

    Returns:
        Process exit status
    """
    config = config or get_config()

    signal.signal(signal.SIGINT, _exit_on_signal)
    signal.signal(signal.SIGTERM, _exit_on_signal)

    engine = TmuxSession(
        executor=TmuxExecutor(config.tmux.binary),
        width=config.tmux.width,
        height=config.tmux.height,
        session_prefix=config.tmux.session_prefix,
    )
    logger.info(f"Starting tmux-debug-mcp (session {engine.session_name})")

    if stdin is None:
        # A stray invalid byte should become a parse error, not kill the loop
        sys.stdin.reconfigure(errors="replace")
        stdin = sys.stdin

    with engine:
        server = build_server(config, engine)
        try:
            server.serve(stdin, stdout or sys.stdout)
        except OSError as e:
            print(f"Server error: {e}", file=sys.stderr)
            return 1

    logger.info("Input closed, exiting")
    return 0
