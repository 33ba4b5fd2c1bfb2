"""MCP protocol handling (JSON-RPC 2.0 over newline-delimited stdio)."""
import json
import logging
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field, StrictInt, StrictStr, ValidationError, field_validator

from .. import __version__
from ..errors import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    PARSE_ERROR,
    ProtocolError,
)
from .tools import get_tool_definitions

logger = logging.getLogger(__name__)

JSONRPC_VERSION = "2.0"
PROTOCOL_VERSION = "2024-11-05"
SERVER_NAME = "tmux-debug-mcp"

NOT_INITIALIZED_MESSAGE = "Server not initialized. Send 'initialize' first."

RequestId = Union[StrictInt, StrictStr]


class JsonRpcRequest(BaseModel):
    """A request or notification read from the client."""

    jsonrpc: str = JSONRPC_VERSION
    id: Optional[RequestId] = None
    method: StrictStr
    params: Optional[Any] = None

    @property
    def is_notification(self) -> bool:
        """A message without an id member expects no response."""
        return "id" not in self.model_fields_set


class JsonRpcError(BaseModel):
    code: int
    message: str
    data: Optional[Any] = None


class JsonRpcResponse(BaseModel):
    """A response written to the client."""

    jsonrpc: str = JSONRPC_VERSION
    id: Optional[RequestId] = None
    result: Optional[Any] = None
    error: Optional[JsonRpcError] = None

    @classmethod
    def success(cls, request_id: Optional[RequestId], result: Any) -> "JsonRpcResponse":
        return cls(id=request_id, result=result)

    @classmethod
    def failure(cls, request_id: Optional[RequestId], code: int, message: str) -> "JsonRpcResponse":
        return cls(id=request_id, error=JsonRpcError(code=code, message=message))

    @classmethod
    def from_protocol_error(cls, error: ProtocolError,
                            request_id: Optional[RequestId] = None) -> "JsonRpcResponse":
        return cls.failure(request_id, error.code, error.message)

    def to_wire(self) -> Dict[str, Any]:
        # id is always present, null when unknown
        data: Dict[str, Any] = {"jsonrpc": self.jsonrpc, "id": self.id}
        if self.error is not None:
            data["error"] = self.error.model_dump(exclude_none=True)
        else:
            data["result"] = self.result
        return data


class TextContent(BaseModel):
    type: str = "text"
    text: str


class ToolCallResult(BaseModel):
    """Result of a tools/call. Tool failures are results, not protocol errors."""

    content: List[TextContent]
    is_error: bool = False

    @classmethod
    def success(cls, text: str) -> "ToolCallResult":
        return cls(content=[TextContent(text=text)])

    @classmethod
    def error(cls, text: str) -> "ToolCallResult":
        return cls(content=[TextContent(text=text)], is_error=True)

    @property
    def text(self) -> str:
        return "".join(item.text for item in self.content)

    def to_wire(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"content": [item.model_dump() for item in self.content]}
        if self.is_error:
            data["isError"] = True
        return data


class ToolCallParams(BaseModel):
    """Parameters of a tools/call request."""

    name: StrictStr
    arguments: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("arguments", mode="before")
    @classmethod
    def _null_arguments(cls, value: Any) -> Any:
        return {} if value is None else value


class Method(str, Enum):
    """Methods this server routes."""

    INITIALIZE = "initialize"
    INITIALIZED = "initialized"
    TOOLS_LIST = "tools/list"
    TOOLS_CALL = "tools/call"
    UNKNOWN = "unknown"

    @classmethod
    def from_name(cls, name: str) -> "Method":
        if name in ("initialized", "notifications/initialized"):
            return cls.INITIALIZED
        if name in (cls.INITIALIZE.value, cls.TOOLS_LIST.value, cls.TOOLS_CALL.value):
            return cls(name)
        return cls.UNKNOWN


def parse_request(line: str) -> JsonRpcRequest:
    """Parse one line of input.

    Raises:
        ProtocolError: PARSE_ERROR if the line isn't JSON, INVALID_REQUEST if
            it isn't a request object. `request_id` is set when recoverable.
    """
    try:
        data = json.loads(line)
    except ValueError as e:
        raise ProtocolError(PARSE_ERROR, f"Parse error: {e}")

    if not isinstance(data, dict):
        raise ProtocolError(INVALID_REQUEST, "Invalid request: expected a JSON object")

    try:
        return JsonRpcRequest.model_validate(data)
    except ValidationError as e:
        error = ProtocolError(INVALID_REQUEST, f"Invalid request: {_first_error(e)}")
        request_id = data.get("id")
        if isinstance(request_id, (int, str)) and not isinstance(request_id, bool):
            error.request_id = request_id
        raise error


def parse_tool_call_params(params: Any) -> ToolCallParams:
    """Validate tools/call params.

    Raises:
        ProtocolError: INVALID_PARAMS if params are missing or malformed
    """
    if params is None:
        raise ProtocolError(INVALID_PARAMS, "tools/call requires params")
    try:
        return ToolCallParams.model_validate(params)
    except ValidationError as e:
        raise ProtocolError(INVALID_PARAMS, f"Invalid tool call params: {_first_error(e)}")


def serialize_response(response: JsonRpcResponse) -> str:
    """Serialize a response to a single line. Never raises."""
    try:
        return json.dumps(response.to_wire(), separators=(",", ":"))
    except Exception as e:
        logger.error(f"Failed to serialize response: {e}")
        message = json.dumps(f"Serialization error: {e}")
        return (
            f'{{"jsonrpc":"{JSONRPC_VERSION}","id":null,'
            f'"error":{{"code":{INTERNAL_ERROR},"message":{message}}}}}'
        )


def _first_error(error: ValidationError) -> str:
    details = error.errors()
    if not details:
        return str(error)
    first = details[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    return f"{location}: {first['msg']}" if location else first["msg"]


class McpHandler:
    """Protocol state: Uninitialized until initialize/initialized arrives."""

    def __init__(self):
        self.initialized = False

    def handle_initialize(self) -> Dict[str, Any]:
        if not self.initialized:
            logger.info("Client initialized")
        self.initialized = True
        return {
            "protocolVersion": PROTOCOL_VERSION,
            "capabilities": {"tools": {}},
            "serverInfo": {"name": SERVER_NAME, "version": __version__},
        }

    def handle_initialized(self) -> None:
        self.initialized = True

    def handle_tools_list(self) -> Dict[str, Any]:
        return {"tools": [tool.to_wire() for tool in get_tool_definitions()]}

    def validate_request(self, method: Method) -> None:
        """Check a method is allowed in the current state.

        Raises:
            ProtocolError: INTERNAL_ERROR for tool methods before initialization
        """
        if method in (Method.TOOLS_LIST, Method.TOOLS_CALL) and not self.initialized:
            raise ProtocolError(INTERNAL_ERROR, NOT_INITIALIZED_MESSAGE)
