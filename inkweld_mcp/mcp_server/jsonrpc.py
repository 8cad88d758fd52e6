"""JSON-RPC 2.0 envelope parsing and response builders."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

from inkweld_mcp.exceptions import McpProtocolError

JSONRPC_VERSION = "2.0"
PROTOCOL_VERSION = "2025-06-18"

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603
RESOURCE_NOT_FOUND = -32002

RequestId = Union[str, int]


class EnvelopeError(McpProtocolError):
    """A request that could not be turned into a dispatchable envelope."""

    def __init__(self, code: int, message: str, request_id: Optional[RequestId] = None):
        super().__init__(code, message)
        self.request_id = request_id


@dataclass
class JsonRpcRequest:
    method: str
    id: Optional[RequestId] = None
    params: Dict[str, Any] = field(default_factory=dict)
    is_notification: bool = False

    @property
    def response_id(self) -> RequestId:
        return self.id if self.id is not None else 0


def _valid_id(value: Any) -> bool:
    return isinstance(value, (str, int)) and not isinstance(value, bool)


def parse_request(body: Union[bytes, str]) -> JsonRpcRequest:
    """Parse one JSON-RPC request from a raw HTTP body.

    Raises:
        EnvelopeError: ``-32700`` for undecodable bodies or non-objects,
            ``-32600`` for malformed envelopes and batches
    """
    try:
        payload = json.loads(body)
    except (ValueError, UnicodeDecodeError) as exc:
        raise EnvelopeError(PARSE_ERROR, "Invalid JSON-RPC request") from exc

    if isinstance(payload, list):
        raise EnvelopeError(INVALID_REQUEST, "Batch requests are not supported")
    if not isinstance(payload, dict):
        raise EnvelopeError(PARSE_ERROR, "Invalid JSON-RPC request")

    raw_id = payload.get("id")
    request_id = raw_id if _valid_id(raw_id) else None

    if payload.get("jsonrpc") != JSONRPC_VERSION:
        raise EnvelopeError(INVALID_REQUEST, 'Invalid Request: jsonrpc must be "2.0"', request_id)
    if raw_id is not None and not _valid_id(raw_id):
        raise EnvelopeError(INVALID_REQUEST, "Invalid Request: id must be a string or integer")
    method = payload.get("method")
    if not isinstance(method, str) or not method:
        raise EnvelopeError(INVALID_REQUEST, "Invalid Request: method must be a string", request_id)
    params = payload.get("params")
    if params is None:
        params = {}
    if not isinstance(params, dict):
        raise EnvelopeError(INVALID_REQUEST, "Invalid Request: params must be an object", request_id)

    return JsonRpcRequest(
        method=method,
        id=request_id,
        params=params,
        is_notification="id" not in payload,
    )


def success_response(request_id: Optional[RequestId], result: Any) -> Dict[str, Any]:
    return {
        "jsonrpc": JSONRPC_VERSION,
        "id": request_id if request_id is not None else 0,
        "result": result,
    }


def error_response(
    request_id: Optional[RequestId], code: int, message: str, data: Any = None
) -> Dict[str, Any]:
    error: Dict[str, Any] = {"code": code, "message": message}
    if data is not None:
        error["data"] = data
    return {
        "jsonrpc": JSONRPC_VERSION,
        "id": request_id if request_id is not None else 0,
        "error": error,
    }
