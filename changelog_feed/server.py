"""
Line-delimited JSON-RPC 2.0 server over stdio.

Each request is one JSON object per line on stdin; each response is one
JSON object per line on stdout. Supported methods:

- tools/list: describe the available tools
- tools/call: {"name": ..., "arguments": {...}} -> tool content
- ping: liveness check
- initialize: handshake sent by MCP clients before anything else

Requests without an id are notifications and never get a response, not
even an error. Notifications such as notifications/initialized are
accepted and ignored.

Logging must never be written to stdout, which carries the protocol.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, TextIO

from . import __version__
from .logging_utils import log_event
from .tools import ChangelogTools

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602

SERVER_NAME = "changelog-feed"

# Newest first; an unknown client version is answered with the newest one
PROTOCOL_VERSIONS = ("2025-06-18", "2025-03-26", "2024-11-05")


async def handle_request(tools: ChangelogTools, request: Any) -> dict[str, Any] | None:
    """Dispatch one decoded JSON-RPC request.

    Returns:
        The response object, or None for notifications (requests without id)
    """
    if not isinstance(request, dict) or not isinstance(request.get("method"), str):
        return _error(None, INVALID_REQUEST, "Invalid request")

    is_notification = "id" not in request
    request_id = request.get("id")
    method = request["method"]
    params = request.get("params") or {}

    if is_notification:
        if method == "tools/call" and isinstance(params, dict) and isinstance(params.get("name"), str):
            await tools.call_tool(params["name"], params.get("arguments"))
        return None

    if method == "initialize":
        result = _initialize(params)
    elif method == "ping":
        result = {}
    elif method == "tools/list":
        result = {"tools": tools.list_tools()}
    elif method == "tools/call":
        if not isinstance(params, dict) or not isinstance(params.get("name"), str):
            return _error(request_id, INVALID_PARAMS, "tools/call requires a tool name")
        response = await tools.call_tool(params["name"], params.get("arguments"))
        result = response.to_content()
    else:
        return _error(request_id, METHOD_NOT_FOUND, f"Method not found: {method}")

    return {"jsonrpc": "2.0", "id": request_id, "result": result}


async def serve(tools: ChangelogTools, stdin: TextIO, stdout: TextIO) -> None:
    """Serve requests until stdin is exhausted."""
    log_event(tools.logger, f"{SERVER_NAME} running on stdio", event="server_start")
    while True:
        line = await asyncio.to_thread(stdin.readline)
        if not line:
            break
        line = line.strip()
        if not line:
            continue

        try:
            request = json.loads(line)
        except json.JSONDecodeError as exc:
            response = _error(None, PARSE_ERROR, f"Parse error: {exc}")
        else:
            response = await handle_request(tools, request)

        if response is not None:
            stdout.write(json.dumps(response, ensure_ascii=False) + "\n")
            stdout.flush()
    log_event(tools.logger, "stdin closed, shutting down", level=logging.DEBUG, event="server_stop")


def _error(request_id: Any, code: int, message: str) -> dict[str, Any]:
    return {"jsonrpc": "2.0", "id": request_id, "error": {"code": code, "message": message}}


def _initialize(params: Any) -> dict[str, Any]:
    requested = params.get("protocolVersion") if isinstance(params, dict) else None
    version = requested if requested in PROTOCOL_VERSIONS else PROTOCOL_VERSIONS[0]
    return {
        "protocolVersion": version,
        "capabilities": {"tools": {}},
        "serverInfo": {"name": SERVER_NAME, "version": __version__},
    }
