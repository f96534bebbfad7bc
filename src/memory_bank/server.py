"""MCP server: memory-bank, Memory Bank tools for coding assistants.

Exposes init-memory-bank, get-memory-bank-info and update-memory-bank.

Protocol: JSON-RPC 2.0 over stdio (NDJSON). stdout carries responses only;
logging goes to stderr.
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from typing import Any

from memory_bank.config import AppConfig, ServerConfig
from memory_bank.tools import ToolDefinition, get_memory_bank_tools

logger = logging.getLogger(__name__)

PARSE_ERROR = -32700
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603

# ── JSON-RPC 2.0 helpers ─────────────────────────────────────


def jsonrpc_result(req_id, result):
    return {"jsonrpc": "2.0", "id": req_id, "result": result}


def jsonrpc_error(req_id, code, message):
    return {"jsonrpc": "2.0", "id": req_id, "error": {"code": code, "message": message}}


def text_result(text: str, is_error: bool = False) -> dict[str, Any]:
    result: dict[str, Any] = {"content": [{"type": "text", "text": text}]}
    if is_error:
        result["isError"] = True
    return result


# ── Request handler ──────────────────────────────────────────


async def handle_request(
    req: dict,
    tools: dict[str, ToolDefinition],
    server: ServerConfig,
) -> dict | None:
    req_id = req.get("id")
    method = req.get("method", "")

    # Notifications (no id) get no response
    if req_id is None:
        if method == "notifications/initialized":
            logger.info("Client initialized")
        return None

    if method == "initialize":
        return jsonrpc_result(req_id, {
            "protocolVersion": server.protocol_version,
            "capabilities": {"tools": {}},
            "serverInfo": {"name": server.name, "version": server.version},
        })

    if method == "ping":
        return jsonrpc_result(req_id, {})

    if method == "tools/list":
        return jsonrpc_result(req_id, {"tools": [t.to_mcp() for t in tools.values()]})

    if method == "tools/call":
        params = req.get("params") or {}
        if not isinstance(params, dict):
            return jsonrpc_error(req_id, INVALID_PARAMS, "params must be an object")
        tool_name = params.get("name", "")
        if not isinstance(tool_name, str):
            return jsonrpc_error(req_id, INVALID_PARAMS, "name must be a string")
        args = params.get("arguments") or {}
        if not isinstance(args, dict):
            return jsonrpc_error(req_id, INVALID_PARAMS, "arguments must be an object")

        tool = tools.get(tool_name)
        if tool is None:
            return jsonrpc_result(req_id, text_result(f"Unknown tool: {tool_name}", is_error=True))

        try:
            text = tool.handler(args)
        except Exception as e:
            logger.exception("Tool %s raised", tool_name)
            return jsonrpc_result(req_id, text_result(f"[Internal error] {e}", is_error=True))
        return jsonrpc_result(req_id, text_result(text))

    return jsonrpc_error(req_id, METHOD_NOT_FOUND, f"Method not found: {method}")


async def handle_line(
    line: str,
    tools: dict[str, ToolDefinition],
    server: ServerConfig,
) -> dict | None:
    """Decode one NDJSON line and dispatch it."""
    try:
        req = json.loads(line)
    except json.JSONDecodeError as e:
        logger.warning("Parse error: %s", e)
        return jsonrpc_error(None, PARSE_ERROR, f"Parse error: {e}")
    if not isinstance(req, dict):
        return jsonrpc_error(None, PARSE_ERROR, "Request must be a JSON object")
    logger.debug("<- %s", req.get("method", "?"))
    return await handle_request(req, tools, server)


def _request_id(line: str):
    try:
        req = json.loads(line)
    except json.JSONDecodeError:
        return None
    return req.get("id") if isinstance(req, dict) else None


async def respond(
    line: str,
    tools: dict[str, ToolDefinition],
    server: ServerConfig,
) -> str | None:
    """Answer one line as an encoded NDJSON response, or None for notifications.

    Any failure while handling a request becomes an internal-error response for
    its id. Output is ASCII-only JSON so it survives any stdout encoding.
    """
    try:
        response = await handle_line(line, tools, server)
    except Exception as e:
        logger.exception("Handler error: %s", e)
        req_id = _request_id(line)
        if req_id is None:
            return None
        response = jsonrpc_error(req_id, INTERNAL_ERROR, f"Internal error: {e}")
    if response is None:
        return None
    return json.dumps(response) + "\n"


# ── Stdio transport (NDJSON) ─────────────────────────────────


async def serve(config: AppConfig) -> None:
    """Read requests from stdin until EOF, answering each on stdout."""
    tools = get_memory_bank_tools(config)
    logger.info(
        "Starting %s %s (memory dir=%s)",
        config.server.name,
        config.server.version,
        config.memory_bank.dir_name,
    )

    reader = asyncio.StreamReader()
    protocol = asyncio.StreamReaderProtocol(reader)
    await asyncio.get_running_loop().connect_read_pipe(lambda: protocol, sys.stdin)

    while True:
        line = await reader.readline()
        if not line:
            break
        line = line.decode("utf-8", errors="replace").strip()
        if not line:
            continue

        payload = await respond(line, tools, config.server)
        if payload is None:
            continue
        try:
            sys.stdout.write(payload)
            sys.stdout.flush()
        except (OSError, UnicodeError) as e:
            logger.error("Failed to write response: %s", e)

    logger.info("stdin closed, shutting down")
