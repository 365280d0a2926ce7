#!/usr/bin/env python3
"""
Command-line MCP server for Planka.

This server implements the MCP (Model Context Protocol) via stdin/stdout:
one JSON-RPC 2.0 message per line in, one response per request out.
Notifications are never answered. Logs go to stderr only.
"""

import json
import math
import sys
import logging
from typing import Any, Dict, Optional, Union

import planka_config
from planka_client import PlankaClient
from planka_errors import PlankaConfigError
from tool_catalog import TOOLS
from planka_tools import call_tool

SERVER_NAME = "planka-mcp"
SERVER_VERSION = "0.1.0"
PROTOCOL_VERSION = "2024-11-05"

PARSE_ERROR = -32700
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603

logger = logging.getLogger('mcp_cli_server')


class JsonRpcError(Exception):
    """A JSON-RPC error to be sent back in place of a result."""

    def __init__(self, code: int, message: str, data: Any = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.data = data

    def to_dict(self) -> Dict[str, Any]:
        error = {"code": self.code, "message": self.message}
        if self.data is not None:
            error["data"] = self.data
        return error


def success_response(request_id: Any, result: Any) -> Dict[str, Any]:
    return {"jsonrpc": "2.0", "id": request_id, "result": result}


def error_response(request_id: Any, error: JsonRpcError) -> Dict[str, Any]:
    return {"jsonrpc": "2.0", "id": request_id, "error": error.to_dict()}


def _reject_constant(name: str) -> None:
    raise ValueError(f"Invalid JSON constant: {name}")


def _parse_float(text: str) -> float:
    value = float(text)
    if not math.isfinite(value):
        raise ValueError(f"Number out of range: {text}")
    return value


def encode_message(message: Dict[str, Any]) -> str:
    """Serialize an outgoing message as strict JSON (no NaN or Infinity)."""
    return json.dumps(message, allow_nan=False)


def _is_envelope(message: Any) -> bool:
    return (
        isinstance(message, dict)
        and isinstance(message.get("jsonrpc"), str)
        and isinstance(message.get("method"), str)
    )


class MCPServer:
    """MCP server bridging JSON-RPC tool calls to the Planka API."""

    def __init__(self, client: PlankaClient):
        self.client = client
        self.tools = TOOLS
        self.request_handlers = {
            "initialize": self._handle_initialize,
            "tools/list": self._handle_tools_list,
            "tools/call": self._handle_tools_call,
            "ping": self._handle_ping,
        }
        logger.info("MCP CLI Server initialized")

    def handle_message(self, line: Union[str, bytes]) -> Optional[Dict[str, Any]]:
        """Handle one raw input line; return the response, or None for notifications.

        Byte lines are decoded as UTF-8 here, so undecodable input is reported
        as a parse error like any other malformed line.
        """
        try:
            if isinstance(line, bytes):
                line = line.decode("utf-8")
            message = json.loads(line, parse_constant=_reject_constant, parse_float=_parse_float)
        except ValueError as e:
            logger.error(f"Invalid JSON received: {e}")
            return error_response(None, JsonRpcError(PARSE_ERROR, "Parse error"))

        if not _is_envelope(message):
            request_id = message.get("id") if isinstance(message, dict) else None
            logger.error(f"Malformed JSON-RPC envelope: {line}")
            return error_response(request_id, JsonRpcError(PARSE_ERROR, "Parse error"))

        # An id of null is treated like a missing id
        request_id = message.get("id")
        if request_id is None:
            self.handle_notification(message)
            return None

        response = self.handle_request(message)
        try:
            encode_message(response)
        except (TypeError, ValueError) as e:
            logger.error(f"Failed to serialize response for {message['method']}: {e}")
            return error_response(request_id, JsonRpcError(INTERNAL_ERROR, f"Internal error: {e}"))
        return response

    def handle_notification(self, notification: Dict[str, Any]) -> None:
        """Handle a notification. Never produces a response."""
        method = notification["method"]
        if method == "notifications/initialized":
            logger.info("Client sent initialized notification")
        elif method == "notifications/cancelled":
            logger.info(f"Client cancelled a request: {notification.get('params')}")
        else:
            logger.warning(f"Unknown notification method: {method}")

    def handle_request(self, request: Dict[str, Any]) -> Dict[str, Any]:
        """Handle an MCP request."""
        method = request["method"]
        params = request.get("params")
        request_id = request["id"]

        logger.info(f"Handling request: {method}")

        handler = self.request_handlers.get(method)
        if handler is None:
            logger.warning(f"Unknown method: {method}")
            return error_response(request_id, JsonRpcError(METHOD_NOT_FOUND, f"Method not found: {method}"))

        try:
            return success_response(request_id, handler(params))
        except JsonRpcError as e:
            logger.warning(f"Request {request_id} failed with {e.code}: {e.message}")
            return error_response(request_id, e)
        except Exception as e:
            logger.exception(f"Error handling request: {e}")
            return error_response(request_id, JsonRpcError(INTERNAL_ERROR, f"Internal error: {str(e)}"))

    def _handle_initialize(self, params: Any) -> Dict[str, Any]:
        logger.info(f"Initialization complete: {SERVER_NAME} {SERVER_VERSION}, protocol {PROTOCOL_VERSION}")
        return {
            "protocolVersion": PROTOCOL_VERSION,
            "capabilities": {
                "tools": {"listChanged": False}
            },
            "serverInfo": {
                "name": SERVER_NAME,
                "version": SERVER_VERSION
            }
        }

    def _handle_tools_list(self, params: Any) -> Dict[str, Any]:
        logger.info(f"Returning {len(self.tools)} tools")
        return {"tools": self.tools}

    def _handle_tools_call(self, params: Any) -> Dict[str, Any]:
        if params is None:
            logger.error("tools/call request missing params")
            raise JsonRpcError(INVALID_PARAMS, "Missing params")
        if not isinstance(params, dict) or not isinstance(params.get("name"), str):
            logger.error(f"Invalid tools/call params: {params}")
            raise JsonRpcError(INVALID_PARAMS, "Invalid params")

        tool_name = params["name"]
        logger.info(f"Calling tool: {tool_name}")
        return call_tool(self.client, tool_name, params.get("arguments"))

    def _handle_ping(self, params: Any) -> Dict[str, Any]:
        return {}

    def run(self, stdin=None, stdout=None):
        """Run the MCP server, reading from stdin and writing to stdout until EOF.

        stdin may yield text or byte lines; by default the raw byte stream of
        sys.stdin is read so that decoding errors stay per line.
        """
        stdin = stdin if stdin is not None else sys.stdin.buffer
        stdout = stdout if stdout is not None else sys.stdout
        logger.info("Starting MCP CLI server, waiting for JSON-RPC requests on stdin")

        for line in stdin:
            line = line.strip()
            if not line:
                continue

            try:
                response = self.handle_message(line)
            except Exception as e:
                logger.exception(f"Unexpected error: {e}")
                response = error_response(None, JsonRpcError(INTERNAL_ERROR, f"Internal error: {str(e)}"))

            # Write response to stdout (only if there's a response)
            if response is not None:
                stdout.write(encode_message(response) + "\n")
                stdout.flush()

        logger.info("EOF received on stdin, shutting down server")


def main():
    planka_config.setup_logging()
    logger.info(f"Starting {SERVER_NAME} {SERVER_VERSION}")

    try:
        settings = planka_config.load_config()
    except PlankaConfigError as e:
        logger.error(f"Failed to initialize Planka client: {e}")
        sys.exit(1)

    server = MCPServer(PlankaClient.from_settings(settings))
    server.run()
    logger.info("Server shutdown complete")


if __name__ == "__main__":
    main()
