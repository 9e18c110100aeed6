"""
Layer1 Digital MCP Server

A Model Context Protocol server that exposes Layer1 digital asset operations
to AI assistants.

Architecture:
    Assistant → MCP Server (stdio) → DigitalAssetService → signed HTTPS → Layer1 API

Usage:
    layer1-digital serve

Security:
- Transport: stdio (local only, no network exposure)
- Authentication: every outbound call carries an RFC 9421 signature
- Audit: all tool calls are logged (argument names only)
"""

import asyncio
import json
import logging
from typing import Any, Dict, List, Optional

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.shared.exceptions import McpError
from mcp.types import (
    Tool,
    TextContent,
    ErrorData,
    INTERNAL_ERROR,
    INVALID_PARAMS,
    METHOD_NOT_FOUND,
)

from .config import Layer1Config
from .digital_assets import Asset, DigitalAssetService, Network
from .exceptions import Layer1Error, ValidationError
from .http_client import AuthenticatedClient
from .version import __version__

logger = logging.getLogger(__name__)

SERVER_NAME = "layer1-digital-mcp"

NETWORKS = [network.value for network in Network]
ASSETS = [asset.value for asset in Asset]

TOOLS = [
    Tool(
        name="create_address",
        description="Create a new blockchain address for an asset pool",
        inputSchema={
            "type": "object",
            "properties": {
                "network": {
                    "type": "string",
                    "enum": NETWORKS,
                    "description": "The blockchain network"
                },
                "reference": {
                    "type": "string",
                    "description": 'Reference for the address eg: "user-id-123", "payment-id-123", etc'
                }
            },
            "required": ["network", "reference"]
        }
    ),
    Tool(
        name="list_transactions",
        description="List transactions for the asset pool",
        inputSchema={
            "type": "object",
            "properties": {
                "transactionHash": {
                    "type": "string",
                    "description": "Filter by specific transaction hash"
                }
            }
        }
    ),
    Tool(
        name="get_asset_pool_balance",
        description="Get the balance of the asset pool",
        inputSchema={
            "type": "object",
            "properties": {}
        }
    ),
    Tool(
        name="send_transaction_request",
        description="Create a transaction request to send funds",
        inputSchema={
            "type": "object",
            "properties": {
                "toAddress": {
                    "type": "string",
                    "description": "Destination address"
                },
                "amount": {
                    "type": "string",
                    "description": "Amount to send (as string to preserve precision)"
                },
                "asset": {
                    "type": "string",
                    "enum": ASSETS,
                    "description": "Asset"
                },
                "network": {
                    "type": "string",
                    "enum": NETWORKS,
                    "description": "Network to send on"
                },
                "reference": {
                    "type": "string",
                    "description": "Unique reference for the transaction"
                }
            },
            "required": ["toAddress", "amount", "asset", "network", "reference"]
        }
    ),
]

_REQUIRED_ARGUMENTS = {tool.name: tool.inputSchema.get("required", []) for tool in TOOLS}


def audit_log(tool_name: str, arguments: Dict[str, Any]) -> None:
    """Log tool usage for audit trail. Argument values are not logged."""
    logger.info(f"AUDIT: tool={tool_name} args={sorted(arguments)}")


def _text_result(title: str, result: Any) -> List[TextContent]:
    return [TextContent(
        type="text",
        text=f"{title}:\n{json.dumps(result, indent=2, ensure_ascii=False, default=str)}"
    )]


def _check_required(name: str, arguments: Dict[str, Any]) -> None:
    missing = [key for key in _REQUIRED_ARGUMENTS.get(name, []) if arguments.get(key) in (None, "")]
    if missing:
        raise ValidationError(
            f"Missing required arguments for {name}: {', '.join(missing)}",
            "MISSING_PARAMETER",
            {"tool": name, "missing": missing}
        )


def handle_tool_call(service: DigitalAssetService, name: str, arguments: Dict[str, Any]) -> List[TextContent]:
    """
    Execute one tool call against the digital asset service.

    Args:
        service: Digital asset service
        name: Tool name
        arguments: Tool arguments

    Returns:
        list: A single text content holding a title line and the JSON result

    Raises:
        ValidationError: For unknown tools or missing/invalid arguments
        Layer1Error: For signing, API and network failures
    """
    if name not in _REQUIRED_ARGUMENTS:
        raise ValidationError(f"Unknown tool: {name}", "UNKNOWN_TOOL", {"tool": name})

    _check_required(name, arguments)

    if name == "create_address":
        result = service.create_address(
            network=arguments["network"],
            reference=arguments.get("reference")
        )
        return _text_result("Address created successfully", result)

    if name == "list_transactions":
        result = service.list_transactions(transaction_hash=arguments.get("transactionHash"))
        total = result.get("totalElements") if isinstance(result, dict) else None
        return _text_result(f"Transactions ({total or 'unknown'} total)", result)

    if name == "get_asset_pool_balance":
        result = service.get_asset_pool_balance(asset_pool_id=arguments.get("assetPoolId"))
        return _text_result("Asset pool balance", result)

    result = service.send_transaction_request(
        to_address=arguments["toAddress"],
        amount=arguments["amount"],
        asset=arguments["asset"],
        network=arguments["network"],
        reference=arguments["reference"]
    )
    return _text_result("Transaction request created", result)


def _error_code(error: Layer1Error) -> int:
    # Seen by direct callers of execute_tool. Over the protocol the call_tool
    # handler turns any raised error into an isError tool result.
    if error.error_code == "UNKNOWN_TOOL":
        return METHOD_NOT_FOUND
    if isinstance(error, ValidationError):
        return INVALID_PARAMS
    return INTERNAL_ERROR


async def execute_tool(
    service: DigitalAssetService,
    name: str,
    arguments: Optional[Dict[str, Any]]
) -> List[TextContent]:
    """
    Run a tool call off the event loop and map failures to protocol errors.

    When reached through the server's call_tool handler, the raised
    McpError is reported to the client as a tool result with isError set
    and the error message as its text; the error code is not transmitted.

    Raises:
        McpError: If the tool fails for any reason
    """
    arguments = arguments or {}
    audit_log(name, arguments)

    try:
        return await asyncio.to_thread(handle_tool_call, service, name, arguments)
    except Layer1Error as e:
        logger.error(f"Tool execution error in {name}: {e}")
        raise McpError(ErrorData(code=_error_code(e), message=f"Tool execution failed: {e}")) from e


def create_server(service: DigitalAssetService) -> Server:
    """Create and configure the MCP server."""
    server = Server(SERVER_NAME, version=__version__)

    @server.list_tools()
    async def list_tools() -> list[Tool]:
        """Return list of available tools."""
        return TOOLS

    @server.call_tool()
    async def call_tool(name: str, arguments: dict) -> list[TextContent]:
        """Execute a tool and return results."""
        return await execute_tool(service, name, arguments)

    return server


async def run_server(config: Layer1Config) -> None:
    """Run the MCP server using stdio transport."""
    with AuthenticatedClient(config) as client:
        server = create_server(DigitalAssetService(client, config))

        logger.info("Layer1 Digital MCP server running on stdio")
        async with stdio_server() as (read_stream, write_stream):
            await server.run(
                read_stream,
                write_stream,
                server.create_initialization_options()
            )
