"""
Arcade MCP Server

Exposes the Gmail draft tool over Model Context Protocol using FastMCP, so
the outreach email agent can file its drafts directly.

Usage:
    agent-outreach-mcp                  # HTTP transport on port 4001
    agent-outreach-mcp --port 8001
    agent-outreach-mcp --stdio          # STDIO transport for local testing

Environment Variables:
    MCP_PORT         - Server port (default: 4001)
    ARCADE_API_KEY   - Required to create drafts
    ARCADE_USER_ID   - Default Arcade user when the caller gives none
"""

import json
import logging
import os
from typing import Optional

import click
from fastmcp import FastMCP

from .services.gmail_draft_service import GmailDraftResult, create_gmail_draft

logger = logging.getLogger(__name__)


def format_draft_result(result: GmailDraftResult) -> str:
    """Render a draft result as the text returned to the MCP caller."""
    if not result.success:
        detail = f" - {result.error}" if result.error else ""
        return f"Error creating Gmail draft: {result.message}{detail}"

    output = getattr(result.data, "output", None)
    value = getattr(output, "value", None)
    return f"Gmail draft created successfully:\n\n{json.dumps(value, indent=2, default=str)}"


def gmail_create_draft(
    subject: str,
    body: str,
    recipient: str,
    user_id: Optional[str] = None,
) -> str:
    """
    Create a draft email in the user's Gmail account.

    Args:
        subject: Draft subject line
        body: Draft body text
        recipient: Recipient email address
        user_id: Arcade user ID - if not provided, will use default from environment
    """
    result = create_gmail_draft(
        subject=subject,
        body=body,
        recipient=recipient,
        user_id=user_id,
    )
    return format_draft_result(result)


def register_tools(mcp: FastMCP) -> list[str]:
    """Register the draft tool with a FastMCP server."""
    mcp.tool()(gmail_create_draft)
    return ["gmail_create_draft"]


mcp = FastMCP("Arcade MCP")
register_tools(mcp)


@click.command()
@click.option(
    "--port",
    type=int,
    default=lambda: int(os.getenv("MCP_PORT", "4001")),
    help="HTTP server port (default: 4001).",
)
@click.option("--host", default="0.0.0.0", help="HTTP server host.")
@click.option("--stdio", is_flag=True, help="Use STDIO transport instead of HTTP.")
def main(port: int, host: str, stdio: bool) -> None:
    """Run the Arcade MCP server."""
    if stdio:
        mcp.run(transport="stdio")
    else:
        logger.info(f"Starting HTTP server on {host}:{port}")
        mcp.run(transport="http", host=host, port=port)


if __name__ == "__main__":
    main()
