"""
Gmail draft creation via Arcade.

Arcade executes the Gmail.WriteDraftEmail tool on behalf of a user. The
first call for a user needs an OAuth grant: the authorization URL is
printed and the call blocks until the user completes it.

API Docs: https://docs.arcade.dev
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

from arcadepy import Arcade
from rich.console import Console

from ..config import config

logger = logging.getLogger(__name__)

# Console for rich output
console = Console()

GMAIL_DRAFT_TOOL = "Gmail.WriteDraftEmail"
DEFAULT_USER_ID = "{arcade_user_id}"


@dataclass
class GmailDraftResult:
    """Outcome of a draft request. Failures are reported, not raised."""
    success: bool
    message: str
    data: Optional[Any] = None
    error: Optional[str] = None


def create_arcade_client(api_key: Optional[str] = None) -> Optional[Arcade]:
    """Create an Arcade client, or None if no API key is configured."""
    api_key = api_key or config.ARCADE_API_KEY
    if not api_key:
        return None
    return Arcade(api_key=api_key)


def get_user_id(user_id: Optional[str] = None) -> str:
    return user_id or config.ARCADE_USER_ID or DEFAULT_USER_ID


def create_gmail_draft(
    subject: str,
    body: str,
    recipient: str,
    user_id: Optional[str] = None,
    client: Optional[Arcade] = None,
) -> GmailDraftResult:
    """
    Create a draft email in the user's Gmail account.

    Args:
        subject: Draft subject line
        body: Draft body text
        recipient: Recipient email address
        user_id: Arcade user id (defaults to ARCADE_USER_ID)
        client: Arcade client (created from ARCADE_API_KEY if omitted)

    Returns:
        GmailDraftResult with the tool response on success
    """
    client = client or create_arcade_client()
    if client is None:
        return GmailDraftResult(
            success=False,
            message="ARCADE_API_KEY environment variable is not set",
            error="Client creation failed",
        )

    arcade_user_id = get_user_id(user_id)

    try:
        auth_response = client.tools.authorize(
            tool_name=GMAIL_DRAFT_TOOL,
            user_id=arcade_user_id,
        )

        if auth_response.status != "completed":
            console.print(
                f"[yellow]Authorization required. Please click this link to authorize:[/yellow] {auth_response.url}",
                soft_wrap=True,
            )

        client.auth.wait_for_completion(auth_response)

        response = client.tools.execute(
            tool_name=GMAIL_DRAFT_TOOL,
            input={
                "subject": subject,
                "body": body,
                "recipient": recipient,
            },
            user_id=arcade_user_id,
        )

        logger.info(f"Created Gmail draft for {recipient}")
        return GmailDraftResult(
            success=True,
            message="Gmail draft created successfully",
            data=response,
        )

    except Exception as e:
        logger.error(f"Failed to create Gmail draft for {recipient}: {e}")
        return GmailDraftResult(
            success=False,
            message="Failed to create Gmail draft",
            error=str(e) or "Unknown error occurred",
        )
