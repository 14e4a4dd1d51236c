"""
Tests for Gmail draft creation via Arcade and the MCP tool wrapper.

Run with: pytest tests/
"""

import os
import sys
from unittest.mock import MagicMock, patch

import pytest

# Add project to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from agent_outreach.mcp_server import format_draft_result, gmail_create_draft
from agent_outreach.services.gmail_draft_service import (
    GMAIL_DRAFT_TOOL,
    GmailDraftResult,
    create_gmail_draft,
    get_user_id,
)


def mock_arcade(auth_status="completed"):
    client = MagicMock()
    client.tools.authorize.return_value = MagicMock(status=auth_status, url="https://arcade.test/auth")
    client.tools.execute.return_value = MagicMock(output=MagicMock(value={"id": "draft-1"}))
    return client


class TestCreateGmailDraft:
    """Tests for the Arcade draft flow (client mocked)."""

    def test_success(self):
        client = mock_arcade()

        result = create_gmail_draft(
            subject="Hello", body="Hi Jane", recipient="jane@acme.test",
            user_id="user@example.com", client=client,
        )

        assert result.success
        assert result.message == "Gmail draft created successfully"
        client.tools.authorize.assert_called_once_with(
            tool_name=GMAIL_DRAFT_TOOL, user_id="user@example.com"
        )
        client.auth.wait_for_completion.assert_called_once()
        client.tools.execute.assert_called_once_with(
            tool_name=GMAIL_DRAFT_TOOL,
            input={"subject": "Hello", "body": "Hi Jane", "recipient": "jane@acme.test"},
            user_id="user@example.com",
        )

    def test_prints_authorization_link_when_pending(self, capsys):
        client = mock_arcade(auth_status="pending")

        create_gmail_draft("Hello", "Hi", "jane@acme.test", user_id="u", client=client)

        assert "https://arcade.test/auth" in capsys.readouterr().out

    @patch("agent_outreach.services.gmail_draft_service.console")
    def test_authorization_link_goes_through_console(self, mock_console):
        client = mock_arcade(auth_status="pending")

        create_gmail_draft("Hello", "Hi", "jane@acme.test", user_id="u", client=client)

        mock_console.print.assert_called_once()
        assert "https://arcade.test/auth" in mock_console.print.call_args.args[0]

    @patch("agent_outreach.services.gmail_draft_service.console")
    def test_no_link_when_already_authorized(self, mock_console):
        create_gmail_draft("Hello", "Hi", "jane@acme.test", user_id="u", client=mock_arcade())

        mock_console.print.assert_not_called()

    def test_tool_failure_is_reported(self):
        client = mock_arcade()
        client.tools.execute.side_effect = RuntimeError("quota exceeded")

        result = create_gmail_draft("Hello", "Hi", "jane@acme.test", user_id="u", client=client)

        assert not result.success
        assert result.message == "Failed to create Gmail draft"
        assert result.error == "quota exceeded"

    def test_missing_api_key(self):
        with patch("agent_outreach.services.gmail_draft_service.config") as mock_config:
            mock_config.ARCADE_API_KEY = ""
            result = create_gmail_draft("Hello", "Hi", "jane@acme.test")

        assert not result.success
        assert "ARCADE_API_KEY" in result.message

    def test_user_id_fallback(self):
        with patch("agent_outreach.services.gmail_draft_service.config") as mock_config:
            mock_config.ARCADE_USER_ID = "env-user"
            assert get_user_id() == "env-user"
            assert get_user_id("explicit") == "explicit"


class TestMcpTool:
    """Tests for the MCP tool output."""

    def test_format_success(self):
        response = MagicMock(output=MagicMock(value={"id": "draft-1"}))
        text = format_draft_result(GmailDraftResult(success=True, message="ok", data=response))

        assert text.startswith("Gmail draft created successfully:")
        assert '"id": "draft-1"' in text

    def test_format_failure(self):
        text = format_draft_result(GmailDraftResult(
            success=False, message="Failed to create Gmail draft", error="quota exceeded",
        ))

        assert text == "Error creating Gmail draft: Failed to create Gmail draft - quota exceeded"

    @patch("agent_outreach.mcp_server.create_gmail_draft")
    def test_tool_passes_arguments_through(self, mock_create):
        mock_create.return_value = GmailDraftResult(success=False, message="nope")

        text = gmail_create_draft("Hello", "Hi", "jane@acme.test", user_id="u")

        mock_create.assert_called_once_with(
            subject="Hello", body="Hi", recipient="jane@acme.test", user_id="u"
        )
        assert text == "Error creating Gmail draft: nope"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
