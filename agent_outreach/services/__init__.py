"""
Services layer for the Agent Outreach application.
"""

from .ag_dev_service import AgDevClient
from .agent import Agent
from .gmail_draft_service import GmailDraftResult, create_gmail_draft

__all__ = ["AgDevClient", "Agent", "GmailDraftResult", "create_gmail_draft"]
