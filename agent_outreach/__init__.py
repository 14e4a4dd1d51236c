"""
Agent Outreach - Company research and outreach drafting on hosted agents.

This package chains ag.dev agent runs to turn a list of company names into
company profiles, contacts, contact profiles and draft outreach emails, and
can file the drafts in Gmail through Arcade.
"""

__version__ = "0.1.0"
