"""
Main outreach pipeline.

This module chains the four research agents for a list of companies:

    company profile ─┐
                     ├─> outreach email
    company contacts ┼─> contact profile ─┘

Profiles and contacts run in parallel, contact profiles need the contacts,
and outreach emails need everything.
"""

import asyncio
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from rich.console import Console

from .services.agent import Agent

logger = logging.getLogger(__name__)

# Console for rich output
console = Console()


@dataclass
class PipelineAgents:
    """The agents the pipeline talks to."""
    company_profile: Agent
    company_contacts: Agent
    contact_profile: Agent
    outreach_email: Agent


@dataclass
class RunOptions:
    """Polling and fan-out settings applied to every batch."""
    poll_interval: float = 1.0
    timeout: float = 0
    max_concurrency: Optional[int] = None

    def batch_kwargs(self) -> dict[str, Any]:
        return {
            "poll_interval": self.poll_interval,
            "timeout": self.timeout,
            "max_concurrency": self.max_concurrency,
        }


@dataclass
class PipelineResults:
    """Flattened results of a pipeline run, ready to be written as JSON."""
    company_profiles: list[dict] = field(default_factory=list)
    company_contacts: list[dict] = field(default_factory=list)
    contact_profiles: list[dict] = field(default_factory=list)
    outreach_emails: list[dict] = field(default_factory=list)

    def to_dict(self) -> dict[str, list[dict]]:
        return {
            "companyProfiles": self.company_profiles,
            "companyContacts": self.company_contacts,
            "contactProfiles": self.contact_profiles,
            "outreachEmails": self.outreach_emails,
        }


def load_companies(companies_file: str | Path) -> list[str]:
    """Load company names from a newline-delimited file."""
    with open(companies_file, "r", encoding="utf-8") as f:
        content = f.read()
    # Handle BOM from Excel-exported files
    if content.startswith("\ufeff"):
        content = content[1:]
    return [line.strip() for line in content.splitlines() if line.strip()]


def _result_text(result) -> str:
    return (result.result_data or {}).get("result") or ""


def _contacts_of(result) -> list[dict]:
    """Contacts returned by the contacts agent. Entries that are not objects are skipped."""
    contacts = (result.result_data or {}).get("contacts") or []
    if not isinstance(contacts, list):
        return []
    return [contact for contact in contacts if isinstance(contact, dict)]


def build_contact_profile_inputs(
    company_inputs: list[dict[str, str]],
    contacts_results: list,
) -> list[dict[str, str]]:
    """One contact-profile input per contact found for each company."""
    inputs = []
    for company_input, result in zip(company_inputs, contacts_results):
        for contact in _contacts_of(result):
            inputs.append({
                "company": company_input["company"],
                "contact": contact.get("name", ""),
            })
    return inputs


def build_outreach_email_inputs(
    company_inputs: list[dict[str, str]],
    profile_results: list,
    contacts_results: list,
    contact_profile_inputs: list[dict[str, str]],
    contact_profile_results: list,
) -> list[dict[str, str]]:
    """
    Combine company profiles, contacts and contact profiles into email inputs.

    Results are paired with the inputs that produced them by position, since
    ``run_batch`` keeps result order aligned with input order.
    """
    company_profiles = {
        company_input["company"]: _result_text(result)
        for company_input, result in zip(company_inputs, profile_results)
    }
    contact_profiles = {
        f"{profile_input['company']}-{profile_input['contact']}": _result_text(result)
        for profile_input, result in zip(contact_profile_inputs, contact_profile_results)
    }

    inputs = []
    for company_input, result in zip(company_inputs, contacts_results):
        company = company_input["company"]
        for contact in _contacts_of(result):
            name = contact.get("name", "")
            inputs.append({
                "company": company,
                "contact": name,
                "email": contact.get("email", ""),
                "companyProfile": company_profiles.get(company, ""),
                "contactProfile": contact_profiles.get(f"{company}-{name}", ""),
            })
    return inputs


async def run_pipeline(
    companies: list[str],
    agents: PipelineAgents,
    options: Optional[RunOptions] = None,
) -> PipelineResults:
    """
    Research each company and draft outreach emails for its contacts.

    Any failing agent run fails the whole pipeline.
    """
    options = options or RunOptions()
    company_inputs = [{"company": company} for company in companies]

    console.print("[blue]Running company profile and contacts agents in parallel...[/blue]")
    profile_results, contacts_results = await asyncio.gather(
        agents.company_profile.run_batch(company_inputs, **options.batch_kwargs()),
        agents.company_contacts.run_batch(company_inputs, **options.batch_kwargs()),
    )

    contact_profile_inputs = build_contact_profile_inputs(company_inputs, contacts_results)
    console.print(
        f"[blue]Running contact profile agent for {len(contact_profile_inputs)} contacts...[/blue]"
    )
    contact_profile_results = []
    if contact_profile_inputs:
        contact_profile_results = await agents.contact_profile.run_batch(
            contact_profile_inputs, **options.batch_kwargs()
        )

    email_inputs = build_outreach_email_inputs(
        company_inputs,
        profile_results,
        contacts_results,
        contact_profile_inputs,
        contact_profile_results,
    )
    console.print(f"[blue]Running outreach email agent for {len(email_inputs)} contacts...[/blue]")
    email_results = []
    if email_inputs:
        email_results = await agents.outreach_email.run_batch(
            email_inputs, **options.batch_kwargs()
        )

    return PipelineResults(
        company_profiles=[
            {"company": i["company"], "content": _result_text(r)}
            for i, r in zip(company_inputs, profile_results)
        ],
        company_contacts=[
            {"company": i["company"], "contacts": _contacts_of(r)}
            for i, r in zip(company_inputs, contacts_results)
        ],
        contact_profiles=[
            {"company": i["company"], "contact": i["contact"], "content": _result_text(r)}
            for i, r in zip(contact_profile_inputs, contact_profile_results)
        ],
        outreach_emails=[
            {
                "company": i["company"],
                "contact": i["contact"],
                "email": i["email"],
                "content": _result_text(r),
            }
            for i, r in zip(email_inputs, email_results)
        ],
    )


def default_output_path(now: Optional[datetime] = None) -> str:
    """Timestamped output filename, e.g. company-results-2024-01-01T10-00-00.json."""
    now = now or datetime.now(timezone.utc)
    timestamp = now.strftime("%Y-%m-%dT%H-%M-%S")
    return f"company-results-{timestamp}.json"


def save_results(results: PipelineResults, output_path: str | Path) -> Path:
    """Write pipeline results as pretty-printed JSON."""
    path = Path(output_path)
    if path.parent and not path.parent.exists():
        path.parent.mkdir(parents=True)

    with open(path, "w", encoding="utf-8") as f:
        json.dump(results.to_dict(), f, indent=2)

    logger.info(f"Results saved to {path}")
    return path
