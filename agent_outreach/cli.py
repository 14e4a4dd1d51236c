"""
Command-line interface for the agent outreach pipeline.

Usage:
    agent-outreach companies.txt                 Research companies and draft emails
    agent-outreach companies.txt -o out.json     Choose the output file
    agent-outreach --help                        Show help
"""

import asyncio
import logging

import click
from rich.console import Console
from rich.panel import Panel

from .config import config

console = Console()


async def _run(companies: list[str], options):
    from .pipeline import PipelineAgents, run_pipeline
    from .services.ag_dev_service import AgDevClient
    from .services.agent import Agent

    async with AgDevClient(config.AG_DEV_API_KEY, config.AG_DEV_BASE_URL) as client:
        agents = PipelineAgents(
            company_profile=Agent(client, config.COMPANY_PROFILE_AGENT_ID),
            company_contacts=Agent(client, config.COMPANY_CONTACTS_AGENT_ID),
            contact_profile=Agent(client, config.COMPANY_CONTACT_PROFILE_AGENT_ID),
            outreach_email=Agent(client, config.CREATE_OUTREACH_EMAIL_AGENT_ID),
        )
        return await run_pipeline(companies, agents, options)


@click.command()
@click.argument("companies_file", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False),
    default=None,
    help="Where to write results. Defaults to company-results-<timestamp>.json.",
)
@click.option(
    "--poll-interval",
    type=float,
    default=None,
    help="Seconds between run status polls.",
)
@click.option(
    "--timeout",
    type=float,
    default=None,
    help="Seconds to wait for each run. 0 waits forever.",
)
@click.option(
    "--max-concurrency",
    type=int,
    default=None,
    help="Cap on concurrent agent runs per batch.",
)
@click.option("--debug", is_flag=True, default=False, help="Enable debug logging.")
def main(
    companies_file: str,
    output: str | None,
    poll_interval: float | None,
    timeout: float | None,
    max_concurrency: int | None,
    debug: bool,
) -> None:
    """
    Agent Outreach - Company research and outreach drafting.

    Reads one company name per line from COMPANIES_FILE, researches each
    company and its contacts with ag.dev agents, and writes profiles and
    draft outreach emails to a JSON file.
    """
    from .pipeline import RunOptions, default_output_path, load_companies, save_results

    level = logging.DEBUG if debug or config.ENABLE_DEBUG else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")

    errors = config.validate()
    if errors:
        for error in errors:
            console.print(f"[red]✗ {error}[/red]")
        raise click.Abort()

    companies = load_companies(companies_file)
    if not companies:
        console.print("[yellow]No companies found in the file.[/yellow]")
        return

    options = RunOptions(
        poll_interval=poll_interval if poll_interval is not None else config.AGENT_POLL_INTERVAL_SECONDS,
        timeout=timeout if timeout is not None else config.AGENT_TIMEOUT_SECONDS,
        max_concurrency=max_concurrency if max_concurrency is not None else config.AGENT_MAX_CONCURRENCY,
    )
    output_path = output or default_output_path()

    console.print(Panel(
        f"Companies: {len(companies)} from {companies_file}\n"
        f"Output: {output_path}\n"
        f"Timeout: {options.timeout or 'none'}",
        title="🚀 Agent Outreach Starting",
        border_style="blue",
    ))

    try:
        results = asyncio.run(_run(companies, options))
        save_results(results, output_path)
    except Exception as e:
        console.print(f"\n[red]✗ Error: {e}[/red]")
        raise click.Abort()

    contacts_total = sum(len(c["contacts"]) for c in results.company_contacts)
    console.print(f"\n[green]✓ Results saved to {output_path}[/green]")
    console.print(
        f"Processed {len(companies)} companies, found {contacts_total} contacts total.\n"
        f"Generated {len(results.outreach_emails)} personalized outreach emails."
    )


if __name__ == "__main__":
    main()
