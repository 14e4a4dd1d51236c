"""
Agent handle and batch runner.

An ``Agent`` binds an ``AgDevClient`` to one agent id and adds the
run-and-wait conveniences used by the outreach pipeline, including
``run_batch`` which fans a list of inputs out to concurrent runs and
returns the results in input order.
"""

import asyncio
import logging
from contextlib import nullcontext
from typing import Awaitable, Callable, Optional, Sequence, TypeVar

from ..errors import BatchFailure
from ..models import AgentConfig, AgentDefinition, AgentRunResult, AgentUpdate, JSONObject, ListResponse
from .ag_dev_service import AgDevClient

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


async def _gather_ordered(
    items: Sequence[T],
    worker: Callable[[T], Awaitable[R]],
    semaphore: Optional[asyncio.Semaphore],
    return_exceptions: bool,
) -> list:
    """
    Run ``worker`` over ``items`` concurrently, keeping results in item order.

    Without ``return_exceptions`` the first failure cancels the remaining
    tasks and is re-raised.
    """

    async def _guarded(item: T) -> R:
        async with semaphore if semaphore is not None else nullcontext():
            return await worker(item)

    tasks = [asyncio.ensure_future(_guarded(item)) for item in items]
    if return_exceptions:
        return await asyncio.gather(*tasks, return_exceptions=True)

    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


class Agent:
    """
    Handle for a single ag.dev agent.

    Example:
        client = AgDevClient(api_key)
        profiles = Agent(client, "agent_123")
        results = await profiles.run_batch([{"company": "Acme"}, {"company": "Globex"}])
    """

    def __init__(self, client: AgDevClient, agent_id: str):
        self.client = client
        self.agent_id = agent_id

    @classmethod
    async def create(cls, client: AgDevClient, config: AgentConfig) -> "Agent":
        """Create a new agent on ag.dev and return a handle to it."""
        agent_data = await client.create_agent(config)
        logger.info(f"Created agent {agent_data.id}")
        return cls(client, agent_data.id)

    @classmethod
    async def load(cls, client: AgDevClient, agent_id: str) -> "Agent":
        """Return a handle to an existing agent. Nothing is fetched."""
        return cls(client, agent_id)

    @property
    def id(self) -> str:
        return self.agent_id

    async def get_data(self) -> AgentDefinition:
        """Fetch the agent definition (fresh on every call)."""
        return await self.client.get_agent(self.agent_id)

    async def update(self, updates: AgentUpdate) -> None:
        await self.client.update_agent(self.agent_id, updates)

    async def delete(self) -> None:
        await self.client.delete_agent(self.agent_id)

    async def run(
        self,
        input: JSONObject,
        poll_interval: float = 1.0,
        timeout: float = 0,
    ) -> AgentRunResult:
        """Start a run and wait for it to finish."""
        run = await self.client.create_agent_run(self.agent_id, input)
        completed = await self.client.wait_for_agent_run(
            self.agent_id, run.id, poll_interval=poll_interval, timeout=timeout
        )
        return AgentRunResult.from_run(completed)

    async def start_run(self, input: JSONObject) -> str:
        """Start a run without waiting. Returns the run id."""
        run = await self.client.create_agent_run(self.agent_id, input)
        return run.id

    async def get_run_result(self, run_id: str) -> AgentRunResult:
        """Current snapshot of a run, terminal or not."""
        run = await self.client.get_agent_run(self.agent_id, run_id)
        return AgentRunResult.from_run(run)

    async def wait_for_run(
        self,
        run_id: str,
        poll_interval: float = 1.0,
        timeout: float = 0,
    ) -> AgentRunResult:
        completed = await self.client.wait_for_agent_run(
            self.agent_id, run_id, poll_interval=poll_interval, timeout=timeout
        )
        return AgentRunResult.from_run(completed)

    async def get_all_runs(
        self,
        page: Optional[int] = None,
        page_size: Optional[int] = None,
    ) -> list[AgentRunResult]:
        response = await self.client.list_agent_runs(self.agent_id, page=page, page_size=page_size)
        return [AgentRunResult.from_run(run) for run in response.items]

    async def get_run_events(self, run_id: str) -> ListResponse:
        return await self.client.get_agent_run_events(self.agent_id, run_id)

    async def run_batch(
        self,
        inputs: Sequence[JSONObject],
        poll_interval: float = 1.0,
        timeout: float = 0,
        max_concurrency: Optional[int] = None,
        return_exceptions: bool = False,
    ) -> list:
        """
        Run many inputs concurrently.

        All runs are started first, then all are polled. ``result[i]`` always
        belongs to ``inputs[i]`` regardless of completion order.

        Args:
            inputs: One run input per run
            poll_interval: Seconds between status polls
            timeout: Per-run wait timeout in seconds; 0 waits forever
            max_concurrency: Cap on in-flight creations and polls (None = unbounded)
            return_exceptions: Put each member's exception at its index instead
                of failing the whole batch. A member whose creation failed is
                not polled.

        Raises:
            BatchFailure: If any member fails and ``return_exceptions`` is False.
                The original error is chained as ``__cause__``. Runs that were
                already created keep executing remotely.
        """
        if not inputs:
            return []
        if max_concurrency is not None and max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")

        semaphore = asyncio.Semaphore(max_concurrency) if max_concurrency else None
        logger.info(f"Starting {len(inputs)} run(s) for agent {self.agent_id}")

        try:
            run_ids = await _gather_ordered(inputs, self.start_run, semaphore, return_exceptions)
        except Exception as e:
            raise BatchFailure(f"Batch for agent {self.agent_id} failed while starting runs: {e}") from e

        async def _wait(run_id):
            if isinstance(run_id, BaseException):
                return run_id
            return await self.wait_for_run(run_id, poll_interval=poll_interval, timeout=timeout)

        try:
            results = await _gather_ordered(run_ids, _wait, semaphore, return_exceptions)
        except Exception as e:
            raise BatchFailure(f"Batch for agent {self.agent_id} failed while waiting for runs: {e}") from e

        logger.info(f"Finished {len(results)} run(s) for agent {self.agent_id}")
        return results
