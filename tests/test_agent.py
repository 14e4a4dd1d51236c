"""
Tests for the Agent handle and batch runner.

Run with: pytest tests/
"""

import asyncio
import json
import os
import sys
from unittest.mock import AsyncMock

import httpx
import pytest

# Add project to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from agent_outreach.errors import ApiError, BatchFailure, RunTimeoutError
from agent_outreach.models import AgentConfig, AgentDefinition, AgentRun, AgentRunResult, ListResponse
from agent_outreach.services.ag_dev_service import AgDevClient
from agent_outreach.services.agent import Agent


class FakeAgDev:
    """
    In-memory ag.dev run endpoints behind an httpx MockTransport.

    ``polls_until_done`` maps a company name to how many pending polls its
    run reports before it is done.
    """

    def __init__(self, polls_until_done=None, fail_create_for=(), delay=0.0):
        self.polls_until_done = dict(polls_until_done or {})
        self.fail_create_for = set(fail_create_for)
        self.delay = delay
        self.runs = {}
        self.completion_order = []
        self.get_requests = 0
        self.in_flight = 0
        self.max_in_flight = 0

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            return self._respond(request)
        finally:
            self.in_flight -= 1

    def _respond(self, request: httpx.Request) -> httpx.Response:
        if request.method == "POST":
            payload = json.loads(request.content)
            company = payload["company"]
            if company in self.fail_create_for:
                return httpx.Response(
                    500, json={"error": "INTERNAL", "message": f"cannot start {company}", "statusCode": 500}
                )
            run_id = f"run-{company}"
            self.runs[run_id] = {"input": payload, "remaining": self.polls_until_done.get(company, 0)}
            return httpx.Response(201, json={"id": run_id, "agentId": "agent-1", "status": "pending", "input": payload})

        self.get_requests += 1
        run_id = request.url.path.rsplit("/", 1)[-1]
        run = self.runs[run_id]
        if run["remaining"] > 0:
            run["remaining"] -= 1
            return httpx.Response(200, json={"id": run_id, "agentId": "agent-1", "status": "running", "input": run["input"]})

        self.completion_order.append(run_id)
        return httpx.Response(200, json={
            "id": run_id,
            "agentId": "agent-1",
            "status": "done",
            "input": run["input"],
            "resultData": {"result": f"profile of {run['input']['company']}"},
            "completedAt": "2024-01-01T10:05:00Z",
        })

    def client(self) -> AgDevClient:
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(self.handler))
        return AgDevClient("test-key", http_client=http_client)


def companies(*names):
    return [{"company": name} for name in names]


class TestAgentHandle:
    """Tests for single-run operations."""

    @pytest.mark.asyncio
    async def test_create_returns_handle_for_new_agent(self):
        client = AgDevClient("test-key")
        client.create_agent = AsyncMock(return_value=AgentDefinition(id="agent-42"))

        agent = await Agent.create(client, AgentConfig(
            model_stack_id="stack", goal_prompt="Research", input_schema={"type": "object"},
        ))

        assert agent.id == "agent-42"

    @pytest.mark.asyncio
    async def test_load_does_not_fetch(self):
        client = AgDevClient("test-key")
        client.get_agent = AsyncMock()

        agent = await Agent.load(client, "agent-7")

        assert agent.id == "agent-7"
        client.get_agent.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_run_creates_then_waits(self):
        fake = FakeAgDev(polls_until_done={"Acme": 2})
        agent = Agent(fake.client(), "agent-1")

        result = await agent.run({"company": "Acme"}, poll_interval=0)

        assert isinstance(result, AgentRunResult)
        assert result.id == "run-Acme"
        assert result.status == "done"
        assert result.input == {"company": "Acme"}
        assert result.result_data == {"result": "profile of Acme"}
        assert result.completed_at == "2024-01-01T10:05:00Z"
        assert fake.get_requests == 3

    @pytest.mark.asyncio
    async def test_start_run_returns_id_without_polling(self):
        fake = FakeAgDev()
        agent = Agent(fake.client(), "agent-1")

        run_id = await agent.start_run({"company": "Acme"})

        assert run_id == "run-Acme"
        assert fake.get_requests == 0

    @pytest.mark.asyncio
    async def test_get_run_result_returns_snapshot(self):
        """A single fetch, even while the run is still going."""
        fake = FakeAgDev(polls_until_done={"Acme": 5})
        agent = Agent(fake.client(), "agent-1")
        run_id = await agent.start_run({"company": "Acme"})

        result = await agent.get_run_result(run_id)

        assert result.status == "running"
        assert result.result_data is None
        assert fake.get_requests == 1

    @pytest.mark.asyncio
    async def test_get_all_runs_normalizes(self):
        client = AgDevClient("test-key")
        client.list_agent_runs = AsyncMock(return_value=ListResponse(items=[
            AgentRun(id="run-1", agent_id="agent-1", status="done", input={"company": "Acme"}),
            AgentRun(id="run-2", agent_id="agent-1", status="running"),
        ], total=2))

        results = await Agent(client, "agent-1").get_all_runs()

        assert [r.id for r in results] == ["run-1", "run-2"]
        assert results[0].to_dict()["input"] == {"company": "Acme"}


class TestRunBatch:
    """Tests for batch fan-out and fan-in."""

    @pytest.mark.asyncio
    async def test_results_follow_input_order(self):
        """Results match input order even when the last run finishes first."""
        fake = FakeAgDev(polls_until_done={"a": 4, "b": 2, "c": 0})
        agent = Agent(fake.client(), "agent-1")

        results = await agent.run_batch(companies("a", "b", "c"), poll_interval=0)

        assert [r.input["company"] for r in results] == ["a", "b", "c"]
        assert [r.result_data["result"] for r in results] == [
            "profile of a", "profile of b", "profile of c",
        ]
        assert fake.completion_order[0] == "run-c"

    @pytest.mark.asyncio
    async def test_empty_batch(self):
        agent = Agent(AgDevClient("test-key"), "agent-1")

        assert await agent.run_batch([]) == []

    @pytest.mark.asyncio
    async def test_failed_creation_fails_whole_batch(self):
        """One failing creation fails the batch and nothing is polled."""
        fake = FakeAgDev(fail_create_for={"b"})
        agent = Agent(fake.client(), "agent-1")

        with pytest.raises(BatchFailure) as exc_info:
            await agent.run_batch(companies("a", "b", "c"), poll_interval=0)

        assert isinstance(exc_info.value.__cause__, ApiError)
        assert "cannot start b" in str(exc_info.value)
        assert fake.get_requests == 0

    @pytest.mark.asyncio
    async def test_member_timeout_fails_whole_batch(self):
        fake = FakeAgDev(polls_until_done={"a": 0, "b": 10_000})
        agent = Agent(fake.client(), "agent-1")

        with pytest.raises(BatchFailure) as exc_info:
            await agent.run_batch(companies("a", "b"), poll_interval=0.01, timeout=0.05)

        assert isinstance(exc_info.value.__cause__, RunTimeoutError)
        assert exc_info.value.__cause__.run_id == "run-b"

    @pytest.mark.asyncio
    async def test_return_exceptions_keeps_partial_results(self):
        """With return_exceptions the failed member sits at its own index."""
        fake = FakeAgDev(fail_create_for={"b"})
        agent = Agent(fake.client(), "agent-1")

        results = await agent.run_batch(
            companies("a", "b", "c"), poll_interval=0, return_exceptions=True
        )

        assert results[0].input["company"] == "a"
        assert isinstance(results[1], ApiError)
        assert results[2].input["company"] == "c"
        assert fake.get_requests == 2

    @pytest.mark.asyncio
    async def test_max_concurrency_bounds_in_flight_requests(self):
        fake = FakeAgDev(delay=0.01)
        agent = Agent(fake.client(), "agent-1")

        results = await agent.run_batch(
            companies("a", "b", "c", "d", "e"), poll_interval=0, max_concurrency=2
        )

        assert len(results) == 5
        assert fake.max_in_flight <= 2

    @pytest.mark.asyncio
    async def test_unbounded_by_default(self):
        fake = FakeAgDev(delay=0.01)
        agent = Agent(fake.client(), "agent-1")

        await agent.run_batch(companies("a", "b", "c", "d", "e"), poll_interval=0)

        assert fake.max_in_flight == 5

    @pytest.mark.asyncio
    async def test_invalid_max_concurrency(self):
        agent = Agent(AgDevClient("test-key"), "agent-1")

        with pytest.raises(ValueError):
            await agent.run_batch(companies("a"), max_concurrency=0)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
