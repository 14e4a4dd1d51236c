"""
ag.dev Agent API Client

Thin async client over the ag.dev REST API: agent CRUD plus creating,
reading and polling agent runs.

API Docs: https://docs.ag.dev
"""

import asyncio
import logging
import time
from typing import Any, Optional

import httpx

from ..errors import ApiError, NetworkError, NotFoundError, RunTimeoutError
from ..models import (
    AgentConfig,
    AgentDefinition,
    AgentRun,
    AgentRunEvent,
    AgentUpdate,
    JSONObject,
    ListResponse,
)

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.ag.dev"
API_PREFIX = "/v0.1"

_BODY_METHODS = ("POST", "PATCH", "PUT")


class AgDevClient:
    """
    ag.dev API client.

    The API key and base URL are fixed at construction. One client can be
    shared by any number of ``Agent`` handles and used concurrently, since
    every request is independent.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        http_client: Optional[httpx.AsyncClient] = None,
        request_timeout: float = 30.0,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.request_timeout = request_timeout
        self._client = http_client
        self._owns_client = http_client is None

    def _get_client(self) -> httpx.AsyncClient:
        if not self._client:
            self._client = httpx.AsyncClient(timeout=self.request_timeout)
        return self._client

    async def aclose(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._client and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "AgDevClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def request(
        self,
        endpoint: str,
        method: str = "GET",
        body: Any = None,
        params: Optional[dict] = None,
    ) -> Any:
        """
        Make an authenticated request to the ag.dev API.

        Args:
            endpoint: Path relative to the base URL (e.g. "/v0.1/agents/abc")
            method: HTTP method
            body: JSON body, only sent for POST, PATCH and PUT
            params: Query parameters

        Returns:
            The decoded JSON body, or an empty dict when the response is not JSON
            (e.g. 204 No Content from DELETE).

        Raises:
            ApiError: On a non-2xx response (NotFoundError for 404)
            NetworkError: When no response was received at all
        """
        method = method.upper()
        url = f"{self.base_url}{endpoint}"
        headers = {
            "X-Api-Key": self.api_key,
            "Content-Type": "application/json",
        }

        kwargs: dict[str, Any] = {"headers": headers}
        if params:
            kwargs["params"] = params
        if body is not None and method in _BODY_METHODS:
            kwargs["json"] = body

        logger.debug(f"[ag.dev] {method} {url}")

        try:
            response = await self._get_client().request(method, url, **kwargs)
        except httpx.TransportError as e:
            raise NetworkError(f"Network error: {e}", cause=e) from e

        if not response.is_success:
            raise self._error_from_response(response)

        content_type = response.headers.get("content-type", "")
        if "application/json" in content_type and response.content:
            return response.json()
        return {}

    @staticmethod
    def _error_from_response(response: httpx.Response) -> ApiError:
        try:
            error_data = response.json()
            if not isinstance(error_data, dict):
                raise ValueError("error body is not an object")
        except ValueError:
            error_data = {
                "error": "HTTP_ERROR",
                "message": f"HTTP {response.status_code}: {response.reason_phrase}",
                "statusCode": response.status_code,
            }

        message = error_data.get("message") or error_data.get("error") or (
            f"HTTP {response.status_code}: {response.reason_phrase}"
        )
        logger.debug(f"[ag.dev] Error {response.status_code}: {message}")

        error_cls = NotFoundError if response.status_code == 404 else ApiError
        return error_cls(
            message,
            status_code=response.status_code,
            error_code=error_data.get("error"),
        )

    # ========================================
    # Agents
    # ========================================

    async def list_agents(self) -> ListResponse:
        data = await self.request(f"{API_PREFIX}/agents/")
        return ListResponse.from_dict(data, AgentDefinition)

    async def get_agent(self, agent_id: str) -> AgentDefinition:
        data = await self.request(f"{API_PREFIX}/agents/{agent_id}")
        return AgentDefinition.from_dict(data)

    async def create_agent(self, config: AgentConfig) -> AgentDefinition:
        data = await self.request(
            f"{API_PREFIX}/agents", method="POST", body=config.to_dict()
        )
        return AgentDefinition.from_dict(data)

    async def update_agent(self, agent_id: str, updates: AgentUpdate) -> AgentDefinition:
        data = await self.request(
            f"{API_PREFIX}/agents/{agent_id}", method="PATCH", body=updates.to_dict()
        )
        return AgentDefinition.from_dict(data)

    async def delete_agent(self, agent_id: str) -> None:
        await self.request(f"{API_PREFIX}/agents/{agent_id}", method="DELETE")

    # ========================================
    # Agent runs
    # ========================================

    async def create_agent_run(self, agent_id: str, input: JSONObject) -> AgentRun:
        """Start a run. The input is not validated locally; ag.dev owns the schema."""
        data = await self.request(
            f"{API_PREFIX}/agents/{agent_id}/runs", method="POST", body=input
        )
        run = AgentRun.from_dict(data)
        logger.debug(f"[ag.dev] Created run {run.id} for agent {agent_id} ({run.status})")
        return run

    async def list_agent_runs(
        self,
        agent_id: str,
        page: Optional[int] = None,
        page_size: Optional[int] = None,
    ) -> ListResponse:
        params = {}
        if page is not None:
            params["page"] = page
        if page_size is not None:
            params["pageSize"] = page_size
        data = await self.request(f"{API_PREFIX}/agents/{agent_id}/runs/", params=params)
        return ListResponse.from_dict(data, AgentRun)

    async def get_agent_run(self, agent_id: str, run_id: str) -> AgentRun:
        data = await self.request(f"{API_PREFIX}/agents/{agent_id}/runs/{run_id}")
        return AgentRun.from_dict(data)

    async def get_agent_run_events(self, agent_id: str, run_id: str) -> ListResponse:
        data = await self.request(f"{API_PREFIX}/agents/{agent_id}/runs/{run_id}/events")
        return ListResponse.from_dict(data, AgentRunEvent)

    async def wait_for_agent_run(
        self,
        agent_id: str,
        run_id: str,
        poll_interval: float = 1.0,
        timeout: float = 0,
    ) -> AgentRun:
        """
        Poll a run until it is done or errored.

        Args:
            agent_id: Agent that owns the run
            run_id: Run to wait for
            poll_interval: Seconds to sleep between polls (fixed, no back-off)
            timeout: Seconds before giving up; 0 waits forever

        The deadline is checked before each poll, so the call can overrun
        ``timeout`` by up to one ``poll_interval``. Cancelling the awaiting task
        stops the local wait only; the remote run keeps going.

        Raises:
            RunTimeoutError: If the deadline passes first
        """
        start = time.monotonic()
        polls = 0

        while timeout == 0 or time.monotonic() - start < timeout:
            run = await self.get_agent_run(agent_id, run_id)
            polls += 1

            if run.is_terminal:
                logger.debug(f"[ag.dev] Run {run_id} finished as {run.status} after {polls} poll(s)")
                return run

            logger.debug(f"[ag.dev] Run {run_id} is {run.status}, polling again in {poll_interval}s")
            await asyncio.sleep(poll_interval)

        raise RunTimeoutError(run_id, timeout)
