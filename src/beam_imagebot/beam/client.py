"""Async client for Beam task submission and status polling.

submit() creates a task on a Beam app, await_completion() polls the task
status endpoint until it leaves PENDING/RUNNING.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Dict, Optional

import httpx
from tenacity import AsyncRetrying, RetryError, retry_if_result, stop_after_attempt, wait_fixed

from ..config import Settings
from ..log import get_logger
from .schema import SubmitResponse, TaskStatusResponse

logger = get_logger("beam_client")

Sleep = Callable[[float], Awaitable[None]]


class BeamRequestError(RuntimeError):
    """Beam answered with something other than 200 OK."""

    def __init__(self, method: str, url: str, status_code: int):
        super().__init__(f"Invalid response {status_code} from {method} {url}")
        self.status_code = status_code


class TaskTimeoutError(RuntimeError):
    """Task was still running when the poll budget ran out."""


class BeamClient:
    def __init__(
        self,
        settings: Settings,
        http: Optional[httpx.AsyncClient] = None,
        sleep: Sleep = asyncio.sleep,
    ):
        self.settings = settings
        self._owns_http = http is None
        self._http = http or httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT_SECONDS)
        self._sleep = sleep

    @property
    def _auth_headers(self) -> Dict[str, str]:
        return {"Authorization": f"Basic {self.settings.BEAM_AUTH_TOKEN}"}

    def submit_url(self, endpoint: str) -> str:
        return f"https://{endpoint}.{self.settings.BEAM_APP_DOMAIN}"

    def status_url(self, task_id: str) -> str:
        return f"{self.settings.BEAM_API_URL.rstrip('/')}/v1/task/{task_id}/status/"

    async def submit(self, endpoint: str, prompt: str) -> str:
        """
        Creates a task on the given Beam app and returns its task id.
        Raises BeamRequestError unless Beam answers 200.
        """
        url = self.submit_url(endpoint)
        headers = {**self._auth_headers, "Content-Type": "application/json"}
        resp = await self._http.post(url, json={"prompt": prompt}, headers=headers)
        if resp.status_code != 200:
            raise BeamRequestError("POST", url, resp.status_code)

        task_id = SubmitResponse.model_validate(resp.json()).task_id
        logger.info(f"Submitted task {task_id} to {endpoint}")
        return task_id

    async def get_status(self, task_id: str) -> TaskStatusResponse:
        url = self.status_url(task_id)
        resp = await self._http.get(url, headers=self._auth_headers)
        if resp.status_code != 200:
            raise BeamRequestError("GET", url, resp.status_code)

        status = TaskStatusResponse.model_validate(resp.json())
        logger.debug(f"Task {task_id} is {status.status}")
        return status

    async def await_completion(self, task_id: str) -> TaskStatusResponse:
        """
        Polls the task every POLL_INTERVAL_SECONDS (starting with a delay) until
        its status is terminal, and returns that last status response.
        HTTP errors are not retried; they propagate from the failing poll.
        Raises TaskTimeoutError after POLL_MAX_ATTEMPTS in-progress polls.
        """
        interval = self.settings.POLL_INTERVAL_SECONDS
        max_attempts = self.settings.POLL_MAX_ATTEMPTS

        retrying = AsyncRetrying(
            retry=retry_if_result(lambda status: status.in_progress),
            wait=wait_fixed(interval),
            stop=stop_after_attempt(max_attempts),
            sleep=self._sleep,
        )

        await self._sleep(interval)
        try:
            status = await retrying(self.get_status, task_id)
        except RetryError as e:
            last = e.last_attempt.result()
            raise TaskTimeoutError(
                f"Task {task_id} still {last.status} after {max_attempts} polls"
            ) from e

        logger.info(f"Task {task_id} finished with status {status.status}")
        return status

    async def aclose(self):
        if self._owns_http:
            await self._http.aclose()
