import pytest
import os
from typing import Any, Callable, Dict, List
from unittest.mock import AsyncMock, MagicMock
import httpx
from dotenv import load_dotenv

from beam_imagebot.config import Settings
from beam_imagebot.slack.client import SlackClientWrapper

@pytest.fixture(scope="session", autouse=True)
def _load_env():
    # Load .env once per session to avoid side-effects on import time
    load_dotenv()

def _truthy(v: str | None) -> bool:
    return v is not None and v.strip().lower() not in ("", "0", "false", "no")

@pytest.fixture(scope="session")
def allow_integration(_load_env) -> bool:
    # Depends on _load_env to ensure .env is loaded first
    return _truthy(os.getenv("RUN_INTEGRATION_TESTS"))

@pytest.fixture
def make_settings(tmp_path) -> Callable[..., Settings]:
    """
    Builds a Settings object without touching .env, with images written under tmp_path.
    Keyword arguments override the test defaults.
    """
    def _make(**overrides: Any) -> Settings:
        values: Dict[str, Any] = {
            "BEAM_AUTH_TOKEN": "beam-test-token",
            "SLACK_BOT_TOKEN": "xoxb-test",
            "SLACK_APP_TOKEN": "xapp-test",
            "CHANNEL_URL_MAP": {"C_MAPPED": "my-app"},
            "ARTIFACT_DIR": str(tmp_path),
        }
        values.update(overrides)
        return Settings(_env_file=None, **values)
    return _make

@pytest.fixture
def settings(make_settings) -> Settings:
    return make_settings()

class SleepRecorder:
    """Stands in for asyncio.sleep; records requested delays without waiting."""

    def __init__(self, events: List[str] | None = None):
        self.calls: List[float] = []
        self.events = events

    async def __call__(self, seconds: float):
        self.calls.append(seconds)
        if self.events is not None:
            self.events.append("sleep")

@pytest.fixture
def sleep_recorder() -> SleepRecorder:
    return SleepRecorder()

class FakeBeam:
    """
    Scripted Beam + image host for httpx.MockTransport.
    Status responses are served in order; the last one repeats.
    """

    def __init__(self):
        self.submit_status = 200
        self.submit_body: Dict[str, Any] = {"task_id": "abc123"}
        self.statuses: List[Dict[str, Any]] = [
            {"status": "COMPLETE", "outputs": {"./output.png": {"url": "https://x/img.png"}}}
        ]
        self.image_bytes = b"\x89PNG\r\n\x1a\nfake"
        self.image_status = 200
        self.requests: List[httpx.Request] = []
        self.events: List[str] = []

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.method == "POST":
            self.events.append("submit")
            return httpx.Response(self.submit_status, json=self.submit_body)
        if "/v1/task/" in request.url.path:
            self.events.append("poll")
            body = self.statuses.pop(0) if len(self.statuses) > 1 else self.statuses[0]
            return httpx.Response(200, json=body)
        self.events.append("download")
        return httpx.Response(self.image_status, content=self.image_bytes)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self._handle))

    def calls(self, kind: str) -> int:
        return self.events.count(kind)

@pytest.fixture
def fake_beam() -> FakeBeam:
    return FakeBeam()

@pytest.fixture
def fake_slack() -> MagicMock:
    slack = MagicMock(spec=SlackClientWrapper)
    slack.post_reply = AsyncMock()
    slack.post_message = AsyncMock()
    slack.upload_file = AsyncMock()
    slack.list_member_channels = AsyncMock(return_value=[])
    slack.can_post = MagicMock(side_effect=SlackClientWrapper.can_post)
    return slack
