from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from functools import lru_cache
import tempfile
from typing import Dict, Optional

class Settings(BaseSettings):
    BEAM_AUTH_TOKEN: str = Field(..., description="Beam Basic auth token")
    SLACK_BOT_TOKEN: str = Field(..., description="Slack Bot User OAuth Token")
    SLACK_APP_TOKEN: str = Field(..., description="Slack App-Level Token (for Socket Mode)")
    # Parsed from JSON, e.g. CHANNEL_URL_MAP='{"C0123": "my-app-id"}'
    CHANNEL_URL_MAP: Dict[str, str] = Field(default_factory=dict, description="Channel ID -> Beam app id")

    BEAM_APP_DOMAIN: str = "apps.beam.cloud"
    BEAM_API_URL: str = "https://api.beam.cloud"
    BEAM_DASHBOARD_URL: str = "https://www.beam.cloud"

    POLL_INTERVAL_SECONDS: float = Field(3.0, gt=0, description="Delay before each status poll")
    POLL_MAX_ATTEMPTS: int = Field(400, ge=1, description="Give up on a task after this many polls")
    HTTP_TIMEOUT_SECONDS: float = 30.0
    ARTIFACT_DIR: str = Field(default_factory=tempfile.gettempdir, description="Where downloaded images are written")
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_ignore_empty=True,
        frozen=True,
    )

    def endpoint_for(self, channel_id: str) -> Optional[str]:
        return self.CHANNEL_URL_MAP.get(channel_id)

@lru_cache()
def get_settings() -> Settings:
    return Settings()
