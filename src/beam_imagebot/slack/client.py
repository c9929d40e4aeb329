from pathlib import Path
from typing import Any, Dict, List, Optional

from slack_sdk.errors import SlackApiError
from slack_sdk.web.async_client import AsyncWebClient

from ..log import get_logger
from .post_blocks import build_post_payload, build_upload_payload

logger = get_logger("slack_client")

class SlackClientWrapper:
    def __init__(self, client: AsyncWebClient):
        self.client = client

    async def post_reply(self, channel_id: str, thread_ts: Optional[str], text: str):
        """
        Posts a threaded reply with Slack mrkdwn formatting enabled.
        Note: If thread_ts is None, it posts a top-level message.
        """
        try:
            await self.client.chat_postMessage(**build_post_payload(channel_id, text, thread_ts))
        except SlackApiError as e:
            logger.error(f"Slack API error: {e.response['error']}")
            raise

    async def post_message(self, channel_id: str, text: str):
        await self.post_reply(channel_id, None, text)

    async def upload_file(self, channel_id: str, thread_ts: Optional[str], path: Path, comment: str):
        """
        Uploads a local file into the channel (threaded if thread_ts is given)
        with `comment` posted alongside it.
        """
        try:
            await self.client.files_upload_v2(**build_upload_payload(channel_id, path, comment, thread_ts))
        except SlackApiError as e:
            logger.error(f"Slack upload error: {e.response['error']}")
            raise

    async def get_bot_identity(self) -> Dict[str, Any]:
        """Returns auth.test data for the bot token (user_id, user, team...)."""
        response = await self.client.auth_test()
        return response.data

    async def list_member_channels(self, limit: int = 200) -> List[Dict[str, Any]]:
        """
        Lists every non-archived public/private channel the bot is a member of.
        Requires 'channels:read' and 'groups:read' scopes.
        """
        channels: List[Dict[str, Any]] = []
        cursor = None
        while True:
            kwargs: Dict[str, Any] = {"types": "public_channel,private_channel", "exclude_archived": True, "limit": limit}
            if cursor:
                kwargs["cursor"] = cursor
            response = await self.client.users_conversations(**kwargs)
            channels.extend(response["channels"])
            cursor = (response.get("response_metadata") or {}).get("next_cursor")
            if not cursor:
                return channels

    @staticmethod
    def can_post(channel: Dict[str, Any]) -> bool:
        """
        Whether the bot may post in a channel returned by list_member_channels.
        Membership is implied by the listing; posting is closed in archived and
        read-only (announcement) channels. Other admin restrictions only show up
        as a 'restricted_action' error when posting.
        """
        return not channel.get("is_archived", False) and not channel.get("is_read_only", False)
