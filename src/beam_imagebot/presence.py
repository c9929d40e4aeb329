"""Startup notice: tells every channel the bot can post in that it is online."""

from typing import List

from .log import get_logger
from .rendering.slack_format import ONLINE_TEXT
from .slack.client import SlackClientWrapper

logger = get_logger("presence")

async def announce_online(slack: SlackClientWrapper) -> List[str]:
    """
    Posts ONLINE_TEXT to each member channel where posting is allowed.
    A failure in one channel is logged and skipped. Returns the channel ids announced to.
    """
    announced: List[str] = []
    for channel in await slack.list_member_channels():
        channel_id = channel["id"]
        try:
            if not slack.can_post(channel):
                logger.debug(f"No permission to post in {channel_id}, skipping")
                continue
            await slack.post_message(channel_id, ONLINE_TEXT)
            announced.append(channel_id)
        except Exception as e:
            logger.warning(f"Could not announce in {channel_id}: {e}")

    logger.info(f"Announced presence in {len(announced)} channel(s)")
    return announced
