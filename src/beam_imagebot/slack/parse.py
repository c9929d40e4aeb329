from typing import Dict, Any, Optional
from ..schemas.events import InboundMessage
from ..log import get_logger

logger = get_logger("parse")

def mention_token(bot_user_id: str) -> str:
    return f"<@{bot_user_id}>"

def unescape_text(text: str) -> str:
    """Undo Slack's escaping of &, < and > in message text (&amp; last so "&amp;lt;" stays "&lt;")."""
    return text.replace("&lt;", "<").replace("&gt;", ">").replace("&amp;", "&")

def parse_event(event: Dict[str, Any], bot_user_id: str) -> Optional[InboundMessage]:
    """
    Parse a Slack message event addressed to the bot.
    Returns an InboundMessage if it should be handled, else None.
    """
    # 1. Ignore bots (including ourselves)
    if event.get("subtype") == "bot_message" or event.get("bot_id"):
        logger.debug("Discarding message from bot")
        return None

    # 2. Ignore edits/deletions/joins, only fresh user messages carry prompts
    if event.get("subtype"):
        logger.debug(f"Ignoring message subtype: {event.get('subtype')}")
        return None

    # 3. Must start with a mention of the bot
    text = event.get("text") or ""
    mention = mention_token(bot_user_id)
    if not text.startswith(mention):
        logger.debug(f"Discarding message {event.get('ts')} not addressed to bot")
        return None

    return InboundMessage(
        channel=event.get("channel", ""),
        ts=event.get("ts", ""),
        thread_ts=event.get("thread_ts"),
        user=event.get("user"),
        text=text,
        prompt=unescape_text(text[len(mention):].strip()),
    )
