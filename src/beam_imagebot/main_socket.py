"""
Socket Mode entry point for the Beam image bot.
Connects to Slack via WebSocket - no public URL needed.

Usage:
    beam-imagebot
    python -m beam_imagebot.main_socket
"""
import asyncio
import signal
from typing import Optional
from slack_bolt.async_app import AsyncApp
from slack_bolt.adapter.socket_mode.async_handler import AsyncSocketModeHandler
from .beam.client import BeamClient
from .config import Settings, get_settings
from .log import setup_logging, get_logger
from .pipeline.run import ImageRequestHandler
from .presence import announce_online
from .retrieval.artifact import ArtifactFetcher
from .slack.client import SlackClientWrapper
from .slack.parse import parse_event

logger = get_logger("socket_listener")

def register_listeners(app: AsyncApp, handler: ImageRequestHandler):
    @app.event("message")
    async def handle_message_events(event, context):
        """
        Handle incoming message events from Slack via Socket Mode.
        Messages addressed to the bot are handed off as independent tasks.
        """
        message = parse_event(event, context.bot_user_id)
        if message is None:
            return
        handler.dispatch(message)

def build_app(settings: Settings):
    app = AsyncApp(token=settings.SLACK_BOT_TOKEN)
    slack = SlackClientWrapper(app.client)
    handler = ImageRequestHandler(
        settings=settings,
        slack=slack,
        beam=BeamClient(settings),
        fetcher=ArtifactFetcher(settings),
    )
    register_listeners(app, handler)
    return app, slack, handler

async def run(settings: Settings, stop: Optional[asyncio.Event] = None):
    """Run until `stop` is set (by default: on SIGINT/SIGTERM)."""
    app, slack, handler = build_app(settings)
    socket_handler = AsyncSocketModeHandler(app, settings.SLACK_APP_TOKEN)

    if stop is None:
        stop = asyncio.Event()
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, stop.set)

    try:
        identity = await slack.get_bot_identity()
        logger.info(f"Logged in as {identity.get('user')} ({identity.get('user_id')})")
        logger.info(f"Serving {len(settings.CHANNEL_URL_MAP)} channel(s)")

        await socket_handler.connect_async()
        try:
            await announce_online(slack)
        except Exception:
            logger.exception("Presence announcement failed")

        await stop.wait()
        logger.info("Stopping Socket Mode listener...")
    finally:
        # Stop receiving events first so nothing is dispatched after the in-flight snapshot
        await socket_handler.close_async()
        await handler.shutdown()
        await handler.beam.aclose()
        await handler.fetcher.aclose()

def main():
    """Start the Socket Mode listener and run until SIGINT/SIGTERM."""
    # Invalid configuration (e.g. malformed CHANNEL_URL_MAP) raises here, before connecting
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL)
    logger.info("Starting Socket Mode listener...")
    asyncio.run(run(settings))

if __name__ == "__main__":
    main()
