import asyncio
import logging
from typing import Set

from ..beam.client import BeamClient
from ..config import Settings
from ..rendering.slack_format import (
    IMAGE_CAPTION,
    REQUEST_FAILED_TEXT,
    UNSUPPORTED_CHANNEL_TEXT,
    render_error,
    render_in_progress,
)
from ..retrieval.artifact import ArtifactFetcher
from ..schemas.events import InboundMessage
from ..slack.client import SlackClientWrapper

logger = logging.getLogger("pipeline")

class ImageRequestHandler:
    """Runs one prompt -> Beam task -> image reply cycle per inbound message."""

    def __init__(
        self,
        settings: Settings,
        slack: SlackClientWrapper,
        beam: BeamClient,
        fetcher: ArtifactFetcher,
    ):
        self.settings = settings
        self.slack = slack
        self.beam = beam
        self.fetcher = fetcher
        self._in_flight: Set[asyncio.Task] = set()

    @property
    def in_flight(self) -> int:
        return len(self._in_flight)

    def dispatch(self, message: InboundMessage) -> asyncio.Task:
        """Schedule handle() as its own task; tracked until it finishes so shutdown() can cancel it."""
        task = asyncio.create_task(self.handle(message), name=f"image-request-{message.channel}-{message.ts}")
        self._in_flight.add(task)
        task.add_done_callback(self._on_done)
        return task

    def _on_done(self, task: asyncio.Task):
        self._in_flight.discard(task)
        # Reached when a reply itself could not be posted
        if not task.cancelled() and task.exception() is not None:
            logger.error(f"{task.get_name()} failed", exc_info=task.exception())

    async def shutdown(self):
        tasks = list(self._in_flight)
        if not tasks:
            return
        logger.info(f"Cancelling {len(tasks)} in-flight request(s)")
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    async def reply(self, message: InboundMessage, text: str):
        await self.slack.post_reply(message.channel, message.reply_ts, text)

    async def handle(self, message: InboundMessage):
        endpoint = self.settings.endpoint_for(message.channel)
        if not endpoint:
            logger.info(f"Channel {message.channel} has no Beam app configured")
            await self.reply(message, UNSUPPORTED_CHANNEL_TEXT)
            return

        logger.info(f"Processing prompt from {message.user} in {message.channel}/{message.ts}")
        try:
            # 1. Submit
            task_id = await self.beam.submit(endpoint, message.prompt)
            await self.reply(
                message,
                render_in_progress(self.settings.BEAM_DASHBOARD_URL, endpoint, task_id),
            )

            # 2. Poll until terminal
            result = await self.beam.await_completion(task_id)

            # 3. Deliver or report failure
            if not result.is_complete:
                logger.warning(f"Task {task_id} ended with status {result.status}")
                await self.reply(message, REQUEST_FAILED_TEXT)
                return

            image_url = result.output_url
            if not image_url:
                raise ValueError(f"Task {task_id} completed without an output image")

            async with self.fetcher.temp_artifact(image_url) as path:
                await self.slack.upload_file(message.channel, message.reply_ts, path, IMAGE_CAPTION)
            logger.info(f"Delivered image for task {task_id}")

        except Exception as e:
            logger.exception("Image request error")
            await self.reply(message, render_error(e))
