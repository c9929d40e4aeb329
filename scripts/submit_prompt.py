#!/usr/bin/env python3
"""
Utility: run one prompt through a Beam app without going through Slack.

Usage:
  python scripts/submit_prompt.py --endpoint my-app-id "a lighthouse at dusk"
  python scripts/submit_prompt.py --channel C12345 "a lighthouse at dusk" --keep

Submits the prompt, polls until the task is terminal and downloads the image
into ARTIFACT_DIR (deleted afterwards unless --keep is given).

Requires: BEAM_AUTH_TOKEN in environment (same as the main app).
"""
from __future__ import annotations
import argparse
import asyncio
import sys

from dotenv import load_dotenv

from beam_imagebot.beam.client import BeamClient
from beam_imagebot.config import get_settings
from beam_imagebot.log import setup_logging
from beam_imagebot.retrieval.artifact import ArtifactFetcher


async def run(endpoint: str, prompt: str, keep: bool) -> int:
    settings = get_settings()
    beam = BeamClient(settings)
    fetcher = ArtifactFetcher(settings)
    try:
        task_id = await beam.submit(endpoint, prompt)
        print(f"Submitted task {task_id}, polling every {settings.POLL_INTERVAL_SECONDS}s...")
        result = await beam.await_completion(task_id)
        print(f"Final status: {result.status}")

        if not result.is_complete or not result.output_url:
            print("No image produced.")
            return 1

        path = await fetcher.fetch_to_temp_file(result.output_url)
        if keep:
            print(f"Image saved to {path}")
        else:
            print(f"Downloaded {path.stat().st_size} bytes (deleting, pass --keep to retain)")
            path.unlink()
        return 0
    finally:
        await beam.aclose()
        await fetcher.aclose()


def main():
    parser = argparse.ArgumentParser(description="Submit a prompt to a Beam app and wait for the image")
    parser.add_argument("prompt", help="Prompt text")
    target = parser.add_mutually_exclusive_group(required=True)
    target.add_argument("--endpoint", help="Beam app id")
    target.add_argument("--channel", help="Slack channel id to resolve via CHANNEL_URL_MAP")
    parser.add_argument("--keep", action="store_true", help="Keep the downloaded image")
    args = parser.parse_args()

    load_dotenv()
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL)

    endpoint = args.endpoint or settings.endpoint_for(args.channel)
    if not endpoint:
        print(f"Channel {args.channel} is not in CHANNEL_URL_MAP")
        sys.exit(2)

    sys.exit(asyncio.run(run(endpoint, args.prompt, args.keep)))


if __name__ == "__main__":
    main()
