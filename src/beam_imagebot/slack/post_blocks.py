"""Slack message payload builders.

Provides functions to build chat.postMessage and files.uploadV2 payloads.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional


def build_post_payload(
    channel: str,
    text: str,
    thread_ts: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Payload for chat.postMessage.
    Posts as plain text with mrkdwn enabled; unfurling is off so task links stay compact.
    """
    payload: Dict[str, Any] = {
        "channel": channel,
        "text": text,
        "mrkdwn": True,  # Enable mrkdwn formatting in text field
        "unfurl_links": False,
        "unfurl_media": False,
    }
    if thread_ts:
        payload["thread_ts"] = thread_ts
    return payload


def build_upload_payload(
    channel: str,
    path: Path,
    comment: str,
    thread_ts: Optional[str] = None,
) -> Dict[str, Any]:
    """Payload for files.uploadV2: one local file shared into the channel with a comment."""
    payload: Dict[str, Any] = {
        "channel": channel,
        "file": str(path),
        "filename": path.name,
        "title": path.name,
        "initial_comment": comment,
    }
    if thread_ts:
        payload["thread_ts"] = thread_ts
    return payload
