"""User-facing reply texts in Slack mrkdwn."""

from __future__ import annotations

UNSUPPORTED_CHANNEL_TEXT = "This channel is not supported by the bot."
ONLINE_TEXT = "I am now online!"
IMAGE_CAPTION = "Here's your generated image"
REQUEST_FAILED_TEXT = "Request failed"


def slack_link(url: str, label: str) -> str:
    return f"<{url}|{label}>"


def task_url(dashboard_url: str, endpoint: str, task_id: str) -> str:
    return f"{dashboard_url.rstrip('/')}/apps/{endpoint}/tasks/{task_id}"


def render_in_progress(dashboard_url: str, endpoint: str, task_id: str) -> str:
    """
    Link to the task page on the Beam dashboard, e.g.
    <https://www.beam.cloud/apps/my-app/tasks/abc123|Request in process>
    """
    return slack_link(task_url(dashboard_url, endpoint, task_id), "Request in process")


def render_error(error: BaseException) -> str:
    # Some httpx errors stringify to "", fall back to the exception type
    return f"An error occurred: {str(error) or type(error).__name__}"
