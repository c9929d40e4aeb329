"""Beam Image Bot - A Slack bot that turns mentions into images generated on Beam.

Mention the bot with a prompt in a mapped channel; it submits the prompt to
that channel's Beam app, polls the task and replies with the image.

Components:
- main_socket: Socket Mode entry point
- pipeline: per-message request/poll/deliver handler
- beam: Beam task client
- retrieval: image download to temporary files
- slack: Slack API integration and event parsing
- presence: startup "online" notice
"""
