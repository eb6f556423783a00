"""Remote pause/resume control."""

from projects_notifier.control.channel import (
    Command,
    ControlChannel,
    ImapControlChannel,
    parse_command,
)
from projects_notifier.control.listener import ControlListener
from projects_notifier.control.state import PauseFlag

__all__ = [
    "Command",
    "ControlChannel",
    "ControlListener",
    "ImapControlChannel",
    "PauseFlag",
    "parse_command",
]
