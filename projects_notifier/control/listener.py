"""
Command listener - applies operator commands to the pause flag.

Runs for the lifetime of the process, independently of the collector's
own interval. Transport failures are logged and the mailbox is polled
again on the next interval; any other error ends the task.
"""

import asyncio

import structlog

from projects_notifier.control.channel import Command, ControlChannel
from projects_notifier.control.state import PauseFlag
from projects_notifier.errors import ControlChannelError
from projects_notifier.observability.metrics import MetricsCollector


class ControlListener:
    """
    Polls a ControlChannel and mutates the shared PauseFlag.

    Usage:
        listener = ControlListener(channel, flag, poll_interval=300)
        await listener.start()  # Runs until cancelled
    """

    def __init__(
        self,
        channel: ControlChannel,
        flag: PauseFlag,
        poll_interval: float = 300.0,
        start_delay: float = 0.0,
        metrics: MetricsCollector | None = None,
        logger: structlog.stdlib.BoundLogger | None = None,
    ):
        self._channel = channel
        self._flag = flag
        self._poll_interval = poll_interval
        self._start_delay = start_delay
        self._metrics = metrics
        self._log = logger or structlog.get_logger(__name__)

    def apply(self, command: Command) -> None:
        """Apply one command to the pause flag."""
        if command is Command.STOP:
            changed = self._flag.pause()
        elif command is Command.START:
            changed = self._flag.resume()
        else:
            self._log.debug("Ignoring unrecognized command message")
            return

        if changed:
            self._log.info("Collection state changed", command=command.value, paused=self._flag.is_paused)
        if self._metrics is not None:
            self._metrics.set_paused(self._flag.is_paused)

    async def poll_once(self) -> list[Command]:
        """Poll the channel once and apply every command in order."""
        self._log.info("Checking command channel")
        try:
            commands = await self._channel.poll_new_commands()
        except ControlChannelError as e:
            self._log.error("Command channel poll failed", error=str(e))
            return []

        for command in commands:
            self.apply(command)
        return commands

    async def start(self) -> None:
        """Run the poll loop until cancelled."""
        if self._start_delay:
            await asyncio.sleep(self._start_delay)

        self._log.info("Command listener started", poll_interval=self._poll_interval)
        while True:
            await self.poll_once()
            await asyncio.sleep(self._poll_interval)
