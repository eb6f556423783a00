"""Tests for the command listener."""

import asyncio

import pytest

from projects_notifier.control.channel import Command, ControlChannel
from projects_notifier.control.listener import ControlListener
from projects_notifier.control.state import PauseFlag
from projects_notifier.errors import ControlChannelError
from projects_notifier.observability.metrics import MetricsCollector


class ScriptedChannel(ControlChannel):
    """Returns one scripted batch per poll; exceptions are raised."""

    def __init__(self, batches):
        self._batches = list(batches)
        self.polls = 0

    async def poll_new_commands(self):
        self.polls += 1
        if not self._batches:
            return []
        batch = self._batches.pop(0)
        if isinstance(batch, Exception):
            raise batch
        return batch


class TestApply:
    def test_stop_pauses(self):
        flag = PauseFlag()
        ControlListener(ScriptedChannel([]), flag).apply(Command.STOP)
        assert flag.is_paused

    def test_start_resumes(self):
        flag = PauseFlag(paused=True)
        ControlListener(ScriptedChannel([]), flag).apply(Command.START)
        assert not flag.is_paused

    def test_unknown_is_ignored(self):
        flag = PauseFlag(paused=True)
        ControlListener(ScriptedChannel([]), flag).apply(Command.UNKNOWN)
        assert flag.is_paused

    def test_pause_gauge(self):
        metrics = MetricsCollector()
        listener = ControlListener(ScriptedChannel([]), PauseFlag(), metrics=metrics)

        listener.apply(Command.STOP)

        assert metrics.registry.get_sample_value("projects_notifier_paused") == 1


class TestPollOnce:
    @pytest.mark.asyncio
    async def test_commands_applied_in_order(self):
        flag = PauseFlag()
        listener = ControlListener(ScriptedChannel([[Command.START, Command.STOP]]), flag)

        commands = await listener.poll_once()

        assert commands == [Command.START, Command.STOP]
        assert flag.is_paused

    @pytest.mark.asyncio
    async def test_channel_error_is_not_fatal(self):
        flag = PauseFlag()
        channel = ScriptedChannel([ControlChannelError("imap down"), [Command.STOP]])
        listener = ControlListener(channel, flag)

        assert await listener.poll_once() == []
        assert not flag.is_paused

        await listener.poll_once()
        assert flag.is_paused


class TestStart:
    @pytest.mark.asyncio
    async def test_loop_keeps_polling(self):
        flag = PauseFlag()
        channel = ScriptedChannel([ControlChannelError("imap down"), [Command.STOP]])
        listener = ControlListener(channel, flag, poll_interval=0.01)

        task = asyncio.create_task(listener.start())
        for _ in range(100):
            if channel.polls >= 3:
                break
            await asyncio.sleep(0.01)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert channel.polls >= 3
        assert flag.is_paused

    @pytest.mark.asyncio
    async def test_unexpected_error_ends_loop(self):
        channel = ScriptedChannel([RuntimeError("bug")])
        listener = ControlListener(channel, PauseFlag(), poll_interval=0.01)

        with pytest.raises(RuntimeError, match="bug"):
            await listener.start()
