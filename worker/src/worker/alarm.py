"""Repeating alarm used when a pomodoro phase ends."""

import asyncio
from typing import Awaitable, Callable, Optional

from loguru import logger

from storage.service.feedback import FeedbackMailbox, feedback

MAX_PLAYS = 5
FALLBACK_MESSAGE = "Timer finished!"

PlayFn = Callable[[], Awaitable[None]]


class Alarm:
    """Plays the bell up to ``max_plays`` times, one playback after another.

    At most one ring sequence exists at a time; triggering again supersedes it.
    """

    def __init__(self, play: PlayFn, mailbox: FeedbackMailbox = feedback, max_plays: int = MAX_PLAYS):
        self._play = play
        self._mailbox = mailbox
        self.max_plays = max_plays
        self.is_playing = False
        self.play_count = 0
        self._task: Optional[asyncio.Task] = None

    def trigger(self):
        self.stop()
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("No running event loop; alarm cannot play")
            self._mailbox.set_message(FALLBACK_MESSAGE)
            return
        self.play_count = 0
        self.is_playing = True
        self._task = loop.create_task(self._ring())

    async def _ring(self):
        try:
            while self.play_count < self.max_plays and self._task is asyncio.current_task():
                await self._play()
                self.play_count += 1
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error("Alarm playback failed after {} plays: {}", self.play_count, e)
            if self.play_count == 0:
                self._mailbox.set_message(FALLBACK_MESSAGE)
        finally:
            if self._task is asyncio.current_task():
                self._task = None
                self.is_playing = False

    def stop(self) -> bool:
        """Cancel the ring sequence. Returns True if one was active."""
        task, self._task = self._task, None
        was_playing = self.is_playing
        self.is_playing = False
        if task is not None and not task.done():
            task.cancel()
        return was_playing

    async def wait(self):
        """Wait for the current ring sequence to finish or be cancelled."""
        task = self._task
        if task is None:
            return
        try:
            await task
        except asyncio.CancelledError:
            pass
