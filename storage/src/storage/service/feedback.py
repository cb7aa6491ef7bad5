"""Single-slot feedback mailbox.

Each new message replaces the previous one and restarts its expiry window;
there is no queue. Inside a running event loop the expiry is scheduled and
listeners are told ``None`` when the message goes away; without a loop the
message simply reads as ``None`` once its window has passed.
"""

import asyncio
import time
from typing import Callable, List, Optional

from loguru import logger

MESSAGE_TTL_SECONDS = 3.0

FeedbackListener = Callable[[Optional[str]], None]


class FeedbackMailbox:
    def __init__(self, ttl: float = MESSAGE_TTL_SECONDS, clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl
        self._clock = clock
        self._message: Optional[str] = None
        self._expires_at = 0.0
        self._expiry: Optional[asyncio.TimerHandle] = None
        self._listeners: List[FeedbackListener] = []

    @property
    def message(self) -> Optional[str]:
        if self._message is not None and self._clock() >= self._expires_at:
            self._message = None
        return self._message

    def set_message(self, message: Optional[str]):
        self._cancel_expiry()
        self._message = message
        self._expires_at = self._clock() + self.ttl
        logger.debug("feedback: {}", message)
        if message is not None:
            self._schedule_expiry()
        self._notify(message)

    def clear(self):
        self._cancel_expiry()
        had_message = self._message is not None
        self._message = None
        if had_message:
            self._notify(None)

    def subscribe(self, listener: FeedbackListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _schedule_expiry(self):
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        self._expiry = loop.call_later(self.ttl, self._expire)

    def _cancel_expiry(self):
        if self._expiry is not None:
            self._expiry.cancel()
            self._expiry = None

    def _expire(self):
        self._expiry = None
        if self._message is None:
            return
        self._message = None
        self._notify(None)

    def _notify(self, message: Optional[str]):
        for listener in list(self._listeners):
            try:
                listener(message)
            except Exception:
                logger.exception("Feedback listener failed")


feedback = FeedbackMailbox()
