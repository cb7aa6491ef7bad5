"""Pomodoro timer.

One :class:`PomodoroTimer` exists per process (see :func:`create_timer`).
It owns a single asyncio tick loop that outlives any observer; ``stop()``
only idles the timer, the loop is torn down by ``dispose()``.

Phase transitions::

    idle --start--> working --0s--> on break --0s--> working --0s--> ...
      ^                                  |
      +---------------stop---------------+

Every phase end rings the alarm and, when a notifier is set, shows a desktop
notification; the end of a working phase also bumps ``pomodoro_count`` and
notifies ``on_work_session_completed`` listeners.
"""

import asyncio
from dataclasses import dataclass, asdict
from typing import Awaitable, Callable, List, Optional, Set

from loguru import logger

from storage.service.feedback import FeedbackMailbox, feedback
from worker.alarm import Alarm
from worker.notify import NOTIFY_BODY, NOTIFY_TITLE

WORK_SECONDS = 25 * 60
BREAK_SECONDS = 5 * 60
TICK_INTERVAL = 1.0

WorkSessionListener = Callable[[Optional[str]], None]
NotifyFn = Callable[[str, str], Awaitable[None]]


async def _silent():
    return None


@dataclass
class TimerState:
    task_id: Optional[str]
    is_running: bool
    time_left: int
    is_break: bool
    is_visible: bool
    is_alarm_playing: bool
    pomodoro_count: int

    def to_dict(self) -> dict:
        return asdict(self)


class PomodoroTimer:
    def __init__(
        self,
        work_seconds: int = WORK_SECONDS,
        break_seconds: int = BREAK_SECONDS,
        alarm: Optional[Alarm] = None,
        mailbox: FeedbackMailbox = feedback,
        tick_interval: float = TICK_INTERVAL,
        notifier: Optional[NotifyFn] = None,
    ):
        self.work_seconds = work_seconds
        self.break_seconds = break_seconds
        self.tick_interval = tick_interval
        self.mailbox = mailbox
        self.alarm = alarm or Alarm(_silent, mailbox=mailbox)
        self.notifier = notifier

        self.task_id: Optional[str] = None
        self.is_running = False
        self.time_left = work_seconds
        self.is_break = False
        self.is_visible = False
        self.pomodoro_count = 0

        self._loop_task: Optional[asyncio.Task] = None
        self._listeners: List[WorkSessionListener] = []
        self._notifications: Set[asyncio.Task] = set()

    @property
    def is_alarm_playing(self) -> bool:
        return self.alarm.is_playing

    def snapshot(self) -> TimerState:
        return TimerState(
            task_id=self.task_id,
            is_running=self.is_running,
            time_left=self.time_left,
            is_break=self.is_break,
            is_visible=self.is_visible,
            is_alarm_playing=self.is_alarm_playing,
            pomodoro_count=self.pomodoro_count,
        )

    def on_work_session_completed(self, listener: WorkSessionListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # -- loop ---------------------------------------------------------------

    def ensure_loop(self) -> bool:
        """Start the tick loop unless one is already running. Returns True if started."""
        if self._loop_task is not None and not self._loop_task.done():
            return False
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop; ticks must be driven by the caller")
            return False
        self._loop_task = loop.create_task(self._run_loop())
        logger.debug("Pomodoro tick loop started")
        return True

    async def _run_loop(self):
        while True:
            await asyncio.sleep(self.tick_interval)
            if not self.is_running:
                continue
            try:
                self.tick()
            except Exception:
                logger.exception("Pomodoro tick failed")

    def dispose(self):
        """Tear down the tick loop and any ringing alarm."""
        self.alarm.stop()
        self.is_running = False
        if self._loop_task is not None:
            self._loop_task.cancel()
            self._loop_task = None
        for task in list(self._notifications):
            task.cancel()
        self._notifications.clear()
        self._listeners.clear()

    # -- transitions --------------------------------------------------------

    def start(self, task_id: str):
        """Begin a work session for ``task_id``, superseding any current one."""
        self.alarm.stop()
        self.task_id = task_id
        self.is_running = True
        self.time_left = self.work_seconds
        self.is_break = False
        self.is_visible = True
        self.ensure_loop()
        logger.info("Pomodoro started task={}", task_id)
        self.mailbox.set_message("Pomodoro timer started!")

    def stop(self):
        if self.is_alarm_playing:
            self.stop_alarm()
        self.task_id = None
        self.is_running = False
        self.is_break = False
        self.is_visible = False
        logger.info("Pomodoro stopped")
        self.mailbox.set_message("Pomodoro timer stopped")

    def stop_alarm(self):
        self.alarm.stop()
        self.mailbox.set_message("Alarm stopped")

    def play_test_sound(self):
        self.mailbox.set_message("Playing test sound...")
        self.alarm.trigger()

    def tick(self):
        if not self.is_running:
            return
        if self.time_left > 0:
            self.time_left -= 1
        if self.time_left == 0:
            self._complete_phase()

    def _complete_phase(self):
        if self.is_break:
            self.is_break = False
            self.time_left = self.work_seconds
            logger.info("Break finished; next pomodoro task={}", self.task_id)
            self.mailbox.set_message("Break over! Starting a new pomodoro")
        else:
            self.is_break = True
            self.time_left = self.break_seconds
            self.pomodoro_count += 1
            logger.info("Pomodoro completed task={} count={}", self.task_id, self.pomodoro_count)
            self.mailbox.set_message("Pomodoro complete! Time for a break")
            self._emit_work_completed()
        self.alarm.trigger()
        self._notify()

    def _notify(self):
        if self.notifier is None:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop; skipping desktop notification")
            return
        task = loop.create_task(self._send_notification())
        self._notifications.add(task)
        task.add_done_callback(self._notifications.discard)

    async def _send_notification(self):
        try:
            await self.notifier(NOTIFY_TITLE, NOTIFY_BODY)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.warning("Desktop notification failed: {}", e)

    def _emit_work_completed(self):
        for listener in list(self._listeners):
            try:
                listener(self.task_id)
            except Exception:
                logger.exception("Work session listener failed")


_timer: Optional[PomodoroTimer] = None


def create_timer(**kwargs) -> PomodoroTimer:
    """Create the process-wide timer. Raises if one already exists."""
    global _timer
    if _timer is not None:
        raise RuntimeError("Pomodoro timer already created; dispose it first")
    _timer = PomodoroTimer(**kwargs)
    return _timer


def get_timer() -> PomodoroTimer:
    if _timer is None:
        raise RuntimeError("Pomodoro timer has not been created")
    return _timer


def dispose_timer():
    global _timer
    if _timer is not None:
        _timer.dispose()
    _timer = None
