"""Long-running entry points: foreground pomodoro sessions and the background sweeper."""

import asyncio
from typing import Callable, Optional

from loguru import logger

from storage.service import stats as stats_service
from worker.config import TimerSettings, timer_kwargs
from worker.sweeper import SWEEP_INTERVAL, run_retention_sweeper
from worker.timer import PomodoroTimer, TimerState, create_timer, dispose_timer


def record_sessions(timer: PomodoroTimer, user_id: str) -> Callable[[], None]:
    """Count each finished work phase in the user's daily pomodoro stats."""

    def on_completed(task_id: Optional[str]):
        logger.info("Work session finished user={} task={}", user_id, task_id)
        stats_service.increment_pomodoro(user_id)

    return timer.on_work_session_completed(on_completed)


async def run_pomodoro(
    user_id: str,
    task_id: str,
    on_update: Optional[Callable[[TimerState], None]] = None,
    settings: Optional[TimerSettings] = None,
    max_cycles: Optional[int] = None,
) -> TimerState:
    """Run a pomodoro session in the foreground until cancelled or ``max_cycles`` work phases finish."""
    timer = create_timer(**timer_kwargs(settings))
    record_sessions(timer, user_id)
    try:
        timer.start(task_id)
        while timer.is_running:
            await asyncio.sleep(timer.tick_interval)
            state = timer.snapshot()
            if on_update:
                on_update(state)
            if max_cycles is not None and state.pomodoro_count >= max_cycles and not state.is_alarm_playing:
                timer.stop()
        return timer.snapshot()
    finally:
        dispose_timer()


async def run_worker(sweep_interval: float = SWEEP_INTERVAL) -> None:
    logger.info("Worker started")
    await run_retention_sweeper(sweep_interval)


def main(sweep_interval: float = SWEEP_INTERVAL):
    try:
        asyncio.run(run_worker(sweep_interval))
    except KeyboardInterrupt:
        logger.info("Worker stopped")
