"""Timer and sound settings from environment variables."""

import functools
import os
from dataclasses import dataclass
from typing import Optional

from storage.service.feedback import FeedbackMailbox, feedback
from worker.alarm import Alarm
from worker.notify import send_notification
from worker.sound import play_sound
from worker.timer import BREAK_SECONDS, WORK_SECONDS


@dataclass
class TimerSettings:
    work_seconds: int = WORK_SECONDS
    break_seconds: int = BREAK_SECONDS
    sound_file: Optional[str] = None
    sound_command: Optional[str] = None
    notifications: bool = True
    notify_command: Optional[str] = None


def _int_env(name: str, default: int) -> int:
    value = os.getenv(name)
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got '{value}'")


def _bool_env(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if not value:
        return default
    return value.strip().lower() not in ("0", "false", "no", "off")


def load_timer_settings() -> TimerSettings:
    home = os.path.expanduser(os.getenv("POMOPOINT_HOME", "~/.pomopoint"))
    return TimerSettings(
        work_seconds=_int_env("POMOPOINT_WORK_SECONDS", WORK_SECONDS),
        break_seconds=_int_env("POMOPOINT_BREAK_SECONDS", BREAK_SECONDS),
        sound_file=os.getenv("POMOPOINT_SOUND_FILE") or os.path.join(home, "sounds", "bell.wav"),
        sound_command=os.getenv("POMOPOINT_SOUND_COMMAND") or None,
        notifications=_bool_env("POMOPOINT_NOTIFICATIONS", True),
        notify_command=os.getenv("POMOPOINT_NOTIFY_COMMAND") or None,
    )


def make_alarm(settings: TimerSettings, mailbox: FeedbackMailbox = feedback) -> Alarm:
    play = functools.partial(play_sound, settings.sound_file, settings.sound_command)
    return Alarm(play, mailbox=mailbox)


def make_notifier(settings: TimerSettings):
    if not settings.notifications:
        return None
    return functools.partial(send_notification, command=settings.notify_command)


def timer_kwargs(settings: Optional[TimerSettings] = None, mailbox: FeedbackMailbox = feedback) -> dict:
    """Keyword arguments for ``create_timer`` built from settings."""
    settings = settings or load_timer_settings()
    return dict(
        work_seconds=settings.work_seconds,
        break_seconds=settings.break_seconds,
        alarm=make_alarm(settings, mailbox),
        mailbox=mailbox,
        notifier=make_notifier(settings),
    )
