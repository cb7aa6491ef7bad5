"""Desktop notifications through an external command."""

import asyncio
import shlex
import sys
from typing import List, Optional

NOTIFY_TITLE = "Pomodoro timer finished!"
NOTIFY_BODY = "Time for the next step"


class NotifyError(Exception):
    pass


def _applescript_quote(text: str) -> str:
    return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'


def notify_command(title: str, body: str, command: Optional[str] = None) -> List[str]:
    """Build the argv for a notification.

    A configured ``command`` gets the title and body appended as two arguments.
    """
    if command:
        return shlex.split(command) + [title, body]
    if sys.platform == "darwin":
        script = f"display notification {_applescript_quote(body)} with title {_applescript_quote(title)}"
        return ["osascript", "-e", script]
    return ["notify-send", title, body]


async def send_notification(title: str, body: str, command: Optional[str] = None, timeout: float = 10) -> None:
    """Show a desktop notification.

    Raises NotifyError when the command fails, and FileNotFoundError when it is not installed.
    """
    cmd = notify_command(title, body, command)
    proc = await asyncio.create_subprocess_exec(
        *cmd,
        stdout=asyncio.subprocess.DEVNULL,
        stderr=asyncio.subprocess.PIPE,
    )
    try:
        _, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout)
    except asyncio.CancelledError:
        proc.kill()
        raise
    except asyncio.TimeoutError:
        proc.kill()
        raise NotifyError(f"{cmd[0]} timed out after {timeout}s")
    if proc.returncode != 0:
        detail = stderr.decode(errors="replace").strip() if stderr else ""
        raise NotifyError(f"{cmd[0]} exited with {proc.returncode}: {detail}")
