"""Play a sound file through an external player command."""

import asyncio
import os
import shlex
import sys
from typing import Optional


class SoundError(Exception):
    pass


def default_player_command() -> str:
    if sys.platform == "darwin":
        return "afplay"
    return "paplay"


async def play_sound(path: str, command: Optional[str] = None, timeout: float = 30) -> None:
    """Run ``command <path>`` and wait for playback to end.

    Raises SoundError when the file is missing or the player fails, and
    FileNotFoundError when the player itself is not installed.
    """
    path = os.path.expanduser(path)
    if not os.path.isfile(path):
        raise SoundError(f"Sound file not found: {path}")
    cmd = shlex.split(command or default_player_command()) + [path]
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
        raise SoundError(f"{cmd[0]} timed out after {timeout}s")
    if proc.returncode != 0:
        detail = stderr.decode(errors="replace").strip() if stderr else ""
        raise SoundError(f"{cmd[0]} exited with {proc.returncode}: {detail}")
