import asyncio

import click
from storage.service import task as task_service
from storage.service.feedback import feedback
from pomopoint.config import get_cli_user_id
from pomopoint.time_util import format_countdown


@click.command('start')
@click.argument('task_id')
@click.option('--cycles', '-c', default=None, type=int, help='Stop after this many work sessions')
def timer_start(task_id, cycles):
    """Run a pomodoro for a task in the foreground (Ctrl-C to stop)."""
    from worker.runner import run_pomodoro

    user_id = get_cli_user_id()
    task = task_service.get_task(user_id, task_id)
    if not task:
        click.echo(f"Task '{task_id}' not found")
        return

    unsubscribe = feedback.subscribe(lambda msg: msg and click.echo(f"\n{msg}"))

    def on_update(state):
        phase = "break" if state.is_break else "work"
        click.echo(f"\r[{phase}] {format_countdown(state.time_left)}  done: {state.pomodoro_count}", nl=False)

    click.echo(f"Pomodoro for '{task.text}'")
    try:
        state = asyncio.run(run_pomodoro(user_id, task_id, on_update=on_update, max_cycles=cycles))
        click.echo(f"\nFinished {state.pomodoro_count} pomodoros")
    except KeyboardInterrupt:
        click.echo("\nStopped")
    finally:
        unsubscribe()
