import click
from dotenv import load_dotenv

from pomopoint.commands.task.click import task_group
from pomopoint.commands.subtask.click import subtask_group
from pomopoint.commands.points.click import points_group
from pomopoint.commands.timer.click import timer_group
CONTEXT_SETTINGS = dict(help_option_names=['-h', '--help'])

@click.group(context_settings=CONTEXT_SETTINGS)
def cli():
    """Tasks, pomodoros and points."""
    load_dotenv()


@cli.command('worker')
@click.option('--interval', default=3600, type=float, help='Seconds between retention sweeps')
def worker(interval):
    """Run the background retention sweeper."""
    from pomopoint.config import get_config
    from worker.runner import main

    get_config()
    main(interval)


# Register commands
cli.add_command(task_group)
cli.add_command(subtask_group)
cli.add_command(points_group)
cli.add_command(timer_group)
