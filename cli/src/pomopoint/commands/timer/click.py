import click

from .start import timer_start
from .stats import timer_stats


@click.group('timer')
def timer_group():
    """Pomodoro timer."""
    pass


timer_group.add_command(timer_start)
timer_group.add_command(timer_stats)
