import click

from .show import points_show
from .history import points_history
from .bonus import points_bonus
from .spend import points_spend


@click.group('points')
def points_group():
    """Points balance and history."""
    pass


points_group.add_command(points_show)
points_group.add_command(points_history)
points_group.add_command(points_bonus)
points_group.add_command(points_spend)
