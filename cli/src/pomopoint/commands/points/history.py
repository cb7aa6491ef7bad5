import click
from tabulate import tabulate
from storage.service import point as point_service
from pomopoint.config import get_cli_user_id
from pomopoint.time_util import ms_to_local


@click.command('history')
@click.option('--limit', '-l', default=20, help='Max entries')
def points_history(limit):
    """Show recent point history."""
    entries = point_service.load_point_history(get_cli_user_id(), limit=limit)
    if not entries:
        click.echo("No point history")
        return
    table = [[ms_to_local(e.timestamp), f"{e.points:+d}", e.type, e.description] for e in entries]
    click.echo(tabulate(table, headers=["When", "Points", "Type", "Description"], tablefmt="simple"))
