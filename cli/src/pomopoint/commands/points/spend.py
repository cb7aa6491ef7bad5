import click
from storage.service import point as point_service
from storage.service.feedback import feedback
from pomopoint.config import get_cli_user_id


@click.command('spend')
@click.argument('amount', type=click.IntRange(min=1))
@click.option('--description', '-d', default='Points used', help='What the points were spent on')
def points_spend(amount, description):
    """Spend points from the current balance."""
    user_id = get_cli_user_id()
    if not point_service.spend_points(user_id, amount, description):
        click.echo(feedback.message or "Points not spent")
        return
    left = point_service.load_user_points(user_id).current_points
    click.echo(f"Spent {amount} points, {left} left")
