import click
from storage.service import point as point_service
from pomopoint.config import get_cli_user_id


@click.command('bonus')
def points_bonus():
    """Claim today's login bonus."""
    awarded = point_service.check_and_award_login_bonus(get_cli_user_id())
    if awarded:
        click.echo(f"Login bonus: +{awarded} points")
    else:
        click.echo("Login bonus already claimed today")
