import click
from storage.service import point as point_service
from pomopoint.config import get_cli_user_id


@click.command('show')
def points_show():
    """Show balance and recent totals."""
    user_id = get_cli_user_id()
    up = point_service.load_user_points(user_id)
    click.echo(f"Current:   {up.current_points}")
    click.echo(f"Lifetime:  {up.total_points}")
    click.echo(f"Streak:    {up.login_streak} (best {up.max_login_streak})")
    click.echo(f"Today:     {point_service.get_today_points(user_id):+d}")
    click.echo(f"7 days:    {point_service.get_weekly_points(user_id):+d}")
    click.echo(f"30 days:   {point_service.get_monthly_points(user_id):+d}")
