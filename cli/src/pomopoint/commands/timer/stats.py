import click
from storage.service import stats as stats_service
from pomopoint.config import get_cli_user_id


@click.command('stats')
def timer_stats():
    """Show today's completed pomodoros."""
    stats = stats_service.get_today_stats(get_cli_user_id())
    click.echo(f"Pomodoros today: {stats.completed_sessions if stats else 0}")
