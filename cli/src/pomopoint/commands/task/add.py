import click
from storage.entity.dto import PRIORITIES
from storage.service import task as task_service
from pomopoint.config import get_cli_user_id


@click.command('add')
@click.argument('text')
@click.option('--deadline', '-d', default=None, help='Deadline (YYYY-MM-DD)')
@click.option('--priority', '-p', default='medium', type=click.Choice(PRIORITIES), help='Priority')
@click.option('--memo', '-m', default=None, help='Memo')
def task_add(text, deadline, priority, memo):
    """Add a new task."""
    user_id = get_cli_user_id()
    try:
        task = task_service.add_task(user_id, text, deadline=deadline, priority=priority, memo=memo)
    except ValueError as e:
        raise click.BadParameter(str(e))
    if not task:
        click.echo("Failed to add the task")
        return
    click.echo(f"Created task '{task.text}' ({task.task_id})")
