import click
from storage.entity.dto import PRIORITIES
from storage.service import task as task_service
from pomopoint.config import get_cli_user_id


@click.command('update')
@click.argument('task_id')
@click.option('--text', '-t', default=None, help='New text')
@click.option('--deadline', '-d', default=None, help='New deadline (YYYY-MM-DD)')
@click.option('--priority', '-p', default=None, type=click.Choice(PRIORITIES), help='New priority')
@click.option('--memo', '-m', default=None, help='New memo')
@click.option('--estimate', '-e', default=None, type=int, help='Estimated minutes')
def task_update(task_id, text, deadline, priority, memo, estimate):
    """Update a task."""
    user_id = get_cli_user_id()
    fields = {}
    if text is not None:
        fields['text'] = text
    if deadline is not None:
        fields['deadline'] = deadline
    if priority is not None:
        fields['priority'] = priority
    if memo is not None:
        fields['memo'] = memo
    if estimate is not None:
        fields['estimated_minutes'] = estimate

    if not fields:
        click.echo("No fields to update")
        return

    task = task_service.update_task(user_id, task_id, **fields)
    if not task:
        click.echo(f"Task '{task_id}' not found")
        return
    click.echo(f"Updated task '{task.text}' ({task.task_id})")
