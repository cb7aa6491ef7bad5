import click
from storage.service import task as task_service
from pomopoint.config import get_cli_user_id


@click.command('toggle')
@click.argument('task_id')
def task_toggle(task_id):
    """Mark a task completed, or undo its completion."""
    user_id = get_cli_user_id()
    result = task_service.toggle_complete_task(user_id, task_id)
    if not result:
        click.echo(f"Task '{task_id}' not found")
        return
    click.echo(result.message)
