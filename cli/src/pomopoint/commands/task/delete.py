import click
from storage.service import task as task_service
from pomopoint.config import get_cli_user_id


@click.command('delete')
@click.argument('task_id')
def task_delete(task_id):
    """Delete a task and its subtasks."""
    user_id = get_cli_user_id()
    if not task_service.remove_task(user_id, task_id):
        click.echo(f"Task '{task_id}' not found")
        return
    click.echo(f"Deleted task ({task_id})")
