import click
from storage.service import task as task_service
from pomopoint.config import get_cli_user_id


@click.command('delete')
@click.argument('task_id')
@click.argument('sub_task_id')
def subtask_delete(task_id, sub_task_id):
    """Delete a subtask."""
    if not task_service.remove_sub_task(get_cli_user_id(), task_id, sub_task_id):
        click.echo(f"Subtask '{sub_task_id}' not found")
        return
    click.echo(f"Deleted subtask ({sub_task_id})")
