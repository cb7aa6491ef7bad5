import click
from storage.service import task as task_service
from pomopoint.config import get_cli_user_id


@click.command('toggle')
@click.argument('task_id')
@click.argument('sub_task_id')
def subtask_toggle(task_id, sub_task_id):
    """Mark a subtask completed, or undo its completion."""
    result = task_service.toggle_complete_sub_task(get_cli_user_id(), task_id, sub_task_id)
    if not result:
        click.echo(f"Subtask '{sub_task_id}' not found")
        return
    click.echo(result.message)
