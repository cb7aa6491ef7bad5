import click
from storage.service import task as task_service
from pomopoint.config import get_cli_user_id


@click.command('add')
@click.argument('task_id')
@click.argument('text')
def subtask_add(task_id, text):
    """Add a subtask."""
    try:
        sub_task = task_service.add_sub_task(get_cli_user_id(), task_id, text)
    except ValueError as e:
        click.echo(str(e))
        return
    if not sub_task:
        click.echo(f"Task '{task_id}' not found")
        return
    click.echo(f"Added subtask '{sub_task.text}' ({sub_task.id})")
