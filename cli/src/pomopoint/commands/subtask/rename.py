import click
from storage.service import task as task_service
from pomopoint.config import get_cli_user_id


@click.command('rename')
@click.argument('task_id')
@click.argument('sub_task_id')
@click.argument('text')
def subtask_rename(task_id, sub_task_id, text):
    """Change a subtask's text."""
    try:
        task = task_service.update_sub_task(get_cli_user_id(), task_id, sub_task_id, text=text)
    except ValueError as e:
        click.echo(str(e))
        return
    if not task:
        click.echo(f"Subtask '{sub_task_id}' not found")
        return
    click.echo(f"Renamed subtask ({sub_task_id})")
