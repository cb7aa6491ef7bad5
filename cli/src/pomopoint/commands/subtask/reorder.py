import click
from storage.service import task as task_service
from pomopoint.config import get_cli_user_id


@click.command('reorder')
@click.argument('task_id')
@click.argument('sub_task_ids', nargs=-1, required=True)
def subtask_reorder(task_id, sub_task_ids):
    """Reorder subtasks: pass subtask ids in the new order."""
    task = task_service.reorder_sub_tasks(get_cli_user_id(), task_id, list(sub_task_ids))
    if not task:
        click.echo(f"Task '{task_id}' not found")
        return
    for st in task.sub_tasks:
        click.echo(f"{st.order}. {st.text}")
