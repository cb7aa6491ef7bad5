import click
from storage.service import task as task_service
from pomopoint.config import get_cli_user_id
from pomopoint.time_util import ms_to_local


@click.command('get')
@click.argument('task_id')
def task_get(task_id):
    """Show task details."""
    user_id = get_cli_user_id()
    task = task_service.get_task(user_id, task_id)
    if not task:
        click.echo(f"Task '{task_id}' not found")
        return

    click.echo(f"ID:        {task.task_id}")
    click.echo(f"Task:      {task.text}")
    click.echo(f"Status:    {'completed' if task.completed else 'open'}")
    click.echo(f"Priority:  {task.priority}")
    click.echo(f"Deadline:  {task.deadline or '-'}")
    click.echo(f"Progress:  {task_service.calculate_total_progress(task)}%")
    if task.memo:
        click.echo(f"Memo:      {task.memo}")
    if task.estimated_minutes:
        click.echo(f"Estimate:  {task.estimated_minutes} min")
    if task.completed_at:
        click.echo(f"Completed: {ms_to_local(task.completed_at)}")
    if task.sub_tasks:
        click.echo("Subtasks:")
        for st in task.sub_tasks:
            mark = "x" if st.completed else " "
            click.echo(f"  {st.order}. [{mark}] {st.text} ({st.id})")
