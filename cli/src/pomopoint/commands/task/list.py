import click
from tabulate import tabulate
from pomopoint.api_client import api_request


@click.command('list')
@click.option('--filter', '-f', 'filter_', default='all', type=click.Choice(['all', 'active', 'completed']), help='Filter by completion')
@click.option('--sort', '-s', 'sort_by', default='priority',
              type=click.Choice(['priority', 'deadline', 'created', 'progress', 'alphabetical']), help='Sort field')
@click.option('--asc', is_flag=True, help='Ascending order')
def task_list(filter_, sort_by, asc):
    """List tasks (via the API)."""
    params = {"filter": filter_, "sort_by": sort_by, "sort_order": "asc" if asc else "desc"}
    resp = api_request("GET", "/api/task/list", params=params)
    tasks = resp.json()
    if not tasks:
        click.echo("No tasks found")
        return

    table = []
    for t in tasks:
        table.append([
            t["task_id"],
            t["text"],
            "done" if t["completed"] else "open",
            t.get("priority") or "-",
            t.get("deadline") or "-",
            f"{t['completed_sub_tasks_count']}/{t['sub_tasks_count']}" if t.get("sub_tasks_count") else "-",
        ])
    click.echo(tabulate(table, headers=["ID", "Task", "Status", "Priority", "Deadline", "Subtasks"], tablefmt="simple"))
