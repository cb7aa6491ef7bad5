import click

from .add import task_add
from .list import task_list
from .get import task_get
from .update import task_update
from .toggle import task_toggle
from .delete import task_delete


@click.group('task')
def task_group():
    """Manage tasks."""
    pass


task_group.add_command(task_add)
task_group.add_command(task_list)
task_group.add_command(task_get)
task_group.add_command(task_update)
task_group.add_command(task_toggle)
task_group.add_command(task_delete)
