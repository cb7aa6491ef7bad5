import click

from .add import subtask_add
from .toggle import subtask_toggle
from .rename import subtask_rename
from .delete import subtask_delete
from .reorder import subtask_reorder


@click.group('subtask')
def subtask_group():
    """Manage subtasks of a task."""
    pass


subtask_group.add_command(subtask_add)
subtask_group.add_command(subtask_toggle)
subtask_group.add_command(subtask_rename)
subtask_group.add_command(subtask_delete)
subtask_group.add_command(subtask_reorder)
