import pytest

from storage.database.base import dispose_db, init_db
from storage.repository import task as task_repo
from storage.service import task as task_service
from storage.service.feedback import feedback
from worker.timer import dispose_timer


@pytest.fixture(autouse=True)
def db():
    init_db("sqlite://")
    feedback.clear()
    yield
    dispose_timer()
    task_service.set_completion_cue(None)
    task_repo._listeners.clear()
    dispose_db()


@pytest.fixture
def user_id():
    return "user-1"
