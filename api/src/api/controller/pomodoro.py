from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from storage.service import stats as stats_service
from storage.service import task as task_service
from worker.timer import get_timer

router = APIRouter(prefix="/pomodoro")


def _get_user_id(request: Request) -> str:
    return request.state.user_id


def _require_owner(request: Request) -> str:
    user_id = _get_user_id(request)
    owner = request.app.state.timer_owner
    if owner is not None and owner != user_id:
        raise HTTPException(status_code=409, detail="Timer is in use by another user")
    return user_id


class StartRequest(BaseModel):
    task_id: str


@router.get("/state")
async def state():
    return get_timer().snapshot().to_dict()


@router.post("/start")
async def start(req: StartRequest, request: Request):
    timer = get_timer()
    if timer.is_running:
        user_id = _require_owner(request)
    else:
        user_id = _get_user_id(request)
    if not task_service.get_task(user_id, req.task_id):
        raise HTTPException(status_code=404, detail="Task not found")
    request.app.state.timer_owner = user_id
    timer.start(req.task_id)
    return timer.snapshot().to_dict()


@router.post("/stop")
async def stop(request: Request):
    _require_owner(request)
    timer = get_timer()
    timer.stop()
    request.app.state.timer_owner = None
    return timer.snapshot().to_dict()


@router.post("/stop-alarm")
async def stop_alarm(request: Request):
    _require_owner(request)
    timer = get_timer()
    timer.stop_alarm()
    return timer.snapshot().to_dict()


@router.post("/test-sound")
async def test_sound():
    timer = get_timer()
    timer.play_test_sound()
    return timer.snapshot().to_dict()


@router.get("/stats")
async def stats(request: Request):
    user_id = _get_user_id(request)
    today = stats_service.get_today_stats(user_id)
    return {"completed_sessions": today.completed_sessions if today else 0}
