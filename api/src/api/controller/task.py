from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query, Request
from pydantic import BaseModel

from storage.service import task as task_service

router = APIRouter(prefix="/task")


def _get_user_id(request: Request) -> str:
    return request.state.user_id


class CreateTaskRequest(BaseModel):
    text: str
    deadline: Optional[str] = None
    priority: str = "medium"
    memo: Optional[str] = None


class UpdateTaskRequest(BaseModel):
    task_id: str
    text: Optional[str] = None
    deadline: Optional[str] = None
    priority: Optional[str] = None
    memo: Optional[str] = None
    estimated_minutes: Optional[int] = None
    actual_minutes: Optional[int] = None


class TaskIdRequest(BaseModel):
    task_id: str


class SubTaskRequest(BaseModel):
    task_id: str
    sub_task_id: str


class CreateSubTaskRequest(BaseModel):
    task_id: str
    text: str


class UpdateSubTaskRequest(BaseModel):
    task_id: str
    sub_task_id: str
    text: str


class ReorderSubTasksRequest(BaseModel):
    task_id: str
    order: List[str]


def _toggle_response(result):
    return {
        "task": result.task.to_dict(),
        "completed": result.completed,
        "points": result.points,
        "message": result.message,
    }


@router.get("/list")
async def list_tasks(
    request: Request,
    filter: str = Query("all"),
    sort_by: str = Query("priority"),
    sort_order: str = Query("desc"),
):
    user_id = _get_user_id(request)
    if filter not in task_service.FILTERS:
        raise HTTPException(status_code=400, detail=f"Unknown filter '{filter}'")
    try:
        tasks = task_service.get_sorted_tasks(user_id, filter=filter, sort_by=sort_by, sort_order=sort_order)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return [t.to_dict() for t in tasks]


@router.get("/detail")
async def get_task(request: Request, task_id: str = Query(...)):
    task = task_service.get_task(_get_user_id(request), task_id)
    if not task:
        raise HTTPException(status_code=404, detail="Task not found")
    return task.to_dict()


@router.get("/due")
async def due_tasks(request: Request, days: int = Query(3)):
    user_id = _get_user_id(request)
    return {
        "overdue": [t.to_dict() for t in task_service.get_overdue_tasks(user_id)],
        "today": [t.to_dict() for t in task_service.get_tasks_due_today(user_id)],
        "soon": [t.to_dict() for t in task_service.get_tasks_due_soon(user_id, days)],
    }


@router.get("/analytics")
async def analytics(request: Request):
    return task_service.get_task_analytics(_get_user_id(request)).to_dict()


@router.post("")
async def create_task(req: CreateTaskRequest, request: Request):
    try:
        task = task_service.add_task(
            _get_user_id(request), req.text, deadline=req.deadline, priority=req.priority, memo=req.memo,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not task:
        raise HTTPException(status_code=503, detail="Failed to add the task")
    return task.to_dict()


@router.post("/update")
async def update_task(req: UpdateTaskRequest, request: Request):
    fields = {k: v for k, v in req.model_dump(exclude={"task_id"}).items() if v is not None}
    if not fields:
        raise HTTPException(status_code=400, detail="No fields to update")
    try:
        task = task_service.update_task(_get_user_id(request), req.task_id, **fields)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not task:
        raise HTTPException(status_code=404, detail="Task not found")
    return task.to_dict()


@router.post("/toggle")
async def toggle_task(req: TaskIdRequest, request: Request):
    result = task_service.toggle_complete_task(_get_user_id(request), req.task_id)
    if not result:
        raise HTTPException(status_code=404, detail="Task not found")
    return _toggle_response(result)


@router.post("/delete")
async def delete_task(req: TaskIdRequest, request: Request):
    if not task_service.remove_task(_get_user_id(request), req.task_id):
        raise HTTPException(status_code=404, detail="Task not found")
    return {"task_id": req.task_id, "deleted": True}


@router.post("/subtask")
async def add_sub_task(req: CreateSubTaskRequest, request: Request):
    try:
        sub_task = task_service.add_sub_task(_get_user_id(request), req.task_id, req.text)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not sub_task:
        raise HTTPException(status_code=404, detail="Task not found")
    return sub_task.to_dict()


@router.post("/subtask/toggle")
async def toggle_sub_task(req: SubTaskRequest, request: Request):
    result = task_service.toggle_complete_sub_task(_get_user_id(request), req.task_id, req.sub_task_id)
    if not result:
        raise HTTPException(status_code=404, detail="Subtask not found")
    return _toggle_response(result)


@router.post("/subtask/delete")
async def delete_sub_task(req: SubTaskRequest, request: Request):
    task = task_service.remove_sub_task(_get_user_id(request), req.task_id, req.sub_task_id)
    if not task:
        raise HTTPException(status_code=404, detail="Subtask not found")
    return task.to_dict()


@router.post("/subtask/reorder")
async def reorder_sub_tasks(req: ReorderSubTasksRequest, request: Request):
    task = task_service.reorder_sub_tasks(_get_user_id(request), req.task_id, req.order)
    if not task:
        raise HTTPException(status_code=404, detail="Task not found")
    return task.to_dict()


@router.post("/subtask/update")
async def update_sub_task(req: UpdateSubTaskRequest, request: Request):
    try:
        task = task_service.update_sub_task(_get_user_id(request), req.task_id, req.sub_task_id, text=req.text)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not task:
        raise HTTPException(status_code=404, detail="Subtask not found")
    return task.to_dict()
