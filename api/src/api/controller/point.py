from fastapi import APIRouter, HTTPException, Query, Request
from pydantic import BaseModel

from storage.service import point as point_service
from storage.service.feedback import feedback

router = APIRouter(prefix="/point")


def _get_user_id(request: Request) -> str:
    return request.state.user_id


class SpendRequest(BaseModel):
    amount: int
    description: str = "Points used"


@router.get("/summary")
async def summary(request: Request):
    user_id = _get_user_id(request)
    user_points = point_service.load_user_points(user_id)
    return {
        **user_points.to_dict(),
        "today": point_service.get_today_points(user_id),
        "week": point_service.get_weekly_points(user_id),
        "month": point_service.get_monthly_points(user_id),
    }


@router.get("/history")
async def history(request: Request, limit: int = Query(point_service.HISTORY_WINDOW)):
    entries = point_service.load_point_history(_get_user_id(request), limit=limit)
    return [e.to_dict() for e in entries]


@router.post("/login-bonus")
async def login_bonus(request: Request):
    user_id = _get_user_id(request)
    awarded = point_service.check_and_award_login_bonus(user_id)
    return {"awarded": awarded, "points": point_service.load_user_points(user_id).to_dict()}


@router.post("/spend")
async def spend(req: SpendRequest, request: Request):
    if req.amount <= 0:
        raise HTTPException(status_code=400, detail="Amount must be positive")
    user_id = _get_user_id(request)
    if not point_service.spend_points(user_id, req.amount, req.description):
        raise HTTPException(status_code=409, detail=feedback.message or "Points not spent")
    return {"spent": req.amount, "points": point_service.load_user_points(user_id).to_dict()}
