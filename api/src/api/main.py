import asyncio
import json
from contextlib import asynccontextmanager
from typing import Any

import uvicorn
from fastapi import APIRouter, FastAPI
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger


class UnicodeJSONResponse(JSONResponse):
    def render(self, content: Any) -> bytes:
        return json.dumps(content, ensure_ascii=False).encode("utf-8")

from api.controller.task import router as task_router
from api.controller.point import router as point_router
from api.controller.pomodoro import router as pomodoro_router
from api.middleware.auth import AuthMiddleware
from storage.database.base import is_initialized
from storage.service import stats as stats_service
from storage.service.feedback import feedback
from worker.config import timer_kwargs
from worker.sweeper import run_retention_sweeper
from worker.timer import create_timer, dispose_timer


@asynccontextmanager
async def lifespan(app: FastAPI):
    if not is_initialized():
        from pomopoint.config import get_config
        get_config()

    timer = create_timer(**timer_kwargs())
    app.state.timer_owner = None

    def on_work_completed(task_id):
        if app.state.timer_owner:
            stats_service.increment_pomodoro(app.state.timer_owner)

    timer.on_work_session_completed(on_work_completed)
    timer.ensure_loop()
    sweeper = asyncio.create_task(run_retention_sweeper())
    logger.info("API started")
    try:
        yield
    finally:
        sweeper.cancel()
        await asyncio.gather(sweeper, return_exceptions=True)
        dispose_timer()
        logger.info("API stopped")


app = FastAPI(title="pomopoint API", default_response_class=UnicodeJSONResponse, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(AuthMiddleware)

api_router = APIRouter(prefix="/api")
api_router.include_router(task_router)
api_router.include_router(point_router)
api_router.include_router(pomodoro_router)


@api_router.get("/feedback")
async def current_feedback():
    return {"message": feedback.message}


app.include_router(api_router)


def main():
    uvicorn.run("api.main:app", host="0.0.0.0", port=8000, reload=True)


if __name__ == "__main__":
    main()
