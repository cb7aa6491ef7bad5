"""Hourly retention sweep of completed tasks."""

import asyncio

from loguru import logger

from storage.service import task as task_service

SWEEP_INTERVAL = 60 * 60


async def run_retention_sweeper(interval: float = SWEEP_INTERVAL) -> None:
    """Sweep every ``interval`` seconds until cancelled. A failed pass waits for the next one."""
    logger.info("Retention sweeper started interval={}s", interval)
    while True:
        try:
            deleted = task_service.check_and_delete_completed_tasks()
            if deleted:
                logger.info("Retention sweep removed {} tasks", deleted)
        except Exception:
            logger.exception("Retention sweep pass failed")
        await asyncio.sleep(interval)
