import asyncio
import logging
from typing import Callable

from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from app.core.database import SessionLocal
from app.services.messenger import Messenger

logger = logging.getLogger(__name__)

Job = Callable[[Session, Messenger], object]


def run_job(job: Job, messenger: Messenger) -> None:
    db = SessionLocal()
    try:
        job(db, messenger)
    finally:
        db.close()


async def run_every(name: str, interval_seconds: float, job: Job, sio) -> None:
    """Run a job on a fixed interval until the task is cancelled."""
    logger.info("Starting %s loop every %ss", name, interval_seconds)
    try:
        while True:
            await asyncio.sleep(interval_seconds)
            messenger = Messenger()
            try:
                await run_in_threadpool(run_job, job, messenger)
            except Exception as exc:
                logger.exception("%s tick failed: %s", name, exc)
                continue
            await messenger.flush(sio)
    except asyncio.CancelledError:
        logger.info("%s loop stopped", name)


def start_loops(sio, loops: list[tuple[str, float, Job]]) -> list[asyncio.Task]:
    tasks = []
    for name, interval, job in loops:
        if not interval or interval <= 0:
            logger.info("%s loop disabled", name)
            continue
        tasks.append(asyncio.create_task(run_every(name, interval, job, sio), name=name))
    return tasks


async def stop_loops(tasks: list[asyncio.Task]) -> None:
    for task in tasks:
        task.cancel()
    if tasks:
        await asyncio.gather(*tasks, return_exceptions=True)
