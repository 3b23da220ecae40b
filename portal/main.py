import os
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError

from portal.core.config import get_settings
from portal.core.db import get_store, set_store
from portal.core.schema import connect_store
from portal.controllers.backup_controller import run_backup
from portal.routes.health import router as health_router
from portal.routes.auth import router as auth_router
from portal.routes.applications import router as applications_router
from portal.routes.operator import router as operator_router

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

scheduler = AsyncIOScheduler()


def _backup_job():
    try:
        store = get_store()
    except RuntimeError:
        store = None
    run_backup(store, settings.backup_dir, keep=settings.backup_keep)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting advocate portal API")
    store = connect_store(settings)
    set_store(store)
    if store is None:
        logger.error("No database available; data endpoints will fail until the store is reachable")

    if settings.backup_interval_hours > 0:
        scheduler.add_job(
            _backup_job,
            IntervalTrigger(hours=settings.backup_interval_hours),
            id="database_backup",
            next_run_time=datetime.now(timezone.utc),
            replace_existing=True,
        )
        scheduler.start()
    yield
    if scheduler.running:
        scheduler.shutdown(wait=False)
    if store is not None:
        store.dispose()
    set_store(None)


app = FastAPI(title="Advocate Portal API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.frontend_origins,
    allow_origin_regex=r"^http://(localhost|127\.0\.0\.1)(:\d+)?$",
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    # Missing or malformed fields are reported as 400 like every other input error.
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(SQLAlchemyError)
async def store_exception_handler(request: Request, exc: SQLAlchemyError):
    logger.error("Store error on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": str(exc.orig) if getattr(exc, "orig", None) is not None else str(exc)},
    )


app.include_router(health_router)
app.include_router(auth_router)
app.include_router(applications_router)
app.include_router(operator_router)

os.makedirs(settings.upload_dir, exist_ok=True)
app.mount(settings.upload_url_prefix, StaticFiles(directory=settings.upload_dir), name="uploads")
