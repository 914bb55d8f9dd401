import logging
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from rent_tracker.api.v1.routes.expense import router as expense_router
from rent_tracker.api.v1.routes.group import router as group_router
from rent_tracker.api.v1.routes.system import router as system_router
from rent_tracker.api.v1.routes.user import router as user_router
from rent_tracker.core.config import settings
from rent_tracker.core.db_check import wait_for_db
from rent_tracker.core.security import SessionEpoch
from rent_tracker.db.base import Base
from rent_tracker.db.session import engine

logger = logging.getLogger("rent_tracker")


def configure_logging(level: str = settings.LOG_LEVEL):
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    await wait_for_db(retries=settings.DB_CONNECT_RETRIES)

    if settings.DB_CREATE_ALL:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    logger.info("Rent Tracker started, session epoch %s", app.state.session_epoch.value)
    yield
    await engine.dispose()


def create_app(epoch: SessionEpoch | None = None) -> FastAPI:
    configure_logging()

    app = FastAPI(title="Rent Tracker", lifespan=lifespan)

    # A fresh epoch per process invalidates every token issued before a restart.
    app.state.session_epoch = epoch or SessionEpoch.generate()

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start_time = datetime.now()
        response = await call_next(request)
        duration = (datetime.now() - start_time).total_seconds()

        logger.info(f"{request.method} {request.url.path} - {response.status_code} - {duration:.3f}s")
        return response

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/")
    async def root():
        return {"message": "Rent Tracker backend is live"}

    app.include_router(system_router, prefix="/api/v1/system", tags=["system"])
    app.include_router(user_router, prefix="/api/v1/users", tags=["users"])
    app.include_router(group_router, prefix="/api/v1/groups", tags=["groups"])
    app.include_router(expense_router, prefix="/api/v1/expenses", tags=["expenses"])

    return app


app = create_app()
