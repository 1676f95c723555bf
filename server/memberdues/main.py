import logging

import memberdues.models  # noqa: F401
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from memberdues.core.config import settings
from memberdues.routers import auth as auth_router
from memberdues.routers import dashboard as dashboard_router
from memberdues.routers import members as members_router
from memberdues.routers import notifications as notifications_router
from memberdues.routers import payments as payments_router

app = FastAPI(title="Member Dues API", version="0.1.0")

logger = logging.getLogger(__name__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router.router)
app.include_router(members_router.router)
app.include_router(payments_router.router)
app.include_router(notifications_router.router)
app.include_router(dashboard_router.router)


@app.on_event("startup")
def log_startup() -> None:
    logger.info("api_startup", extra={"environment": settings.ENVIRONMENT})


@app.get("/health", tags=["health"])
def health() -> dict[str, str]:
    return {"status": "ok"}
