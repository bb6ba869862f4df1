from contextlib import asynccontextmanager

from fastapi import FastAPI

from src.common.logger import log_info, setup_logging
from src.common.constants import TypeMsg
from src.config import settings
from src.infra.database import close_db, init_db
from src.services import diagnostics
from src.services.auth_service.routes import auth_router, roles_router, router
from src.services.errors import register_exception_handlers

SERVICE_NAME = "auth_service"


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    await log_info("Starting Auth Service...", type_msg=TypeMsg.INFO)
    await init_db()
    
    yield
    
    await log_info("Shutting down Auth Service...", type_msg=TypeMsg.INFO)
    await close_db()


app = FastAPI(
    title="Auth Service",
    description="User directory, roles and authentication",
    version=settings.system.VERSION,
    lifespan=lifespan,
)

register_exception_handlers(app)
app.include_router(router, prefix="/api/v1")
app.include_router(roles_router, prefix="/api/v1")
app.include_router(auth_router, prefix="/api/v1")
app.include_router(diagnostics.router, prefix="/api/v1")


@app.get("/health")
async def health_check():
    return {"status": "ok", "service": SERVICE_NAME}
