from contextlib import asynccontextmanager

from fastapi import FastAPI

from src.common.logger import log_info, setup_logging
from src.common.constants import TypeMsg
from src.config import settings
from src.infra.database import close_db, init_db
from src.services import diagnostics
from src.services.drivers_service.dependencies import cleanup_dependencies, init_dependencies
from src.services.drivers_service.routes import router
from src.services.errors import register_exception_handlers

SERVICE_NAME = "drivers_service"


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    await log_info("Starting Drivers Service...", type_msg=TypeMsg.INFO)
    await init_db()
    init_dependencies(
        auth_url=settings.deployment.auth_url,
        vehicles_url=settings.deployment.vehicles_url,
        timeout=settings.http.HTTP_TIMEOUT,
    )
    
    yield
    
    await log_info("Shutting down Drivers Service...", type_msg=TypeMsg.INFO)
    await cleanup_dependencies()
    await close_db()


app = FastAPI(
    title="Drivers Service",
    description="Driver registry and user assignment",
    version=settings.system.VERSION,
    lifespan=lifespan,
)

register_exception_handlers(app)
app.include_router(router, prefix="/api/v1")
app.include_router(diagnostics.router, prefix="/api/v1")


@app.get("/health")
async def health_check():
    return {"status": "ok", "service": SERVICE_NAME}
