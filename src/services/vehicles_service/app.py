from contextlib import asynccontextmanager

from fastapi import FastAPI

from src.common.logger import log_info, setup_logging
from src.common.constants import TypeMsg
from src.config import settings
from src.infra.database import close_db, init_db
from src.services import diagnostics
from src.services.errors import register_exception_handlers
from src.services.vehicles_service.routes import router, types_router

SERVICE_NAME = "vehicles_service"


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    await log_info("Starting Vehicles Service...", type_msg=TypeMsg.INFO)
    await init_db()
    
    yield
    
    await log_info("Shutting down Vehicles Service...", type_msg=TypeMsg.INFO)
    await close_db()


app = FastAPI(
    title="Vehicles Service",
    description="Vehicles and machinery types",
    version=settings.system.VERSION,
    lifespan=lifespan,
)

register_exception_handlers(app)
app.include_router(router, prefix="/api/v1")
app.include_router(types_router, prefix="/api/v1")
app.include_router(diagnostics.router, prefix="/api/v1")
app.include_router(diagnostics.vehicles_router, prefix="/api/v1")


@app.get("/health")
async def health_check():
    return {"status": "ok", "service": SERVICE_NAME}
