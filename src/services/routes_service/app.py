# src/services/routes_service/app.py
"""
Routes Service: пока только проверки здоровья и диагностика БД.
Схему не применяет, своих таблиц у сервиса нет.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from src.common.logger import log_info, setup_logging
from src.common.constants import TypeMsg
from src.config import settings
from src.infra.database import close_db, init_db
from src.services import diagnostics
from src.services.errors import register_exception_handlers

SERVICE_NAME = "routes_service"


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    await log_info("Starting Routes Service...", type_msg=TypeMsg.INFO)
    await init_db(apply_schema=False)
    
    yield
    
    await log_info("Shutting down Routes Service...", type_msg=TypeMsg.INFO)
    await close_db()


app = FastAPI(
    title="Routes Service",
    version=settings.system.VERSION,
    lifespan=lifespan,
)

register_exception_handlers(app)
app.include_router(diagnostics.router, prefix="/api/v1")


@app.get("/health")
async def health_check():
    return {"status": "ok", "service": SERVICE_NAME}
