# src/services/gateway/app.py
"""
API Gateway: публичный REST, проверка JWT и оркестрация.
Своего хранилища у шлюза нет.
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager

from fastapi import FastAPI

from src.common.constants import TypeMsg
from src.common.logger import log_info, setup_logging
from src.config import settings
from src.services.gateway.dependencies import (
    cleanup_dependencies,
    get_auth_client,
    get_drivers_client,
    get_vehicles_client,
    init_dependencies,
)
from src.services.gateway.responses import register_gateway_exception_handlers
from src.services.gateway.routes import (
    auth_router,
    drivers_router,
    roles_router,
    types_router,
    users_router,
    vehicles_router,
)
from src.shared.models.common import HealthStatus

SERVICE_NAME = "gateway"


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    await log_info("Starting API Gateway...", type_msg=TypeMsg.INFO)
    init_dependencies(
        auth_url=settings.deployment.auth_url,
        drivers_url=settings.deployment.drivers_url,
        vehicles_url=settings.deployment.vehicles_url,
        timeout=settings.http.HTTP_TIMEOUT,
    )
    
    yield
    
    await log_info("Shutting down API Gateway...", type_msg=TypeMsg.INFO)
    await cleanup_dependencies()


app = FastAPI(
    title="Fleet API Gateway",
    description="Public REST API of the fleet back end",
    version=settings.system.VERSION,
    lifespan=lifespan,
)

register_gateway_exception_handlers(app)
for router in (auth_router, users_router, drivers_router, vehicles_router, types_router, roles_router):
    app.include_router(router)


@app.get("/health", response_model=HealthStatus)
async def health_check():
    """Состояние шлюза и доступность внутренних сервисов."""
    clients = (get_auth_client(), get_drivers_client(), get_vehicles_client())
    results = await asyncio.gather(*(client.health() for client in clients))
    dependencies = {
        client.service_name: "healthy" if healthy else "unhealthy"
        for client, healthy in zip(clients, results)
    }
    return HealthStatus(
        service=SERVICE_NAME,
        status="healthy" if all(results) else "degraded",
        version=settings.system.VERSION,
        dependencies=dependencies,
    )
