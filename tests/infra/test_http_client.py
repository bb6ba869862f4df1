# tests/infra/test_http_client.py
"""
Тесты базового клиента межсервисных вызовов.
"""

from __future__ import annotations

import httpx
import pytest

from src.common.exceptions import ConflictError, InternalError, NotFoundError, ValidationError
from src.infra.http_client import ServiceClient, drop_none


def make_client(handler) -> ServiceClient:
    return ServiceClient("http://peer.test", timeout=1.0, transport=httpx.MockTransport(handler))


class TestDropNone:
    def test_removes_none_and_formats_bool(self) -> None:
        assert drop_none({"a": None, "b": True, "c": False, "d": 3}) == {"b": "true", "c": "false", "d": 3}


class TestServiceClient:
    """Ответы и ошибки соседнего сервиса."""

    @pytest.mark.asyncio
    async def test_returns_json(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/api/v1/drivers/3"
            return httpx.Response(200, json={"id": 3})
        
        client = make_client(handler)
        try:
            assert await client.get("/api/v1/drivers/3") == {"id": 3}
        finally:
            await client.close()

    @pytest.mark.asyncio
    async def test_query_params_without_none(self) -> None:
        seen = {}
        
        def handler(request: httpx.Request) -> httpx.Response:
            seen.update(request.url.params)
            return httpx.Response(200, json=[])
        
        client = make_client(handler)
        try:
            await client.get("/api/v1/drivers/search", status=True, machinery_type_id=None)
        finally:
            await client.close()
        
        assert seen == {"status": "true"}

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status, code, error_cls",
        [
            (400, "invalid_argument", ValidationError),
            (404, "not_found", NotFoundError),
            (409, "conflict", ConflictError),
            (500, "internal", InternalError),
        ],
    )
    async def test_error_response_mapped(self, status, code, error_cls) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(status, json={"error_code": code, "message": "from peer", "details": None})
        
        client = make_client(handler)
        try:
            with pytest.raises(error_cls, match="from peer"):
                await client.patch("/api/v1/drivers/1/user", json={"user_id": 5})
        finally:
            await client.close()

    @pytest.mark.asyncio
    async def test_non_json_error_is_internal(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(502, text="Bad Gateway")
        
        client = make_client(handler)
        try:
            with pytest.raises(InternalError, match="HTTP 502"):
                await client.get("/x")
        finally:
            await client.close()

    @pytest.mark.asyncio
    async def test_transport_error_is_internal(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)
        
        client = make_client(handler)
        try:
            with pytest.raises(InternalError, match="unavailable"):
                await client.post("/api/v1/users", json={})
        finally:
            await client.close()

    @pytest.mark.asyncio
    async def test_health(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200 if request.url.path == "/health" else 404)
        
        client = make_client(handler)
        try:
            assert await client.health() is True
        finally:
            await client.close()
