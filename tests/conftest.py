"""
遥测网关测试基础配置

提供模拟的 Zabbix JSON-RPC 上游（基于 httpx.MockTransport）、指向它的 ZabbixClient
以及挂载到 FastAPI 应用上的异步 HTTP 测试客户端。所有测试都不依赖真实的 Zabbix 服务。
"""
import json
from typing import Any, AsyncGenerator, Callable, Optional

import httpx
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

# 必须在导入 app 之前设置环境变量
import os
os.environ["ZABBIX_API_URL"] = "http://zabbix.test/api_jsonrpc.php"
os.environ["ZABBIX_BASIC_USER"] = "svc"
os.environ["ZABBIX_BASIC_PASSWORD"] = "svc-secret"
os.environ["SESSION_COOKIE_NAME"] = "zabbix_auth_token"

from telemetry_gateway.core.deps import get_zabbix_client
from telemetry_gateway.services.zabbix_client import ZabbixClient

ZABBIX_URL = os.environ["ZABBIX_API_URL"]
SESSION_TOKEN = "0424bd59b807674191e7d77572075f33"


# ── Fake Zabbix ───────────────────────────────────────────────────────
class FakeZabbix:
    """
    内存级 Zabbix JSON-RPC 模拟。

    按方法名登记应答；每个收到的请求（httpx.Request 和解码后的 JSON 体）都会被记录下来。
    """

    def __init__(self):
        self._replies: dict[str, Callable[[httpx.Request], httpx.Response]] = {}
        self.requests: list[tuple[httpx.Request, dict]] = []

    def reply(self, method: str, result: Any = None, error: Optional[dict] = None) -> None:
        envelope: dict = {"jsonrpc": "2.0", "id": 1}
        if error is not None:
            envelope["error"] = error
        else:
            envelope["result"] = result
        self._replies[method] = lambda request: httpx.Response(200, json=envelope)

    def reply_raw(self, method: str, status_code: int, content: bytes) -> None:
        self._replies[method] = lambda request: httpx.Response(status_code, content=content)

    def fail(self, method: str, exc_type: type = httpx.ConnectError) -> None:
        def _raise(request: httpx.Request) -> httpx.Response:
            raise exc_type("upstream down", request=request)
        self._replies[method] = _raise

    @property
    def payloads(self) -> list[dict]:
        return [payload for _, payload in self.requests]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        self.requests.append((request, payload))
        handler = self._replies.get(payload["method"])
        if handler is None:
            return httpx.Response(
                200,
                json={"jsonrpc": "2.0", "id": 1, "error": {"code": -32601, "message": "Method not found."}},
            )
        return handler(request)


# ── Fixtures ──────────────────────────────────────────────────────────

@pytest.fixture
def fake_zabbix() -> FakeZabbix:
    return FakeZabbix()


@pytest.fixture
def zabbix_client(fake_zabbix: FakeZabbix) -> ZabbixClient:
    """指向模拟上游的客户端。"""
    return ZabbixClient(
        url=ZABBIX_URL,
        basic_auth=("svc", "svc-secret"),
        timeout=5.0,
        transport=httpx.MockTransport(fake_zabbix),
    )


@pytest_asyncio.fixture
async def client(zabbix_client: ZabbixClient) -> AsyncGenerator[AsyncClient, None]:
    """提供配置好依赖覆盖的异步 HTTP 测试客户端。"""
    from telemetry_gateway.main import app

    app.dependency_overrides[get_zabbix_client] = lambda: zabbix_client

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def session_headers() -> dict:
    """携带会话 Cookie 的请求头。"""
    return {"Cookie": f"zabbix_auth_token={SESSION_TOKEN}"}
