"""
Zabbix JSON-RPC 客户端 (Zabbix JSON-RPC Client)

功能描述 (Description):
    网关与上游监控服务之间唯一的通信通道。所有获取器（登录、主机列表、监控项、触发器）
    都通过 call() 发送请求，共享同一套信封处理规则。

调用规则 (Call Discipline):
    1. 构造 JSON-RPC 2.0 请求体，需要会话时附带 auth 字段
    2. 以 application/json POST 到固定端点，附带服务级 Basic Auth
    3. 读取完整响应体；网络/超时/读取错误 → TransportFailure
    4. HTTP 状态非 200 → UpstreamUnavailable，不再尝试解析响应体
    5. 解码 {result, error?} 信封；无法解码 → MalformedUpstreamResponse
    6. error 存在 → UpstreamRejected，消息原样保留
    7. 否则返回 result

技术特性 (Technical Features):
    - 每次调用使用独立的 httpx.AsyncClient，请求之间不共享状态
    - 单次调用超时可由调用方覆盖（来自入站请求的剩余预算）
    - 可注入 httpx 传输层，便于测试
"""
import json
import logging
import time
from typing import Any, Dict, Optional

import httpx

from telemetry_gateway.core.config import Settings
from telemetry_gateway.core.exceptions import (
    MalformedUpstreamResponse,
    TransportFailure,
    UpstreamRejected,
    UpstreamUnavailable,
)

logger = logging.getLogger(__name__)

JSONRPC_VERSION = "2.0"
REQUEST_ID = 1
BODY_PREVIEW_LIMIT = 512


def mask_token(token: Optional[str]) -> str:
    """日志中只保留令牌前 4 位 (Keep only the first 4 characters of a token for logs)"""
    if not token:
        return "<none>"
    return f"{token[:4]}***"


class ZabbixClient:
    """
    上游 JSON-RPC 客户端类 (Upstream JSON-RPC Client Class)

    由不可变配置构造，自身不保存任何请求级状态。
    """

    def __init__(
        self,
        url: str,
        basic_auth: Optional[tuple[str, str]] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url = url
        self._basic_auth = basic_auth
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None) -> "ZabbixClient":
        return cls(
            url=settings.zabbix_api_url,
            basic_auth=settings.basic_auth,
            timeout=settings.upstream_timeout,
            transport=transport,
        )

    def _build_payload(self, method: str, params: Dict[str, Any], auth: Optional[str]) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "jsonrpc": JSONRPC_VERSION,
            "method": method,
            "params": params,
            "id": REQUEST_ID,
        }
        if auth is not None:
            payload["auth"] = auth
        return payload

    async def call(
        self,
        method: str,
        params: Dict[str, Any],
        auth: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        """
        发送一次 JSON-RPC 请求并返回 result (Send one JSON-RPC request and return its result)

        Args:
            method: 上游方法名，如 host.get
            params: 方法参数对象
            auth: 会话令牌；登录和 apiinfo.version 不携带
            timeout: 本次调用的超时（秒），默认使用配置值

        Returns:
            Any: 信封中的 result 字段，缺失时为 None

        Raises:
            TransportFailure: 网络错误或超时
            UpstreamUnavailable: HTTP 状态非 200
            MalformedUpstreamResponse: 响应体无法解码为信封对象
            UpstreamRejected: 上游返回 error 对象
        """
        payload = self._build_payload(method, params, auth)
        effective_timeout = self.timeout if timeout is None else timeout
        logger.debug("Zabbix call %s (auth=%s, timeout=%.2fs)", method, mask_token(auth), effective_timeout)

        started = time.monotonic()
        try:
            async with httpx.AsyncClient(
                timeout=effective_timeout,
                auth=self._basic_auth,
                transport=self._transport,
            ) as client:
                resp = await client.post(
                    self.url,
                    json=payload,
                    headers={"Content-Type": "application/json"},
                )
                body = resp.content
        except httpx.HTTPError as e:
            # 只记录异常类型和方法名，请求体可能包含密码
            logger.warning("Zabbix %s transport failure: %s", method, type(e).__name__)
            raise TransportFailure(f"Upstream request failed: {type(e).__name__}: {e}") from e

        elapsed = time.monotonic() - started
        logger.debug("Zabbix %s answered %s in %.3fs (%d bytes)", method, resp.status_code, elapsed, len(body))

        if resp.status_code != 200:
            preview = body[:BODY_PREVIEW_LIMIT].decode("utf-8", errors="replace")
            logger.warning("Zabbix %s returned HTTP %s", method, resp.status_code)
            raise UpstreamUnavailable(
                f"Unexpected upstream status {resp.status_code}",
                detail=preview or None,
            )

        try:
            envelope = json.loads(body)
        except ValueError as e:
            raise MalformedUpstreamResponse(f"Upstream response is not valid JSON: {e}") from e
        if not isinstance(envelope, dict):
            raise MalformedUpstreamResponse("Upstream response is not a JSON-RPC envelope")

        error = envelope.get("error")
        if error is not None:
            raise self._rejection(method, error)

        return envelope.get("result")

    def _rejection(self, method: str, error: Any) -> UpstreamRejected:
        if isinstance(error, dict):
            message = str(error.get("message", "Unknown upstream error"))
            code = error.get("code")
            data = error.get("data")
        else:
            message, code, data = str(error), None, None
        logger.warning("Zabbix %s rejected: %s (code: %s)", method, message, code)
        return UpstreamRejected(
            message,
            code=code if isinstance(code, int) else None,
            detail=str(data) if data else None,
        )

    async def api_version(self, timeout: Optional[float] = None) -> str:
        """查询上游 API 版本，无需会话 (Query upstream API version, no session needed)"""
        result = await self.call("apiinfo.version", {}, timeout=timeout)
        if not isinstance(result, str):
            raise MalformedUpstreamResponse("Field 'result' of apiinfo.version is not a string")
        return result
