"""
FastAPI 依赖项模块 (FastAPI Dependencies Module)

提供网关的通用依赖注入函数：上游客户端、会话令牌提取和请求截止时间。
会话令牌只从 Cookie 中读取并原样转发，网关本身不做任何校验。

Provides the gateway's common dependency injection functions: the upstream client,
session token extraction and the per-request deadline. The session token is read
from the cookie and forwarded verbatim; the gateway never validates it itself.
"""
from fastapi import Request

from telemetry_gateway.core.config import settings
from telemetry_gateway.core.deadline import Deadline
from telemetry_gateway.core.exceptions import SessionMissing
from telemetry_gateway.services.zabbix_client import ZabbixClient


def get_zabbix_client() -> ZabbixClient:
    """由全局配置构造上游客户端 (Build the upstream client from global settings)"""
    return ZabbixClient.from_settings(settings)


def get_session_token(request: Request) -> str:
    """
    从 Cookie 中提取会话令牌 (Extract the session token from the cookie)

    Raises:
        SessionMissing: 请求未携带会话 Cookie 或值为空
    """
    token = request.cookies.get(settings.session_cookie_name)
    if not token:
        raise SessionMissing("Authentication token not found")
    return token


def get_deadline() -> Deadline:
    """请求到达时开始计时的截止时间 (Deadline starting at request arrival)"""
    return Deadline(settings.request_budget_seconds, cap=settings.upstream_timeout)
