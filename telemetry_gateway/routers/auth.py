"""
操作员登录路由模块 (Operator Login Router)

功能说明：用操作员凭据向上游换取会话令牌，并以站点级 Cookie 下发给浏览器
核心职责：
  - 校验登录请求体（用户名、密码均不能为空）
  - 调用会话认证服务
  - 设置会话 Cookie 并重定向到首页
API端点：POST /login

Author: Telemetry Gateway Team
"""
from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import RedirectResponse

from telemetry_gateway.core.config import settings
from telemetry_gateway.core.deadline import Deadline, cancel_on_disconnect
from telemetry_gateway.core.deps import get_deadline, get_zabbix_client
from telemetry_gateway.schemas.auth import OperatorLogin
from telemetry_gateway.services.session import authenticate
from telemetry_gateway.services.zabbix_client import ZabbixClient

router = APIRouter(tags=["auth"])


@router.post("/login", status_code=status.HTTP_303_SEE_OTHER)
async def login(
    data: OperatorLogin,
    request: Request,
    client: ZabbixClient = Depends(get_zabbix_client),
    deadline: Deadline = Depends(get_deadline),
):
    """
    操作员登录接口 (Operator Login)

    Args:
        data: 登录数据（用户名、密码）
        request: HTTP请求对象（用于断开检测）
        client: 上游客户端依赖注入
        deadline: 请求截止时间依赖注入
    Returns:
        RedirectResponse: 303 跳转到首页，并携带会话 Cookie
    Raises:
        MissingCredentials 400: 用户名或密码为空
        AuthenticationRejected 401: 上游拒绝登录
        UpstreamError 500: 上游不可用或响应格式错误
    """
    token = await cancel_on_disconnect(
        request,
        authenticate(
            client,
            data.username,
            data.password.get_secret_value(),
            login_field=settings.zabbix_login_field,
            timeout=deadline.timeout(),
        ),
        settings.disconnect_poll_interval,
    )

    response = RedirectResponse(url=settings.landing_page, status_code=status.HTTP_303_SEE_OTHER)
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.session_cookie_secure,
    )
    return response
