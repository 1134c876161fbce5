"""
会话认证服务 (Session Authentication Service)

用操作员的用户名和密码向上游换取会话令牌。这是网关中唯一接触明文凭据的组件：
密码只进入 user.login 请求体，不进入任何日志或异常消息。

Exchanges an operator's username and password for an upstream session token.
This is the only component that handles raw credentials: the password goes into
the user.login request body and nowhere else, not into logs and not into errors.
"""
import logging
from typing import Optional

from telemetry_gateway.core.exceptions import (
    AuthenticationRejected,
    MalformedUpstreamResponse,
    MissingCredentials,
    UpstreamRejected,
)
from telemetry_gateway.services.zabbix_client import ZabbixClient, mask_token

logger = logging.getLogger(__name__)


async def authenticate(
    client: ZabbixClient,
    username: str,
    password: str,
    login_field: str = "user",
    timeout: Optional[float] = None,
) -> str:
    """
    操作员登录 (Operator Login)

    Args:
        client: 上游 JSON-RPC 客户端
        username: 操作员用户名
        password: 操作员密码
        login_field: user.login 的用户名参数名（旧版为 user，Zabbix 6.4+ 为 username）
        timeout: 本次调用超时（秒）

    Returns:
        str: 上游签发的会话令牌

    Raises:
        MissingCredentials: 用户名或密码为空
        UpstreamUnavailable: 网络失败或上游状态非 200
        MalformedUpstreamResponse: result 缺失或不是字符串
        AuthenticationRejected: 上游返回错误对象
    """
    if not username or not password:
        raise MissingCredentials("Username and password are required")

    params = {login_field: username, "password": password}
    try:
        result = await client.call("user.login", params, timeout=timeout)
    except UpstreamRejected as e:
        logger.info("Login rejected for user %s: %s", username, e.message)
        raise AuthenticationRejected(e.message, code=e.code, detail=e.detail) from None

    if not isinstance(result, str) or not result:
        logger.warning("Login for user %s returned a non-string result", username)
        raise MalformedUpstreamResponse("Field 'result' of user.login is not a string")

    logger.info("User %s authenticated (token %s)", username, mask_token(result))
    return result
