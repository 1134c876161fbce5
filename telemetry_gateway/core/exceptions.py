"""
全局异常处理模块 (Global Exception Handling Module)

定义网关的异常体系和 FastAPI 全局异常处理器，提供统一的错误响应格式。
上游传输失败、非 200 状态、响应格式错误和上游业务错误分别对应独立的异常类型，
并由处理器映射为 HTTP 状态码。

Defines the gateway exception taxonomy and FastAPI global exception handlers,
providing a unified error response format. Transport failures, non-200 statuses,
malformed payloads and upstream application errors each get their own type and
are mapped to HTTP status codes by the handlers.
"""
import logging
import traceback
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import HTTPException, RequestValidationError
from fastapi.responses import JSONResponse, Response

logger = logging.getLogger(__name__)


# ============================================================
# 网关异常类 (Gateway Exception Classes)
# ============================================================

class GatewayError(Exception):
    """网关异常基类 (Base Gateway Exception)"""
    status_code: int = 500
    error: str = "gateway_error"

    def __init__(self, message: str, detail: Optional[str] = None):
        self.message = message
        self.detail = detail
        super().__init__(message)


class UpstreamError(GatewayError):
    """上游监控服务调用失败 (Upstream Call Failed)"""
    error = "upstream_error"


class UpstreamUnavailable(UpstreamError):
    """上游返回非 200 状态或超出截止时间 (Non-200 Status or Deadline Exceeded)"""
    error = "upstream_unavailable"


class TransportFailure(UpstreamUnavailable):
    """网络/连接错误 (Network or Connection Error)"""
    error = "transport_failure"


class MalformedUpstreamResponse(UpstreamError):
    """上游响应无法解码或类型不匹配 (Undecodable or Type-mismatched Payload)"""
    error = "malformed_upstream_response"


class UpstreamRejected(UpstreamError):
    """上游返回结构化业务错误，消息原样保留 (Upstream Application Error, Message Verbatim)"""
    error = "upstream_rejected"

    def __init__(self, message: str, code: Optional[int] = None, detail: Optional[str] = None):
        self.code = code
        super().__init__(message, detail)


class AuthenticationError(GatewayError):
    """认证失败基类 (Base Authentication Failure)"""
    status_code = 401
    error = "authentication_error"


class AuthenticationRejected(UpstreamRejected, AuthenticationError):
    """上游拒绝登录 (Upstream Rejected the Login)"""
    status_code = 401
    error = "authentication_rejected"


class MissingCredentials(AuthenticationError):
    """用户名或密码为空 (Empty Username or Password)"""
    status_code = 400
    error = "missing_credentials"


class SessionMissing(AuthenticationError):
    """请求未携带会话 Cookie (No Session Cookie on Request)"""
    error = "session_missing"


class MissingParameter(GatewayError):
    """缺少必需的查询参数 (Required Query Parameter Absent)"""
    status_code = 400
    error = "missing_parameter"


class ClientDisconnected(Exception):
    """入站客户端在上游调用完成前断开 (Inbound Client Went Away Mid-call)"""


class ConversionFailure(ValueError):
    """指标值转换失败，由调用方就地降级为 N/A (Metric Conversion Failed, Recovered Locally)"""


class NotNumeric(ConversionFailure):
    """输入不是有效的非负数值 (Input Is Not a Valid Non-negative Number)"""


# ============================================================
# 全局异常处理器注册 (Global Exception Handler Registration)
# ============================================================

def _error_body(status_code: int, error: str, message: str, detail: Optional[str] = None) -> dict:
    return {
        "error": error,
        "message": message,
        "detail": detail,
        "status_code": status_code,
    }


def register_exception_handlers(app: FastAPI) -> None:
    """
    注册全局异常处理器到 FastAPI 应用 (Register global exception handlers to FastAPI app)

    处理优先级：
    1. GatewayError 子类 → 对应 HTTP 状态码 + 结构化响应
    2. RequestValidationError → 400（请求体或参数无效）
    3. HTTPException → 保持原样，包装为统一格式
    4. Exception → 500 + 完整 traceback 日志
    """

    @app.exception_handler(GatewayError)
    async def gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.warning("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.status_code, exc.error, exc.message, exc.detail),
        )

    @app.exception_handler(ClientDisconnected)
    async def client_disconnected_handler(request: Request, exc: ClientDisconnected) -> Response:
        # 客户端已断开，响应不会被读取 (Nobody is listening, 499 is for the access log only)
        return Response(status_code=499)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        # 只返回字段位置和原因，不回显输入值（可能包含密码）
        reasons = "; ".join(
            f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg', '')}"
            for err in exc.errors()
        )
        return JSONResponse(
            status_code=400,
            content=_error_body(400, "invalid_request", "Invalid request", reasons or None),
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.status_code, "http_error", str(exc.detail)),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        # 记录完整 traceback 用于调试 (Log full traceback for debugging)
        logger.error(
            "Unhandled exception on %s %s: %s\n%s",
            request.method,
            request.url.path,
            str(exc),
            traceback.format_exc(),
        )
        return JSONResponse(
            status_code=500,
            content=_error_body(500, "internal_server_error", "Internal server error, please try again later"),
        )
