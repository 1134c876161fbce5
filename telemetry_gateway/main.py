"""
遥测会话网关应用入口模块 (Telemetry Session Gateway Application Entry Module)

网关的主应用入口，负责 FastAPI 应用的初始化、中间件配置和路由注册。
网关在请求之间不保存任何状态，唯一的会话信息是调用方携带的上游令牌。

Main application entry point for the gateway, responsible for FastAPI application
initialization, middleware configuration and route registration. The gateway keeps
no state between requests; the only session information is the upstream token the
caller carries.

主要功能 (Main Features):
- 操作员登录并下发会话 Cookie (Operator login and session cookie issuance)
- 设备列表、单机遥测、活动触发器 (Device list, per-device telemetry, active triggers)
- 健康检查：网关状态与上游 API 版本 (Health check: gateway status and upstream API version)
"""
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from telemetry_gateway import __version__
from telemetry_gateway.core.config import settings
from telemetry_gateway.core.deps import get_zabbix_client
from telemetry_gateway.core.exceptions import UpstreamError, register_exception_handlers
from telemetry_gateway.routers import auth
from telemetry_gateway.routers import devices
from telemetry_gateway.services.zabbix_client import ZabbixClient

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    应用生命周期管理器 (Application Lifecycle Manager)

    网关没有需要初始化的连接池或后台任务，这里只记录启动和关闭。
    """
    logger.info("Telemetry gateway %s starting, upstream %s", __version__, settings.zabbix_api_url)
    yield
    logger.info("Telemetry gateway stopped")


# 创建 FastAPI 应用实例 (Create FastAPI application instance)
app = FastAPI(
    title="Telemetry Session Gateway",
    description="Zabbix inventory and health telemetry for the browser",
    version=__version__,
    lifespan=lifespan,
)

# 注册全局异常处理器 (Register global exception handlers)
register_exception_handlers(app)

# 配置 CORS 中间件，允许前端跨域访问 (Configure CORS middleware for frontend cross-origin access)
# 会话通过 Cookie 传递，因此必须允许携带凭据 (Session travels in a cookie, credentials must be allowed)
allowed_origins = ["*"] if not settings.is_production else [
    "http://localhost:3001",
    "https://localhost:3001",
    settings.frontend_url,
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=[devices.UNAVAILABLE_FIELDS_HEADER],
)

# 注册 API 路由模块 (Register API router modules)
app.include_router(auth.router)  # 操作员登录 (Operator login)
app.include_router(devices.router)  # 设备数据 (Device data)


@app.get("/health")
@app.get("/api/health")
async def health(client: ZabbixClient = Depends(get_zabbix_client)):
    """
    健康检查接口 (Health Check Endpoint)

    返回网关自身状态和上游 API 版本。上游不可达时状态为 degraded，接口本身仍返回 200。

    Returns:
        dict: 包含各组件状态和时间戳的健康检查结果 (Health check results with component status and timestamp)
    """
    checks = {"api": "ok"}
    upstream_version = None

    # 上游连通性检查 (Upstream connectivity check)
    try:
        upstream_version = await client.api_version()
        checks["upstream"] = "ok"
    except UpstreamError as e:
        logger.warning("Upstream health check failed: %s", e.message)
        checks["upstream"] = "error"

    status = "ok" if all(v == "ok" for v in checks.values()) else "degraded"

    return {
        "status": status,
        "checks": checks,
        "upstream_version": upstream_version,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
