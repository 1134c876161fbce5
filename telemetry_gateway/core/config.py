"""
应用配置模块 (Application Configuration Module)

使用 Pydantic Settings 管理网关的所有配置项，支持从 .env 文件和环境变量读取。
包括上游 Zabbix API 地址、服务级 Basic Auth 凭据、超时预算和会话 Cookie 设置。

Uses Pydantic Settings to manage all gateway configuration items, read from
.env files and environment variables. Covers the upstream Zabbix API endpoint,
the service-level basic-auth credential, timeout budgets and session cookie settings.
"""
import logging

from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """
    网关全局配置类 (Gateway Global Configuration Class)

    字段名自动映射同名环境变量（不区分大小写），支持 .env 文件加载。
    进程启动时加载一次，之后视为只读。

    Field names map to same-named environment variables (case insensitive),
    with .env file support. Loaded once at process start and treated as read-only.
    """

    # 上游 Zabbix 配置 (Upstream Zabbix Configuration)
    zabbix_api_url: str = "http://localhost/zabbix/api_jsonrpc.php"  # JSON-RPC 端点 (JSON-RPC Endpoint)
    zabbix_basic_user: str = ""  # 服务级 Basic Auth 用户 (Service-level Basic Auth User)
    zabbix_basic_password: str = ""  # 服务级 Basic Auth 密码 (Service-level Basic Auth Password)
    zabbix_login_field: str = "user"  # user.login 用户名参数名，Zabbix 6.4+ 为 "username" (Login param name)

    # 超时与预算配置 (Timeout and Budget Configuration)
    upstream_timeout: float = 10.0  # 单次上游调用超时（秒） (Per-call Upstream Timeout Seconds)
    request_budget_seconds: float = 30.0  # 单个入站请求的总预算（秒） (Inbound Request Budget Seconds)
    disconnect_poll_interval: float = 0.25  # 客户端断开检测间隔（秒） (Client Disconnect Poll Interval)

    # 会话 Cookie 配置 (Session Cookie Configuration)
    session_cookie_name: str = "zabbix_auth_token"  # 会话 Cookie 名称 (Session Cookie Name)
    session_cookie_secure: bool = False  # 仅 HTTPS 传输 (Secure Flag)
    landing_page: str = "/main.html"  # 登录成功后的跳转页 (Post-login Redirect Target)

    # 运行环境配置 (Runtime Configuration)
    environment: str = "development"  # 运行环境：development/production (Runtime Environment)
    frontend_url: str = "http://localhost:3001"  # 前端 URL (Frontend URL)
    log_level: str = "INFO"  # 日志级别 (Log Level)

    @property
    def basic_auth(self) -> tuple[str, str] | None:
        """
        服务级 Basic Auth 凭据 (Service-level Basic Auth Credential)

        未配置用户名时返回 None，此时上游请求不携带 Authorization 头。
        Returns None when no user is configured; upstream requests then carry no Authorization header.
        """
        if not self.zabbix_basic_user:
            return None
        return (self.zabbix_basic_user, self.zabbix_basic_password)

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}  # Pydantic 配置：自动加载 .env 文件 (Auto-load .env file)


# 全局配置实例 (Global Configuration Instance)
settings = Settings()

if settings.basic_auth is None:
    logger.warning(
        "ZABBIX_BASIC_USER 未设置，上游请求将不携带 Basic Auth。"
        " | ZABBIX_BASIC_USER not set, upstream requests are sent without basic auth."
    )
