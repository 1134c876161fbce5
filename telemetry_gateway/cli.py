"""
遥测网关命令行入口模块。

提供 CLI 命令：run（启动 HTTP 服务）和 check（检查配置与上游连通性）。
"""
import asyncio
import logging
import sys

import click

from telemetry_gateway import __version__


@click.group(invoke_without_command=True)
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.version_option(version=__version__)
@click.pass_context
def cli(ctx, verbose):
    """Telemetry Session Gateway - Zabbix 遥测网关。"""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose

    from telemetry_gateway.core.config import settings

    level = logging.DEBUG if verbose else getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    # 未指定子命令时，显示基本信息
    if ctx.invoked_subcommand is None:
        click.echo(f"Telemetry Gateway v{__version__}")
        click.echo(f"Upstream: {settings.zabbix_api_url}")
        click.echo("Use --help for available commands")


@cli.command()
@click.option("--host", default="0.0.0.0", help="Bind address")
@click.option("--port", default=8080, type=int, help="Bind port")
@click.pass_context
def run(ctx, host, port):
    """以前台模式运行网关。"""
    import uvicorn

    logger = logging.getLogger("telemetry-gateway")
    logger.info(f"Starting Telemetry Gateway v{__version__} on {host}:{port}")
    uvicorn.run(
        "telemetry_gateway.main:app",
        host=host,
        port=port,
        log_level="debug" if ctx.obj["verbose"] else "info",
    )


@cli.command()
def check():
    """检查配置并验证上游是否可达。"""
    from telemetry_gateway.core.config import settings
    from telemetry_gateway.core.exceptions import UpstreamError
    from telemetry_gateway.services.zabbix_client import ZabbixClient

    click.echo(f"Upstream: {settings.zabbix_api_url}")
    click.echo(f"   Basic auth user: {settings.zabbix_basic_user or '(none)'}")
    click.echo(f"   Basic auth password: {'***' if settings.zabbix_basic_password else '(none)'}")
    click.echo(f"   Login field: {settings.zabbix_login_field}")
    click.echo(f"   Upstream timeout: {settings.upstream_timeout}s")
    click.echo(f"   Request budget: {settings.request_budget_seconds}s")
    click.echo(f"   Session cookie: {settings.session_cookie_name}")

    client = ZabbixClient.from_settings(settings)
    try:
        version = asyncio.run(client.api_version())
    except UpstreamError as e:
        click.echo(f"❌ Upstream error: {e.message}", err=True)
        sys.exit(1)
    click.echo(f"✅ Upstream OK: API version {version}")


def main():
    """CLI 入口函数。"""
    cli()


if __name__ == "__main__":
    main()
