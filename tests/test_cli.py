"""命令行入口测试。"""
from unittest.mock import AsyncMock, patch

from click.testing import CliRunner

from telemetry_gateway import __version__
from telemetry_gateway.cli import cli
from telemetry_gateway.core.exceptions import TransportFailure


class TestCli:
    def test_version(self):
        result = CliRunner().invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_no_subcommand_shows_info(self):
        result = CliRunner().invoke(cli, [])
        assert result.exit_code == 0
        assert "Telemetry Gateway" in result.output

    def test_check_ok(self):
        with patch("telemetry_gateway.services.zabbix_client.ZabbixClient.api_version", new=AsyncMock(return_value="6.0.25")):
            result = CliRunner().invoke(cli, ["check"])
        assert result.exit_code == 0
        assert "6.0.25" in result.output
        assert "svc-secret" not in result.output

    def test_check_upstream_down(self):
        failure = AsyncMock(side_effect=TransportFailure("Upstream request failed: ConnectError"))
        with patch("telemetry_gateway.services.zabbix_client.ZabbixClient.api_version", new=failure):
            result = CliRunner().invoke(cli, ["check"])
        assert result.exit_code == 1

    def test_run_starts_uvicorn(self):
        with patch("uvicorn.run") as mock_run:
            result = CliRunner().invoke(cli, ["run", "--port", "9090"])
        assert result.exit_code == 0
        mock_run.assert_called_once()
        assert mock_run.call_args.args[0] == "telemetry_gateway.main:app"
        assert mock_run.call_args.kwargs["port"] == 9090
