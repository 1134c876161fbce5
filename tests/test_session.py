"""会话认证测试 — 登录成功、上游拒绝、格式错误、凭据不外泄。"""
import logging

import pytest

from telemetry_gateway.core.exceptions import (
    AuthenticationError,
    AuthenticationRejected,
    GatewayError,
    MalformedUpstreamResponse,
    MissingCredentials,
    TransportFailure,
    UpstreamRejected,
    UpstreamUnavailable,
)
from telemetry_gateway.services.session import authenticate
from tests.conftest import SESSION_TOKEN

PASSWORD = "hunter2-Secret"


class TestAuthenticate:
    async def test_returns_token(self, zabbix_client, fake_zabbix):
        fake_zabbix.reply("user.login", SESSION_TOKEN)
        token = await authenticate(zabbix_client, "Admin", PASSWORD)
        assert token == SESSION_TOKEN

    async def test_single_login_call(self, zabbix_client, fake_zabbix):
        fake_zabbix.reply("user.login", SESSION_TOKEN)
        await authenticate(zabbix_client, "Admin", PASSWORD)

        assert len(fake_zabbix.payloads) == 1
        payload = fake_zabbix.payloads[0]
        assert payload["method"] == "user.login"
        assert payload["params"] == {"user": "Admin", "password": PASSWORD}
        assert "auth" not in payload

    async def test_username_login_field(self, zabbix_client, fake_zabbix):
        """Zabbix 6.4+ 使用 username 参数。"""
        fake_zabbix.reply("user.login", SESSION_TOKEN)
        await authenticate(zabbix_client, "Admin", PASSWORD, login_field="username")
        assert fake_zabbix.payloads[0]["params"] == {"username": "Admin", "password": PASSWORD}

    @pytest.mark.parametrize("username,password", [("", PASSWORD), ("Admin", ""), ("", "")])
    async def test_empty_credentials(self, zabbix_client, fake_zabbix, username, password):
        with pytest.raises(MissingCredentials):
            await authenticate(zabbix_client, username, password)
        assert fake_zabbix.requests == []

    async def test_non_string_result(self, zabbix_client, fake_zabbix):
        fake_zabbix.reply("user.login", 12345)
        with pytest.raises(MalformedUpstreamResponse):
            await authenticate(zabbix_client, "Admin", PASSWORD)

    async def test_missing_result(self, zabbix_client, fake_zabbix):
        fake_zabbix.reply_raw("user.login", 200, b'{"jsonrpc": "2.0", "id": 1}')
        with pytest.raises(MalformedUpstreamResponse):
            await authenticate(zabbix_client, "Admin", PASSWORD)

    async def test_rejected(self, zabbix_client, fake_zabbix):
        fake_zabbix.reply("user.login", error={
            "code": -32500, "message": "Application error.",
            "data": "Incorrect user name or password or account is temporarily blocked.",
        })
        with pytest.raises(AuthenticationRejected) as exc_info:
            await authenticate(zabbix_client, "Admin", PASSWORD)

        exc = exc_info.value
        assert exc.message == "Application error."
        assert isinstance(exc, UpstreamRejected)
        assert isinstance(exc, AuthenticationError)
        assert exc.status_code == 401

    async def test_transport_failure(self, zabbix_client, fake_zabbix):
        fake_zabbix.fail("user.login")
        with pytest.raises(UpstreamUnavailable) as exc_info:
            await authenticate(zabbix_client, "Admin", PASSWORD)
        assert isinstance(exc_info.value, TransportFailure)

    async def test_non_200(self, zabbix_client, fake_zabbix):
        fake_zabbix.reply_raw("user.login", 500, b"Internal Server Error")
        with pytest.raises(UpstreamUnavailable):
            await authenticate(zabbix_client, "Admin", PASSWORD)


class TestPasswordNotLeaked:
    async def test_password_absent_from_errors_and_logs(self, zabbix_client, fake_zabbix, caplog):
        caplog.set_level(logging.DEBUG)
        failures = [
            lambda: fake_zabbix.reply("user.login", error={"code": -32500, "message": "Login name or password is incorrect."}),
            lambda: fake_zabbix.reply("user.login", {"token": "x"}),
            lambda: fake_zabbix.reply_raw("user.login", 503, b"busy"),
            lambda: fake_zabbix.fail("user.login"),
        ]
        for arrange in failures:
            arrange()
            with pytest.raises(GatewayError) as exc_info:
                await authenticate(zabbix_client, "Admin", PASSWORD)
            exc = exc_info.value
            assert PASSWORD not in str(exc)
            assert PASSWORD not in repr(exc)
            assert PASSWORD not in (exc.detail or "")

        assert PASSWORD not in caplog.text
