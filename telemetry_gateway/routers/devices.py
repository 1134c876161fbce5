"""
设备数据路由模块 (Device Data Router)

功能说明：把上游的主机列表、单机遥测和活动触发器以 JSON 形式提供给浏览器
核心职责：
  - 从 Cookie 中提取会话令牌，缺失时返回 401
  - 校验 hostid 查询参数，缺失时返回 400 且不调用任何获取器
  - 以请求剩余预算作为上游超时，客户端断开时取消上游调用
  - 获取器失败时返回 500 并携带失败信息
API端点：GET /api/devices, GET /api/deviceinfo, GET /api/devices/triggers

Author: Telemetry Gateway Team
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, Response

from telemetry_gateway.core.config import settings
from telemetry_gateway.core.deadline import Deadline, cancel_on_disconnect
from telemetry_gateway.core.deps import get_deadline, get_session_token, get_zabbix_client
from telemetry_gateway.core.exceptions import MissingParameter
from telemetry_gateway.schemas.device import DeviceRecord
from telemetry_gateway.schemas.trigger import TriggerRecord
from telemetry_gateway.services.inventory import fetch_devices
from telemetry_gateway.services.telemetry import fetch_device_info
from telemetry_gateway.services.triggers import fetch_triggers
from telemetry_gateway.services.zabbix_client import ZabbixClient

router = APIRouter(prefix="/api", tags=["devices"])

UNAVAILABLE_FIELDS_HEADER = "X-Unavailable-Fields"


def _require_host_id(hostid: Optional[str]) -> str:
    if not hostid:
        raise MissingParameter("Device hostid is not specified")
    return hostid


@router.get("/devices", response_model=list[DeviceRecord])
@router.get("/devices/", response_model=list[DeviceRecord], include_in_schema=False)
async def list_devices(
    request: Request,
    token: str = Depends(get_session_token),
    client: ZabbixClient = Depends(get_zabbix_client),
    deadline: Deadline = Depends(get_deadline),
):
    """
    设备列表 (Device List)

    返回上游全部主机，包含网络接口和主机组，顺序与上游一致。
    """
    return await cancel_on_disconnect(
        request,
        fetch_devices(client, token, timeout=deadline.timeout()),
        settings.disconnect_poll_interval,
    )


@router.get("/deviceinfo", response_model=DeviceRecord)
@router.get("/deviceinfo/", response_model=DeviceRecord, include_in_schema=False)
async def device_info(
    request: Request,
    response: Response,
    hostid: Optional[str] = Query(None),
    token: str = Depends(get_session_token),
    client: ZabbixClient = Depends(get_zabbix_client),
    deadline: Deadline = Depends(get_deadline),
):
    """
    单台设备遥测 (Single Device Telemetry)

    容量字段已换算为 GB；换算失败的字段为 N/A，其数量通过 X-Unavailable-Fields 响应头返回。
    """
    host_id = _require_host_id(hostid)
    record = await cancel_on_disconnect(
        request,
        fetch_device_info(client, token, host_id, timeout=deadline.timeout()),
        settings.disconnect_poll_interval,
    )
    response.headers[UNAVAILABLE_FIELDS_HEADER] = str(len(record.unavailable_fields))
    return record


@router.get("/devices/triggers", response_model=list[TriggerRecord])
@router.get("/devices/triggers/", response_model=list[TriggerRecord], include_in_schema=False)
async def device_triggers(
    request: Request,
    hostid: Optional[str] = Query(None),
    token: str = Depends(get_session_token),
    client: ZabbixClient = Depends(get_zabbix_client),
    deadline: Deadline = Depends(get_deadline),
):
    """
    设备活动触发器 (Active Device Triggers)

    只返回当前处于问题状态的触发器；没有时返回空列表。
    """
    host_id = _require_host_id(hostid)
    return await cancel_on_disconnect(
        request,
        fetch_triggers(client, token, host_id, timeout=deadline.timeout()),
        settings.disconnect_poll_interval,
    )
