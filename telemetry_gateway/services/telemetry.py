"""
设备遥测服务 (Device Telemetry Service)

功能描述 (Description):
    对单个主机发起一次 item.get 调用，获取固定白名单内的监控项，
    并按白名单把扁平的 key/value 列表折叠成一条设备记录。

折叠规则 (Folding Rules):
    - METRIC_FIELDS 是唯一权威：请求过滤条件和折叠逻辑都由它推导
    - 未识别的 key 直接忽略
    - 容量类字段经过 bytes_to_gib 换算；换算失败时该字段置为 N/A，整体仍然成功
    - 缺失的 key 保持空字符串
"""
import logging
from typing import NamedTuple, Optional

from pydantic import TypeAdapter, ValidationError

from telemetry_gateway.core.exceptions import ConversionFailure, MalformedUpstreamResponse
from telemetry_gateway.schemas.device import DeviceRecord, UpstreamItem
from telemetry_gateway.services.units import SIZE_SUFFIX, UNAVAILABLE, bytes_to_gib
from telemetry_gateway.services.zabbix_client import ZabbixClient

logger = logging.getLogger(__name__)


class MetricField(NamedTuple):
    key: str  # 上游监控项 key (Upstream item key)
    field: str  # DeviceRecord 属性名 (DeviceRecord attribute)
    needs_conversion: bool  # 是否为字节数，需要换算 (Byte count needing conversion)


# 监控项白名单 (Metric Allow-list)
METRIC_FIELDS: tuple[MetricField, ...] = (
    MetricField("system.hostname", "host_name", False),
    MetricField("agent.hostname", "host", False),
    MetricField("hostid", "hostid", False),
    MetricField("system.uname", "system_information", False),
    MetricField("vm.memory.size[available]", "available_memory", True),
    MetricField("vm.memory.size[total]", "total_memory", True),
    MetricField("system.cpu.util[,idle]", "cpu_idle_time", False),
    MetricField("vfs.fs.size[/,free]", "free_disk_space", True),
    MetricField("vfs.fs.size[/,used]", "used_disk_space", True),
    MetricField("vfs.fs.size[/,total]", "total_disk_space", True),
    MetricField("system.swap.size[,total]", "total_swap_space", True),
)

METRIC_KEYS = [m.key for m in METRIC_FIELDS]
_fields_by_key = {m.key: m for m in METRIC_FIELDS}

_items_adapter = TypeAdapter(list[UpstreamItem])


def fold_items(items: list[UpstreamItem]) -> DeviceRecord:
    """
    把监控项列表折叠为设备记录 (Fold an item list into a device record)

    同一 key 出现多次时以最后一次为准。换算失败的字段记录在
    DeviceRecord.unavailable_fields 中。
    """
    record = DeviceRecord()
    for item in items:
        metric = _fields_by_key.get(item.key_)
        if metric is None:
            continue
        value = item.lastvalue
        if metric.needs_conversion:
            try:
                value = bytes_to_gib(value) + SIZE_SUFFIX
            except ConversionFailure as e:
                logger.warning("Cannot convert %s: %s", metric.key, e)
                value = UNAVAILABLE
                record.unavailable_fields.append(metric.field)
        setattr(record, metric.field, value)
    return record


async def fetch_device_info(
    client: ZabbixClient,
    token: str,
    host_id: str,
    timeout: Optional[float] = None,
) -> DeviceRecord:
    """
    获取单台设备的遥测记录 (Fetch the telemetry record of one device)

    每次调用只发起一次上游请求。空结果或部分结果不是错误。

    Raises:
        UpstreamUnavailable / MalformedUpstreamResponse / UpstreamRejected: 同 ZabbixClient.call
    """
    params = {
        "output": ["key_", "name", "lastvalue"],
        "hostids": host_id,
        "filter": {"key_": METRIC_KEYS},
        "sortfield": "key_",
    }
    result = await client.call("item.get", params, auth=token, timeout=timeout)
    try:
        items = _items_adapter.validate_python(result)
    except ValidationError as e:
        raise MalformedUpstreamResponse(f"Unexpected item.get result: {e.error_count()} invalid field(s)") from e

    record = fold_items(items)
    logger.info(
        "Device %s telemetry: %d items, %d unavailable",
        host_id, len(items), len(record.unavailable_fields),
    )
    return record
