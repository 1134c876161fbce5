"""Device inventory - full host list with interfaces and groups."""
import logging
from typing import Optional

from pydantic import TypeAdapter, ValidationError

from telemetry_gateway.core.exceptions import MalformedUpstreamResponse
from telemetry_gateway.schemas.device import DeviceRecord
from telemetry_gateway.services.zabbix_client import ZabbixClient

logger = logging.getLogger(__name__)

HOST_OUTPUT = ["hostid", "host", "name", "systeminfo", "inventory"]
INTERFACE_OUTPUT = ["interfaceid", "ip"]
GROUP_OUTPUT = ["groupid", "name"]
ITEM_OUTPUT = ["itemid", "name", "key_", "lastvalue"]

_devices_adapter = TypeAdapter(list[DeviceRecord])


async def fetch_devices(client: ZabbixClient, token: str, timeout: Optional[float] = None) -> list[DeviceRecord]:
    """Return every managed host in upstream order (no sorting, no de-duplication)."""
    params = {
        "output": HOST_OUTPUT,
        "selectInterfaces": INTERFACE_OUTPUT,
        "selectGroups": GROUP_OUTPUT,
        "selectItems": ITEM_OUTPUT,
    }
    result = await client.call("host.get", params, auth=token, timeout=timeout)
    try:
        devices = _devices_adapter.validate_python(result)
    except ValidationError as e:
        raise MalformedUpstreamResponse(f"Unexpected host.get result: {e.error_count()} invalid field(s)") from e

    logger.info("Fetched %d devices", len(devices))
    return devices
