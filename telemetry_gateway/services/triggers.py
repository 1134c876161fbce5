"""Active trigger lookup for one host."""
import logging
from typing import Optional

from pydantic import TypeAdapter, ValidationError

from telemetry_gateway.core.exceptions import MalformedUpstreamResponse
from telemetry_gateway.schemas.trigger import TriggerRecord
from telemetry_gateway.services.zabbix_client import ZabbixClient

logger = logging.getLogger(__name__)

TRIGGER_OUTPUT = ["triggerid", "description", "priority", "status", "lastchange"]
PROBLEM_VALUE = 1  # trigger.value: 0 = OK, 1 = problem

_triggers_adapter = TypeAdapter(list[TriggerRecord])


async def fetch_triggers(
    client: ZabbixClient,
    token: str,
    host_id: str,
    timeout: Optional[float] = None,
) -> list[TriggerRecord]:
    """
    Return the triggers currently in problem state for ``host_id``.

    Filtering happens in the upstream query; the result is returned as-is,
    in upstream order. No active triggers yields an empty list.
    """
    params = {
        "output": TRIGGER_OUTPUT,
        "hostids": host_id,
        "filter": {"value": PROBLEM_VALUE},
    }
    result = await client.call("trigger.get", params, auth=token, timeout=timeout)
    try:
        triggers = _triggers_adapter.validate_python(result)
    except ValidationError as e:
        raise MalformedUpstreamResponse(f"Unexpected trigger.get result: {e.error_count()} invalid field(s)") from e

    logger.info("Active triggers for host %s: %d", host_id, len(triggers))
    return triggers
