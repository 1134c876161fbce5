"""
请求截止时间与断开检测 (Request Deadline and Disconnect Guard)

每个入站请求在到达时获得一个时间预算，所有上游调用的超时都从剩余预算中推导。
上游调用以任务方式运行，入站客户端断开时任务被取消，避免遗留无主的上游请求。

Every inbound request gets a time budget on arrival; each upstream call derives
its timeout from what is left. The upstream call runs as a task that is cancelled
when the inbound client disconnects, so aborted browser requests leave no orphaned
upstream work behind.
"""
import asyncio
import logging
import time
from typing import Awaitable, Optional, TypeVar

from fastapi import Request

from telemetry_gateway.core.exceptions import ClientDisconnected, UpstreamUnavailable

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Deadline:
    """Wall-clock budget for one inbound request, measured on the monotonic clock."""

    def __init__(self, budget: float, cap: Optional[float] = None, clock=time.monotonic):
        self._clock = clock
        self._expires_at = clock() + budget
        self._cap = cap

    def remaining(self) -> float:
        return max(self._expires_at - self._clock(), 0.0)

    def timeout(self) -> float:
        """
        下一次上游调用可用的超时 (Timeout for the next upstream call)

        取剩余预算与单次调用上限的较小值；预算耗尽时直接失败，不发起调用。
        """
        left = self.remaining()
        if left <= 0:
            raise UpstreamUnavailable("Upstream deadline exceeded before the call was made")
        if self._cap is not None:
            return min(left, self._cap)
        return left


async def cancel_on_disconnect(request: Request, awaitable: Awaitable[T], poll_interval: float) -> T:
    """
    运行上游调用，客户端断开时取消 (Run an upstream call, cancelling it if the client disconnects)

    Raises:
        ClientDisconnected: 客户端在调用完成前断开
    """
    task = asyncio.ensure_future(awaitable)
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=poll_interval)
            if done:
                return task.result()
            if await request.is_disconnected():
                logger.info("Client disconnected from %s, cancelling upstream call", request.url.path)
                task.cancel()
                raise ClientDisconnected(request.url.path)
    finally:
        if not task.done():
            task.cancel()
