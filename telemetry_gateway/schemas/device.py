"""
设备相关请求/响应模型

定义设备记录及其网络接口、主机组的数据结构。字段别名与浏览器端使用的 JSON 名称一致。
"""
from pydantic import BaseModel, Field, PrivateAttr


class DeviceInterface(BaseModel):
    """设备网络接口。"""
    interfaceid: str = ""
    ip: str = ""

    model_config = {"coerce_numbers_to_str": True}


class DeviceGroup(BaseModel):
    """设备所属主机组。"""
    groupid: str = ""
    name: str = ""

    model_config = {"coerce_numbers_to_str": True}


class DeviceRecord(BaseModel):
    """
    设备记录 (Device Record)

    容量类字段在离开遥测获取器时只能是 "x.xxGB"、"N/A" 或空字符串，不会是原始字节数。
    """
    hostid: str = ""
    host: str = ""
    name: str = ""
    interfaces: list[DeviceInterface] = Field(default_factory=list)
    groups: list[DeviceGroup] = Field(default_factory=list)
    host_name: str = Field("", alias="hostName")
    system_information: str = Field("", alias="systemInformation")
    total_memory: str = Field("", alias="totalMemory")
    available_memory: str = Field("", alias="availableMemory")
    cpu_idle_time: str = Field("", alias="cpuIdleTime")
    total_swap_space: str = Field("", alias="totalSwapSpace")
    used_disk_space: str = Field("", alias="usedDiskSpace")
    total_disk_space: str = Field("", alias="totalDiskSpace")
    free_disk_space: str = Field("", alias="freeDiskSpace")

    # 换算失败被降级为 N/A 的字段，仅用于诊断，不参与序列化
    _unavailable_fields: list[str] = PrivateAttr(default_factory=list)

    @property
    def unavailable_fields(self) -> list[str]:
        return self._unavailable_fields

    model_config = {"populate_by_name": True, "coerce_numbers_to_str": True}


class UpstreamItem(BaseModel):
    """item.get 返回的单个监控项。"""
    itemid: str = ""
    name: str = ""
    key_: str = ""
    lastvalue: str = ""

    model_config = {"coerce_numbers_to_str": True}
