"""
触发器响应模型
"""
from pydantic import BaseModel


class TriggerRecord(BaseModel):
    """处于问题状态的触发器。字段按上游原样保留为字符串。"""
    triggerid: str = ""
    description: str = ""
    priority: str = ""
    status: str = ""
    lastchange: str = ""

    model_config = {"coerce_numbers_to_str": True}
