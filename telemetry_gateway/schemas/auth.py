"""
认证相关请求模型
"""
from pydantic import BaseModel, SecretStr


class OperatorLogin(BaseModel):
    """操作员登录请求体，密码以 SecretStr 保存，避免出现在 repr 和日志中。"""
    username: str
    password: SecretStr
