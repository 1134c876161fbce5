"""
服务模块包 (Service Module Package)

上游 JSON-RPC 客户端、单位换算以及基于它们的四个获取器：
会话认证、设备列表、设备遥测、活动触发器。
"""
