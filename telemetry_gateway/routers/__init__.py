"""
网关路由模块包 (Gateway Router Module Package)

- auth.py: 操作员登录（换取上游会话令牌并下发 Cookie）
- devices.py: 设备列表、单机遥测、活动触发器

所有路由模块在 main.py 中通过 app.include_router() 统一注册。
"""
