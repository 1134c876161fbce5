"""
核心模块包 (Core Module Package)

网关的基础组件：配置管理、异常体系、请求截止时间和依赖注入。

Foundational gateway components: configuration, exception taxonomy,
request deadlines and dependency injection.
"""
