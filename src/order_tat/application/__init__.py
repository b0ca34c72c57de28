"""
应用层（Application Layer）
职责：依赖装配，对宿主系统提供稳定入口
依赖：domain, config
"""

from order_tat.application.container import ApplicationContext, build_application

__all__ = [
    "ApplicationContext",
    "build_application",
]
