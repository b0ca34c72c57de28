"""
配置模块
提供应用配置与团队配置加载
"""
from .settings import Settings, load_settings
from .loader import ConfigLoader

__all__ = [
    "Settings",
    "load_settings",
    "ConfigLoader",
]
