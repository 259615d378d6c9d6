"""
配置模块 - 宿主配置与运行时设置
Config module - host configuration and runtime settings.
"""

from ModuleKit.config.defaults import build_default_config, build_default_settings
from ModuleKit.config.manager import SettingsManager
from ModuleKit.config.schema import HostConfig

__all__ = [
    "HostConfig",
    "SettingsManager",
    "build_default_config",
    "build_default_settings",
]
