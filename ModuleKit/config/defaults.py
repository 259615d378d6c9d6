"""
默认配置 - 宿主配置与运行时设置的默认值
Default configuration - default values of host config and runtime settings.
"""

from __future__ import annotations

from typing import Any

# 未指定挂载目标时使用的默认 holder
DEFAULT_HOLDER = "modulekit"


def build_default_config() -> dict[str, Any]:
    """
    构建宿主配置的默认值（在校验前合并）
    Build host configuration defaults (merged before validation).
    """
    return {
        "data": {"blocks": []},
        "autofocus": False,
    }


def build_default_settings() -> dict[str, Any]:
    """
    构建运行时设置的默认值
    Build the runtime settings defaults.
    """
    return {
        # 日志配置
        "log": {
            "level": "INFO",
            "file": "",
        },
        # 渲染配置
        "render": {
            # 副作用完成后的额外等待（秒）
            "delay": 0.0,
        },
        # 模块来源
        "modules": {
            "package": "ModuleKit.modules.builtin",
        },
    }
