"""
设置管理器 - 读写和合并运行时设置
Settings manager - reads, writes, and merges runtime settings.

使用 JSON 文件存储，支持默认值合并和嵌套键访问。
Uses JSON file storage with default value merging and nested key access.
"""

from __future__ import annotations

import copy
import json
import logging
import os
from typing import Any

from ModuleKit.config.defaults import build_default_settings

logger = logging.getLogger(__name__)

SETTINGS_FILE = os.path.join("data", "config", "modulekit.json")

# 环境变量覆盖
LOG_LEVEL_ENV = "MODULEKIT_LOG_LEVEL"


class SettingsManager:
    """
    设置管理器 - 宿主的运行时设置中心
    Settings manager - the runtime settings center of a host.

    支持：
    - 嵌套键访问（如 "render.delay"）
    - 默认值自动合并
    - 持久化到 JSON 文件
    """

    def __init__(
        self,
        defaults: dict[str, Any] | None = None,
        settings_path: str = SETTINGS_FILE,
    ) -> None:
        self._defaults = defaults if defaults is not None else build_default_settings()
        self._settings: dict[str, Any] = copy.deepcopy(self._defaults)
        self._settings_path = settings_path
        self._apply_env()

    @property
    def path(self) -> str:
        return self._settings_path

    async def load(self) -> None:
        """
        加载设置文件
        Load the settings file.
        """
        if os.path.exists(self._settings_path):
            try:
                with open(self._settings_path, encoding="utf-8") as f:
                    self._settings = json.load(f)
                logger.info("设置已从 %s 加载", self._settings_path)
            except (json.JSONDecodeError, OSError):
                logger.warning("加载设置失败，使用默认值", exc_info=True)
                self._settings = {}
        else:
            self._settings = {}
            logger.info("未找到设置文件 %s，使用默认值", self._settings_path)

        # 合并默认值
        self._merge_defaults(self._settings, copy.deepcopy(self._defaults))
        self._apply_env()

    async def save(self) -> None:
        """
        保存设置到文件
        Save settings to file.
        """
        os.makedirs(os.path.dirname(self._settings_path) or ".", exist_ok=True)
        try:
            with open(self._settings_path, "w", encoding="utf-8") as f:
                json.dump(self._settings, f, ensure_ascii=False, indent=2)
        except OSError:
            logger.exception("保存设置失败")

    def get(self, key: str, default: Any = None) -> Any:
        """
        获取设置值（支持嵌套键，如 "render.delay"）
        Get a setting (supports nested keys like "render.delay").
        """
        current: Any = self._settings
        for k in key.split("."):
            if isinstance(current, dict):
                current = current.get(k)
            else:
                return default
            if current is None:
                return default
        return current

    def set(self, key: str, value: Any) -> None:
        """
        设置值（支持嵌套键）
        Set a value (supports nested keys).
        """
        keys = key.split(".")
        current = self._settings
        for k in keys[:-1]:
            if k not in current or not isinstance(current[k], dict):
                current[k] = {}
            current = current[k]
        current[keys[-1]] = value

    def as_dict(self) -> dict[str, Any]:
        """获取完整设置字典 / Get the full settings dictionary."""
        return copy.deepcopy(self._settings)

    def _apply_env(self) -> None:
        level = os.environ.get(LOG_LEVEL_ENV)
        if level:
            self.set("log.level", level.upper())

    def _merge_defaults(self, settings: dict[str, Any], defaults: dict[str, Any]) -> None:
        """
        递归合并默认值到设置中（不覆盖已有值）
        Recursively merge defaults into settings (does not overwrite existing).
        """
        for key, default_value in defaults.items():
            if key not in settings:
                settings[key] = default_value
            elif isinstance(default_value, dict) and isinstance(settings[key], dict):
                self._merge_defaults(settings[key], default_value)
