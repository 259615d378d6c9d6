"""
宿主配置 - 用户传入的只读配置结构
Host configuration - the read-only structure supplied by the user.

配置一经规范化即冻结：所有模块共享同一个引用，但谁都不能修改它。
Once normalised the config is frozen: every module shares one reference and
none can change it.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any

from ModuleKit.config.defaults import DEFAULT_HOLDER, build_default_config

logger = logging.getLogger(__name__)

# 接受的键名别名 -> 规范字段名
_ALIASES = {
    "holder": "holder",
    "mount": "holder",
    "holder_id": "holder_id",
    "holderId": "holder_id",
    "mount_id": "holder_id",
    "mountId": "holder_id",
    "data": "data",
    "autofocus": "autofocus",
    "on_ready": "on_ready",
    "onReady": "on_ready",
}


def _freeze(value: Any) -> Any:
    """递归冻结 dict/list / Recursively freeze dicts and lists."""
    if isinstance(value, Mapping):
        return MappingProxyType({k: _freeze(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(v) for v in value)
    return value


@dataclass(frozen=True)
class HostConfig:
    """
    宿主配置
    Host configuration.

    holder 与 holder_id 是挂载目标的两种互斥形式。
    holder and holder_id are the two mutually exclusive mount target forms.
    """

    holder: Any = None
    holder_id: str | None = None
    data: Mapping[str, Any] = field(default_factory=lambda: _freeze({"blocks": []}))
    autofocus: bool = False
    on_ready: Callable[[], Any] | None = None
    extras: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    def __post_init__(self) -> None:
        # frozen dataclass 只能通过 object.__setattr__ 规范化
        data = self.data if self.data is not None else {}
        if "blocks" not in data:
            data = {**data, "blocks": []}
        object.__setattr__(self, "data", _freeze(data))
        object.__setattr__(self, "extras", _freeze(self.extras or {}))
        object.__setattr__(self, "autofocus", bool(self.autofocus))

    @property
    def blocks(self) -> tuple[Any, ...]:
        """初始内容负载 / The initial content payload."""
        return self.data["blocks"]

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> HostConfig:
        """
        从字典构建，合并默认值并保留未知键
        Build from a mapping, merging defaults and keeping unknown keys.
        """
        known: dict[str, Any] = {}
        extras: dict[str, Any] = {}
        for key, value in values.items():
            canonical = _ALIASES.get(key)
            if canonical is None:
                extras[key] = value
            elif canonical in known and known[canonical] != value:
                # 同一字段的两个别名给出不同值：保留先出现的值
                logger.warning(
                    "配置键 %r 与已设置的 %r 冲突，已忽略 (保留 %r)",
                    key,
                    canonical,
                    known[canonical],
                )
                extras[key] = value
            else:
                known[canonical] = value

        for key, default_value in build_default_config().items():
            known.setdefault(key, default_value)

        if known.get("holder") is None and known.get("holder_id") is None:
            known["holder"] = DEFAULT_HOLDER

        return cls(extras=extras, **known)

    @classmethod
    def coerce(cls, configuration: HostConfig | Mapping[str, Any] | str | None) -> HostConfig:
        """
        将任意受支持的输入规范化为 HostConfig
        Normalise any supported input into a HostConfig.

        字符串是“只指定挂载目标”的简写。
        A bare string is shorthand for a config naming only the mount target.
        """
        if isinstance(configuration, HostConfig):
            if configuration.holder is None and configuration.holder_id is None:
                return replace(configuration, holder=DEFAULT_HOLDER)
            return configuration
        if configuration is None:
            return cls.from_mapping({})
        if isinstance(configuration, str):
            return cls.from_mapping({"holder": configuration})
        if isinstance(configuration, Mapping):
            return cls.from_mapping(configuration)
        raise TypeError(
            f"Configuration must be a mapping, a string or None, got {type(configuration).__name__}"
        )

    def get(self, key: str, default: Any = None) -> Any:
        """
        读取字段或额外键
        Read a field or an extra key.
        """
        canonical = _ALIASES.get(key, key)
        if canonical in self.__dataclass_fields__ and canonical != "extras":
            return getattr(self, canonical)
        return self.extras.get(key, default)

    def to_dict(self) -> dict[str, Any]:
        """转为普通字典（用于展示）/ Convert to a plain dict for display."""
        holder = self.holder if isinstance(self.holder, (str, type(None))) else repr(self.holder)
        return {
            "holder": holder,
            "holder_id": self.holder_id,
            "data": _thaw(self.data),
            "autofocus": self.autofocus,
            **_thaw(self.extras),
        }


def _thaw(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {k: _thaw(v) for k, v in value.items()}
    if isinstance(value, tuple):
        return [_thaw(v) for v in value]
    return value
