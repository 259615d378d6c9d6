"""
宿主门面 - 对外暴露的唯一对象
Host facade - the only object handed to callers.

就绪之后导出配置、destroy 以及 API 模块提供的方法；
destroy 之后门面被清空，任何调用都会失败。
After readiness it exports the configuration, destroy and the methods published
by the API module; after destroy it is stripped and every call fails.
"""

from __future__ import annotations

import asyncio
import functools
import inspect
import logging
from collections.abc import Callable, Mapping
from types import SimpleNamespace
from typing import Any

from ModuleKit import __version__
from ModuleKit.config.manager import SettingsManager
from ModuleKit.config.schema import HostConfig
from ModuleKit.environment import Environment
from ModuleKit.kernel.core import Core
from ModuleKit.kernel.errors import FacadeDestroyedError, FacadeNotReadyError
from ModuleKit.kernel.registry import ModuleRegistry

logger = logging.getLogger(__name__)

# 从内核复制到门面上的字段
FIELDS_TO_EXPORT: tuple[str, ...] = ("configuration",)

# 提供委托方法的模块
API_MODULE = "API"


class _Delegation:
    """
    委托链接 - 只转发 API 模块在 methods 中公布的名称
    Delegation link - forwards only the names the API module publishes.
    """

    def __init__(self, provider: Any) -> None:
        methods = getattr(provider, "methods", None) if provider is not None else None
        self._methods: dict[str, Any] = dict(methods) if isinstance(methods, Mapping) else {}
        self._severed = False

    @property
    def severed(self) -> bool:
        return self._severed

    def names(self) -> list[str]:
        return list(self._methods)

    def lookup(self, name: str) -> Any:
        if self._severed:
            raise FacadeDestroyedError(f"ModuleHost was destroyed; {name!r} is unavailable")
        try:
            value = self._methods[name]
        except KeyError:
            raise AttributeError(f"'ModuleHost' object has no attribute {name!r}") from None
        return self._wrap(name, value)

    def _wrap(self, path: str, value: Any) -> Any:
        if isinstance(value, Mapping):
            return SimpleNamespace(
                **{key: self._wrap(f"{path}.{key}", item) for key, item in value.items()}
            )
        if callable(value):
            return self._forward(path, value)
        return value

    def _forward(self, path: str, fn: Callable[..., Any]) -> Callable[..., Any]:
        @functools.wraps(fn)
        def forward(*args: Any, **kwargs: Any) -> Any:
            # 即使调用方提前保存了引用，销毁后也必须失败
            if self._severed:
                raise FacadeDestroyedError(f"ModuleHost was destroyed; {path!r} is unavailable")
            return fn(*args, **kwargs)

        return forward

    def sever(self) -> None:
        self._severed = True
        self._methods.clear()


class ModuleHost:
    """
    模块宿主 - 可插拔模块运行时的公共入口
    Module host - the public entry point of the pluggable module runtime.

    用法 / Usage:
        host = ModuleHost({"holder": "editor-holder"})
        await host.is_ready
        host.blocks.count()
        host.destroy()

    必须在运行中的事件循环内构造。
    Must be constructed while an event loop is running.
    """

    version = __version__

    def __init__(
        self,
        configuration: HostConfig | Mapping[str, Any] | str | None = None,
        *,
        registry: ModuleRegistry | None = None,
        environment: Environment | None = None,
        settings: SettingsManager | None = None,
    ) -> None:
        on_ready = _extract_on_ready(configuration)

        core = Core(
            configuration,
            registry=registry,
            environment=environment,
            settings=settings,
        )

        self._delegate: _Delegation | None = None
        # 必须在构造时就提供，API 导出之前即可使用
        self.is_ready: asyncio.Task[None] = asyncio.get_running_loop().create_task(
            self._await_ready(core, on_ready)
        )

    async def _await_ready(
        self,
        core: Core,
        on_ready: Callable[[], Any] | None,
    ) -> None:
        await core.is_ready
        self._export_api(core)

        if on_ready is not None:
            result = on_ready()
            if inspect.isawaitable(result):
                await result

    def _export_api(self, core: Core | None) -> None:
        """
        导出外部 API
        Export the external API.
        """
        delegation = _Delegation(core.module_instances.get(API_MODULE))
        destroying = False

        def destroy() -> None:
            nonlocal core, destroying
            if destroying:
                raise FacadeDestroyedError("ModuleHost was already destroyed")
            destroying = True

            instances = list(core.module_instances.values())

            # 1. 调用各模块的销毁钩子
            for instance in instances:
                hook = getattr(instance, "destroy", None)
                if callable(hook):
                    try:
                        hook()
                    except Exception:
                        logger.exception("模块 %r 销毁时出错", instance)

            # 2. 移除各模块的事件订阅
            for instance in instances:
                remove_all = getattr(getattr(instance, "listeners", None), "remove_all", None)
                if callable(remove_all):
                    remove_all()

            # 3. 释放内核引用
            core = None

            # 4. 清空门面上的所有字段
            self.__dict__.clear()

            # 5. 切断委托链接
            delegation.sever()
            logger.info("ModuleHost 已销毁")

        for field in FIELDS_TO_EXPORT:
            setattr(self, field, getattr(core, field))

        self.destroy = destroy
        self._delegate = delegation

    def __getattr__(self, name: str) -> Any:
        # 只在常规查找失败时调用
        if name.startswith("__"):
            raise AttributeError(name)

        fields = self.__dict__
        if not fields:
            raise FacadeDestroyedError(f"ModuleHost was destroyed; {name!r} is unavailable")

        delegate = fields.get("_delegate")
        if delegate is None:
            raise FacadeNotReadyError(f"ModuleHost is not ready yet; {name!r} is unavailable")
        return delegate.lookup(name)

    def __dir__(self) -> list[str]:
        names = set(super().__dir__())
        delegate = self.__dict__.get("_delegate")
        if delegate is not None and not delegate.severed:
            names.update(delegate.names())
        return sorted(names)

    def __repr__(self) -> str:
        fields = self.__dict__
        if not fields:
            status = "destroyed"
        elif fields.get("_delegate") is None:
            status = "absent"
        else:
            status = "live"
        return f"<ModuleHost {status}>"


def _extract_on_ready(configuration: Any) -> Callable[[], Any] | None:
    """取出用户的就绪回调 / Pick the user's on-ready callback."""
    if isinstance(configuration, HostConfig):
        on_ready = configuration.on_ready
    elif isinstance(configuration, Mapping):
        on_ready = configuration.get("on_ready", configuration.get("onReady"))
    else:
        on_ready = None
    return on_ready if callable(on_ready) else None
