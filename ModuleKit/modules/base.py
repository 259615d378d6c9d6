"""
模块基类 - 所有可插拔模块的父类
Module base - parent of all pluggable modules.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable
from typing import TYPE_CHECKING, Any, ClassVar

if TYPE_CHECKING:
    from ModuleKit.config.schema import HostConfig
    from ModuleKit.kernel.event_bus import EventBus, ListenerGroup
    from ModuleKit.kernel.injector import PeerView

logger = logging.getLogger(__name__)


class Module:
    """
    模块基类 - 内置与用户模块都继承此类
    Module base - builtin and user modules inherit from this.

    生命周期：
    1. __init__(config=..., event_bus=...) - 构造
    2. state 被赋值为同伴视图（其余所有模块）
    3. prepare() - 按启动顺序依次调用（可选）
    4. destroy() - 门面销毁时调用（可选）

    模块之间只通过 self.state.<名称> 互相访问。
    Modules reach each other only through self.state.<Name>.
    """

    # 显式的模块标识，不从类名推导
    name: ClassVar[str] = ""

    def __init__(self, *, config: HostConfig, event_bus: EventBus) -> None:
        self.config = config
        self.event_bus = event_bus
        self.listeners: ListenerGroup = event_bus.group(self.name)
        self.state: PeerView | dict[str, Any] = {}
        self._deferred: list[asyncio.Future[Any]] = []

    def defer(self, awaitable: Awaitable[Any]) -> asyncio.Future[Any]:
        """
        登记一个启动阶段的异步副作用，渲染前会等待其完成
        Register a start-phase side effect; rendering waits for it to settle.
        """
        future = asyncio.ensure_future(awaitable)
        self._deferred.append(future)
        return future

    def pending(self) -> list[asyncio.Future[Any]]:
        """取出尚未被收集的副作用 / Drain side effects not collected yet."""
        pending, self._deferred = self._deferred, []
        return pending

    def __repr__(self) -> str:
        return f"<{type(self).__name__} name={self.name!r}>"
