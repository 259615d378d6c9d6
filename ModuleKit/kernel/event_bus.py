"""
事件总线 - 模块间解耦的发布/订阅
Event bus - decoupled publish/subscribe between modules.

与信号中枢不同，事件总线是同步的：emit 在同一轮调用中按注册顺序
依次执行所有监听器，没有缓冲也没有背压。
The bus is synchronous: emit runs every listener in registration order within
the same turn, with no buffering and no back-pressure.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)


@dataclass
class SlotBinding:
    """
    槽绑定 - 将监听器绑定到事件名
    Slot binding - binds a listener to an event name.
    """

    event: str
    handler: Callable[..., Any]
    slot_id: str = ""
    # 是否只触发一次
    once: bool = False


class EventBus:
    """
    事件总线 - 管理所有事件的订阅和分发
    Event bus - manages all event subscriptions and dispatching.
    """

    def __init__(self) -> None:
        # 事件名 -> 槽绑定列表（按注册顺序）
        self._slots: dict[str, list[SlotBinding]] = {}
        self._counter = 0

    def subscribe(
        self,
        event: str,
        handler: Callable[..., Any],
        once: bool = False,
    ) -> str:
        """
        订阅事件
        Subscribe a listener to an event.

        返回 slot_id，可用于 disconnect。
        Returns slot_id for later disconnection.
        """
        self._counter += 1
        slot_id = f"slot_{self._counter}"

        self._slots.setdefault(event, []).append(
            SlotBinding(event=event, handler=handler, slot_id=slot_id, once=once)
        )
        logger.debug("已订阅槽 %s 到事件 %s", slot_id, event)
        return slot_id

    def unsubscribe(self, event: str, handler: Callable[..., Any]) -> bool:
        """
        取消订阅（移除该事件上第一个匹配的监听器）
        Unsubscribe the first binding of handler on event.
        """
        bindings = self._slots.get(event, [])
        for binding in bindings:
            if binding.handler == handler:
                bindings.remove(binding)
                return True
        return False

    def disconnect(self, slot_id: str) -> bool:
        """
        断开指定 slot 的连接
        Disconnect a specific slot.
        """
        for bindings in self._slots.values():
            for binding in bindings:
                if binding.slot_id == slot_id:
                    bindings.remove(binding)
                    logger.debug("已断开槽 %s", slot_id)
                    return True
        return False

    def emit(self, event: str, *args: Any, **kwargs: Any) -> None:
        """
        发射事件，同步触发所有监听器
        Emit an event, calling every listener synchronously.

        没有监听器时为空操作。
        A no-op when nobody listens.
        """
        bindings = self._slots.get(event)
        if not bindings:
            return

        # 复制一份，监听器内的订阅/退订不影响本次分发
        for binding in list(bindings):
            if binding.once:
                self.disconnect(binding.slot_id)
            try:
                binding.handler(*args, **kwargs)
            except Exception:
                logger.exception(
                    "事件监听器 %s 处理 %s 时出错", binding.slot_id, event
                )

    def group(self, owner: str = "") -> ListenerGroup:
        """
        为一个订阅者创建监听器组
        Create a listener group for one subscriber.
        """
        return ListenerGroup(self, owner)

    def slot_count(self, event: str | None = None) -> int:
        """获取槽绑定数量 / Get the number of slot bindings."""
        if event is None:
            return sum(len(bindings) for bindings in self._slots.values())
        return len(self._slots.get(event, []))

    def clear(self) -> None:
        """清除所有槽绑定 / Clear all slot bindings."""
        self._slots.clear()


class ListenerGroup:
    """
    监听器组 - 单个订阅者的订阅句柄，支持批量退订
    Listener group - one subscriber's handle on the bus, with bulk unsubscribe.
    """

    def __init__(self, bus: EventBus, owner: str = "") -> None:
        self._bus = bus
        self._owner = owner
        self._slot_ids: list[str] = []

    @property
    def owner(self) -> str:
        return self._owner

    def on(self, event: str, handler: Callable[..., Any]) -> str:
        slot_id = self._bus.subscribe(event, handler)
        self._slot_ids.append(slot_id)
        return slot_id

    def once(self, event: str, handler: Callable[..., Any]) -> str:
        slot_id = self._bus.subscribe(event, handler, once=True)
        self._slot_ids.append(slot_id)
        return slot_id

    def off(self, slot_id: str) -> bool:
        if slot_id in self._slot_ids:
            self._slot_ids.remove(slot_id)
        return self._bus.disconnect(slot_id)

    def remove_all(self) -> int:
        """
        移除本组注册的所有订阅
        Remove every subscription made through this group.

        返回实际断开的数量（once 监听器可能已被移除）。
        Returns how many were actually disconnected.
        """
        removed = sum(1 for slot_id in self._slot_ids if self._bus.disconnect(slot_id))
        self._slot_ids.clear()
        if removed:
            logger.debug("监听器组 %s 已移除 %d 个订阅", self._owner, removed)
        return removed

    def __len__(self) -> int:
        return len(self._slot_ids)
