"""
API 模块 - 宿主门面委托的方法集合
API module - the method surface the host facade delegates to.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any

from ModuleKit.modules.base import Module


class API(Module):
    """
    API 模块 - 通过 methods 显式公布门面可调用的名称
    API module - explicitly publishes, via methods, what the facade may call.
    """

    name = "API"

    @property
    def methods(self) -> dict[str, Any]:
        return {
            "blocks": {
                "render": self.render,
                "clear": self.clear,
                "count": self.count,
                "get": self.get_block,
            },
            "caret": {
                "focus": self.focus,
            },
            "events": {
                "on": self.on,
                "off": self.off,
                "emit": self.emit,
            },
            "render": self.render,
            "clear": self.clear,
            "focus": self.focus,
        }

    async def render(self, blocks: Iterable[Any]) -> int:
        """清空后重新渲染 / Clear, then render again."""
        self.clear()
        return await self.state.Renderer.render(blocks)

    def clear(self) -> None:
        self.state.BlockManager.clear()

    def count(self) -> int:
        return len(self.state.BlockManager.blocks)

    def get_block(self, index: int) -> Any | None:
        blocks = self.state.BlockManager.blocks
        if -len(blocks) <= index < len(blocks):
            return blocks[index]
        return None

    def focus(self, at_end: bool = False) -> bool:
        return self.state.Caret.focus(at_end)

    def on(self, event: str, handler: Callable[..., Any]) -> str:
        return self.listeners.on(event, handler)

    def off(self, slot_id: str) -> bool:
        return self.listeners.off(slot_id)

    def emit(self, event: str, *args: Any, **kwargs: Any) -> None:
        self.event_bus.emit(event, *args, **kwargs)
