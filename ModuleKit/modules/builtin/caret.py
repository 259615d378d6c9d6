"""
光标 - 在内容项之间移动插入点
Caret - moves the insertion point between content items.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from ModuleKit.modules.base import Module


class CaretPosition(str, Enum):
    START = "start"
    END = "end"
    DEFAULT = "default"


class Caret(Module):
    """光标模块 / Caret module."""

    name = "Caret"

    positions = CaretPosition

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.position: CaretPosition | None = None

    def set_to_block(self, block: Any, position: CaretPosition = CaretPosition.DEFAULT) -> None:
        """
        将光标放到指定内容项上
        Put the caret on the given item.
        """
        block_manager = self.state.BlockManager
        block_manager.current_block_index = block_manager.index_of(block)
        self.position = CaretPosition(position)
        self.event_bus.emit("caret.moved", block_manager.current_block_index, self.position)

    def focus(self, at_end: bool = False) -> bool:
        """聚焦首个（或最后一个）内容项 / Focus the first (or last) item."""
        blocks = self.state.BlockManager.blocks
        if not blocks:
            return False
        if at_end:
            self.set_to_block(blocks[-1], CaretPosition.END)
        else:
            self.set_to_block(blocks[0], CaretPosition.START)
        return True
