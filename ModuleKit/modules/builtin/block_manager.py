"""
块管理器 - 保存已渲染的内容项
Block manager - keeps the rendered content items.

内容项对核心是不透明的，这里只负责保存顺序和当前位置。
Items are opaque to the core; this module only tracks order and position.
"""

from __future__ import annotations

import logging
from typing import Any

from ModuleKit.modules.base import Module

logger = logging.getLogger(__name__)


class BlockManager(Module):
    """块管理器 / Block manager."""

    name = "BlockManager"

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.blocks: list[Any] = []
        self.current_block_index = -1

    async def prepare(self) -> None:
        self.blocks = []
        self.current_block_index = -1

    @property
    def current_block(self) -> Any | None:
        if 0 <= self.current_block_index < len(self.blocks):
            return self.blocks[self.current_block_index]
        return None

    def insert(self, item: Any, index: int | None = None) -> int:
        """插入内容项并返回其位置 / Insert an item and return its index."""
        if index is None or index >= len(self.blocks):
            self.blocks.append(item)
            index = len(self.blocks) - 1
        else:
            self.blocks.insert(max(index, 0), item)
            index = max(index, 0)
        self.event_bus.emit("block.added", index, item)
        return index

    def index_of(self, item: Any) -> int:
        for index, block in enumerate(self.blocks):
            if block is item:
                return index
        raise ValueError("Item is not managed by BlockManager")

    def clear(self) -> None:
        self.blocks.clear()
        self.current_block_index = -1
        self.event_bus.emit("blocks.cleared")

    def highlight_current_node(self) -> None:
        """标记当前块 / Mark the current block."""
        block = self.current_block
        if block is None:
            logger.debug("没有当前块可高亮")
            return
        self.event_bus.emit("block.highlighted", self.current_block_index, block)

    def destroy(self) -> None:
        self.blocks.clear()
        self.current_block_index = -1
