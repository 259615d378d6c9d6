"""
渲染器 - 将初始内容负载交给块管理器
Renderer - hands the initial payload to the block manager.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from typing import Any

from ModuleKit.modules.base import Module

logger = logging.getLogger(__name__)


class Renderer(Module):
    """渲染模块 / Renderer module."""

    name = "Renderer"

    async def render(self, blocks: Iterable[Any]) -> int:
        """
        逐个插入内容项，每项之间让出控制权
        Insert items one by one, yielding control between them.
        """
        block_manager = self.state.BlockManager
        count = 0
        for item in blocks:
            block_manager.insert(item)
            count += 1
            await asyncio.sleep(0)

        logger.debug("已渲染 %d 个内容项", count)
        self.event_bus.emit("renderer.rendered", count)
        return count
