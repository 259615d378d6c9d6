"""
环境协作者 - 挂载目标的查找与类型判断
Environment collaborator - mount target lookup and type checks.

核心只在配置校验阶段使用它。
The core only uses it while validating the configuration.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Environment(Protocol):
    """Protocol for the presentation environment."""

    def get(self, identifier: str) -> Any:
        """Look up a surface by identifier; None (or an awaitable of it) when absent."""
        ...

    def is_surface(self, obj: Any) -> bool:
        """Whether obj is a real presentation surface."""
        ...


@dataclass(eq=False)
class Surface:
    """
    展示面 - 模块渲染内容的挂载点
    Surface - the mount point modules render into.
    """

    id: str
    children: list[Any] = field(default_factory=list)

    def __repr__(self) -> str:
        return f"<Surface id={self.id!r}>"


class Document:
    """
    内存中的环境实现
    In-memory environment implementation.
    """

    def __init__(self) -> None:
        self._surfaces: dict[str, Surface] = {}

    def create(self, identifier: str) -> Surface:
        """创建（或返回已有的）展示面 / Create (or return the existing) surface."""
        surface = self._surfaces.get(identifier)
        if surface is None:
            surface = Surface(id=identifier)
            self._surfaces[identifier] = surface
        return surface

    def remove(self, identifier: str) -> bool:
        return self._surfaces.pop(identifier, None) is not None

    def get(self, identifier: str) -> Surface | None:
        return self._surfaces.get(identifier)

    def is_surface(self, obj: Any) -> bool:
        return isinstance(obj, Surface)

    def resolve(self, target: Any) -> Surface | None:
        """
        将 holder（标识或展示面）解析为展示面
        Resolve a holder, identifier or surface, to a surface.
        """
        if isinstance(target, str):
            return self.get(target)
        return target if self.is_surface(target) else None


_default_environment: Document | None = None


def default_environment() -> Document:
    """Get the process-wide default environment."""
    global _default_environment
    if _default_environment is None:
        _default_environment = Document()
    return _default_environment
