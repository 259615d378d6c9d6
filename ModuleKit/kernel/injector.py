"""
依赖注入 - 为每个模块计算同伴视图
Dependency injection - computes each module's peer view.

同伴视图是模块之间唯一的查找机制：除自身外的所有存活模块，
按名称索引，值为实例引用而非拷贝。
The peer view is the only inter-module lookup: every other surviving module,
keyed by name, holding live references rather than copies.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class PeerView(Mapping[str, Any]):
    """
    同伴视图 - 只读映射，也支持属性访问（state.BlockManager）
    Peer view - read-only mapping that also allows attribute access.
    """

    __slots__ = ("_owner", "_instances")

    def __init__(self, owner: str, instances: Mapping[str, Any]) -> None:
        self._owner = owner
        # 共享同一个实例表，不复制
        self._instances = instances

    @property
    def owner(self) -> str:
        return self._owner

    def __getitem__(self, name: str) -> Any:
        if name == self._owner:
            raise KeyError(name)
        return self._instances[name]

    def __iter__(self) -> Iterator[str]:
        return (name for name in self._instances if name != self._owner)

    def __len__(self) -> int:
        return sum(1 for _ in self)

    def __contains__(self, name: object) -> bool:
        return name != self._owner and name in self._instances

    def __getattr__(self, name: str) -> Any:
        try:
            return self[name]
        except KeyError:
            raise AttributeError(
                f"Module {self._owner!r} has no peer named {name!r}"
            ) from None

    def require(self, name: str, kind: type[T] | None = None) -> T:
        """
        按名称获取同伴并可选地校验类型
        Fetch a peer by name and optionally check its type.
        """
        if name not in self:
            raise LookupError(f"Module {self._owner!r} requires missing peer {name!r}")
        peer = self[name]
        if kind is not None and not isinstance(peer, kind):
            raise TypeError(
                f"Peer {name!r} is {type(peer).__name__}, expected {kind.__name__}"
            )
        return peer

    def __repr__(self) -> str:
        return f"PeerView(owner={self._owner!r}, peers={list(self)!r})"


def assign_peer_views(instances: Mapping[str, Any]) -> None:
    """
    为每个实例赋值同伴视图（只在全部实例化之后调用一次）
    Attach a peer view to every instance; called once, after instantiation.
    """
    for name, instance in instances.items():
        try:
            instance.state = PeerView(name, instances)
        except AttributeError:
            logger.warning("模块 %s 不接受 state 属性，跳过注入", name)

    logger.debug("已为 %d 个模块注入同伴视图", len(instances))
