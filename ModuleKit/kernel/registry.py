"""
模块注册表 - 发现、登记和实例化模块
Module registry - discovers, registers, and instantiates modules.

注册表是一个显式、有序、可封存的 (名称, 工厂) 列表。
The registry is an explicit, ordered, sealable list of (name, factory) pairs.
"""

from __future__ import annotations

import importlib
import inspect
import logging
import pkgutil
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from types import ModuleType
from typing import TYPE_CHECKING, Any

from ModuleKit.kernel.errors import ConstructionError, RegistryError, RegistrySealedError
from ModuleKit.modules.base import Module

if TYPE_CHECKING:
    from ModuleKit.config.schema import HostConfig
    from ModuleKit.kernel.event_bus import EventBus

logger = logging.getLogger(__name__)

BUILTIN_PACKAGE = "ModuleKit.modules.builtin"


@dataclass(frozen=True)
class ModuleDescriptor:
    """
    模块描述符 - 显式名称与工厂
    Module descriptor - an explicit name and a factory.

    工厂以关键字参数 config= 与 event_bus= 调用。
    The factory is called with config= and event_bus= keyword arguments.
    """

    name: str
    factory: Callable[..., Any]

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name:
            raise RegistryError("Module descriptor requires a non-empty name")
        if not callable(self.factory):
            raise RegistryError(f"Module {self.name!r} factory is not callable")


class ModuleRegistry:
    """
    模块注册表 - 在任何实例存在之前构建一次
    Module registry - built once, before any instance exists.
    """

    def __init__(self, descriptors: list[ModuleDescriptor] | None = None) -> None:
        # 名称 -> 描述符（dict 保留注册顺序）
        self._descriptors: dict[str, ModuleDescriptor] = {}
        self._sealed = False
        # 最近一次 instantiate 的构造失败
        self.failures: list[ConstructionError] = []

        for descriptor in descriptors or []:
            self.register(descriptor)

    @property
    def sealed(self) -> bool:
        return self._sealed

    def register(
        self,
        module: ModuleDescriptor | Callable[..., Any],
        name: str | None = None,
    ) -> ModuleDescriptor:
        """
        注册一个模块（描述符、类或任意工厂）
        Register a module given as a descriptor, a class, or any factory.

        同名模块后注册者覆盖先注册者，并记录警告。
        A duplicate name overwrites the earlier one and logs a warning.
        """
        if self._sealed:
            raise RegistrySealedError(
                f"Cannot register {name or module!r}: registry is sealed"
            )

        if isinstance(module, ModuleDescriptor):
            descriptor = module
            if name and name != descriptor.name:
                descriptor = ModuleDescriptor(name=name, factory=descriptor.factory)
        else:
            module_name = name or getattr(module, "name", "")
            if not isinstance(module_name, str) or not module_name:
                raise RegistryError(f"Module {module!r} has no explicit name")
            descriptor = ModuleDescriptor(name=module_name, factory=module)

        if descriptor.name in self._descriptors:
            logger.warning("模块 %s 已存在，将被覆盖", descriptor.name)
            # 覆盖后移到末尾，保持“最后注册”的顺序语义
            del self._descriptors[descriptor.name]

        self._descriptors[descriptor.name] = descriptor
        logger.debug("已注册模块: %s", descriptor.name)
        return descriptor

    def discover(self, package: str | ModuleType) -> int:
        """
        扫描包内子模块并注册其中的 Module 子类
        Scan a package's submodules and register the Module subclasses in them.

        以下划线开头的子模块视为私有，直接跳过。
        Submodules whose name starts with an underscore are private and skipped.
        """
        if isinstance(package, str):
            package = importlib.import_module(package)

        search_path = getattr(package, "__path__", None)
        if search_path is None:
            raise RegistryError(f"{package.__name__} is not a package")

        count = 0
        entries = sorted(pkgutil.iter_modules(search_path), key=lambda e: e.name)
        for entry in entries:
            if entry.name.startswith("_"):
                continue

            qualified = f"{package.__name__}.{entry.name}"
            try:
                submodule = importlib.import_module(qualified)
            except Exception:
                logger.warning("加载模块文件失败: %s", qualified, exc_info=True)
                continue

            for _, attr in inspect.getmembers(submodule, inspect.isclass):
                if (
                    issubclass(attr, Module)
                    and attr is not Module
                    and attr.__module__ == submodule.__name__
                    and attr.name
                ):
                    self.register(attr)
                    count += 1

        logger.info("从 %s 发现 %d 个模块", package.__name__, count)
        return count

    def seal(self) -> None:
        """封存注册表 / Seal the registry against further registration."""
        self._sealed = True

    def instantiate(self, config: HostConfig, event_bus: EventBus) -> dict[str, Any]:
        """
        按注册顺序构造所有模块
        Construct every module in registration order.

        构造失败的模块被忽略并记录警告，不影响其他模块。
        A module whose constructor raises is omitted with a warning; the others
        are still built.
        """
        instances: dict[str, Any] = {}
        self.failures = []

        for descriptor in self._descriptors.values():
            try:
                instances[descriptor.name] = descriptor.factory(
                    config=config,
                    event_bus=event_bus,
                )
            except Exception as e:
                failure = ConstructionError(descriptor.name, e)
                self.failures.append(failure)
                logger.warning("模块 %s 构造失败，已跳过", descriptor.name, exc_info=e)

        logger.info(
            "已构造 %d 个模块（%d 个失败）", len(instances), len(self.failures)
        )
        return instances

    def names(self) -> list[str]:
        return list(self._descriptors)

    def get(self, name: str) -> ModuleDescriptor | None:
        return self._descriptors.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._descriptors

    def __len__(self) -> int:
        return len(self._descriptors)

    def __iter__(self) -> Iterator[ModuleDescriptor]:
        return iter(list(self._descriptors.values()))


def builtin_registry() -> ModuleRegistry:
    """
    构建包含内置模块的注册表
    Build a registry holding the builtin modules.
    """
    registry = ModuleRegistry()
    registry.discover(BUILTIN_PACKAGE)
    return registry
