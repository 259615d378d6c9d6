"""
ModuleKit - 可插拔模块宿主
ModuleKit - a pluggable module host.

将独立编写的模块装配为协作的运行时，按阶段启动，并暴露受限的公共门面。
Boots independently authored modules into a cooperating runtime, drives them
through a phased startup, and exposes a narrow public facade.
"""

__app_name__ = "ModuleKit"
__version__ = "1.0.0"

from ModuleKit.config.schema import HostConfig
from ModuleKit.host import ModuleHost
from ModuleKit.kernel.errors import (
    ConfigurationError,
    FacadeDestroyedError,
    FatalModuleError,
    ModuleKitError,
)
from ModuleKit.kernel.event_bus import EventBus
from ModuleKit.kernel.registry import ModuleDescriptor, ModuleRegistry
from ModuleKit.modules.base import Module

__all__ = [
    "__app_name__",
    "__version__",
    "ModuleHost",
    "HostConfig",
    "Module",
    "ModuleDescriptor",
    "ModuleRegistry",
    "EventBus",
    "ModuleKitError",
    "ConfigurationError",
    "FatalModuleError",
    "FacadeDestroyedError",
]
