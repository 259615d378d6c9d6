"""
内核模块 - 宿主运行时的核心
Kernel module - the core of the host runtime.

包含事件总线、模块注册表、依赖注入、生命周期与宿主内核。
Contains the event bus, module registry, dependency injection, lifecycle and
the host core.
"""

from ModuleKit.kernel.core import START_ORDER, Core
from ModuleKit.kernel.event_bus import EventBus, ListenerGroup
from ModuleKit.kernel.injector import PeerView, assign_peer_views
from ModuleKit.kernel.lifecycle import LifecycleEvent, LifecycleState, ReadinessSignal
from ModuleKit.kernel.registry import ModuleDescriptor, ModuleRegistry, builtin_registry

__all__ = [
    "Core",
    "START_ORDER",
    "EventBus",
    "ListenerGroup",
    "PeerView",
    "assign_peer_views",
    "LifecycleEvent",
    "LifecycleState",
    "ReadinessSignal",
    "ModuleDescriptor",
    "ModuleRegistry",
    "builtin_registry",
]
