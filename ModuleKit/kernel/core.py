"""
宿主内核 - 驱动模块完成 校验 → 初始化 → 启动 → 渲染 → 就绪
Host core - drives modules through validate → init → start → render → ready.

就绪信号只会结算一次：首次渲染成功时完成，首次致命错误时失败。
The readiness signal settles once: it resolves on the first successful render
and rejects on the first fatal error.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Callable, Mapping
from typing import Any

from ModuleKit.config.manager import SettingsManager
from ModuleKit.config.schema import HostConfig
from ModuleKit.environment import Environment, default_environment
from ModuleKit.kernel.errors import (
    ConfigurationError,
    FatalModuleError,
    RenderError,
    TransientModuleError,
)
from ModuleKit.kernel.event_bus import EventBus
from ModuleKit.kernel.injector import assign_peer_views
from ModuleKit.kernel.lifecycle import (
    LifecycleEvent,
    LifecycleMachine,
    LifecycleState,
    ReadinessSignal,
)
from ModuleKit.kernel.registry import ModuleRegistry, builtin_registry
from ModuleKit.utils.logging import log_labeled

logger = logging.getLogger(__name__)

# 启动顺序（固定的白名单）：工具 → UI → 块管理 → 粘贴 → 选择 → 只读
START_ORDER: tuple[str, ...] = (
    "Tools",
    "UI",
    "BlockManager",
    "Paste",
    "BlockSelection",
    "RectangleSelection",
    "CrossBlockSelection",
    "ReadOnly",
)

RENDERER = "Renderer"
BLOCK_MANAGER = "BlockManager"
CARET = "Caret"

LIFECYCLE_EVENT = "lifecycle.changed"


class Core:
    """
    宿主内核 - 拥有配置、模块实例和就绪信号
    Host core - owns the configuration, module instances and readiness signal.

    启动顺序：
    1. validate() - 校验挂载目标（此时没有任何模块）
    2. init() - 构造模块并注入同伴视图
    3. start() - 按 START_ORDER 依次 prepare()
    4. render() - 等待启动副作用后渲染初始内容
    5. 结算就绪信号

    必须在运行中的事件循环内构造。
    Must be constructed while an event loop is running.
    """

    def __init__(
        self,
        config: HostConfig | Mapping[str, Any] | str | None = None,
        registry: ModuleRegistry | None = None,
        environment: Environment | None = None,
        settings: SettingsManager | None = None,
        start_order: tuple[str, ...] = START_ORDER,
    ) -> None:
        self._raw_config = config
        self.config: HostConfig | None = None
        self.registry = registry if registry is not None else builtin_registry()
        self.environment = environment if environment is not None else default_environment()
        self.settings = settings if settings is not None else SettingsManager()
        self.start_order = tuple(start_order)

        self.event_bus = EventBus()
        self.module_instances: dict[str, Any] = {}
        # 启动中被跳过的模块（非致命）
        self.skipped: dict[str, TransientModuleError] = {}

        self._lifecycle = LifecycleMachine()
        self._lifecycle.add_listener(self._publish_transition)

        self._readiness = ReadinessSignal()
        self.is_ready: asyncio.Future[None] = self._readiness.future
        self._task = asyncio.get_running_loop().create_task(self._boot())

    @property
    def configuration(self) -> HostConfig | None:
        """规范化后的配置 / The normalised configuration."""
        return self.config

    @property
    def state(self) -> LifecycleState:
        return self._lifecycle.state

    def add_listener(self, callback: Callable[[LifecycleEvent], Any]) -> None:
        """注册生命周期监听器 / Register a lifecycle listener."""
        self._lifecycle.add_listener(callback)

    async def _boot(self) -> None:
        try:
            await self.validate()
            self.init()
            await self.start()

            log_labeled("I'm ready!")

            await self.render()
        except asyncio.CancelledError as e:
            self._fail(e, cancelled=True)
            raise
        except Exception as e:
            logger.error("ModuleKit is not ready because of %r", e)
            self._fail(e)
            return

        self._lifecycle.transition(LifecycleState.READY)
        self._readiness.resolve()

    def _fail(self, error: BaseException, cancelled: bool = False) -> None:
        self._abandon_side_effects()
        if self._lifecycle.can_transition(LifecycleState.FAILED):
            self._lifecycle.transition(LifecycleState.FAILED, error=error)
        if cancelled:
            self.is_ready.cancel()
        else:
            self._readiness.reject(error)

    async def validate(self) -> None:
        """
        校验配置
        Validate the configuration.

        holder 与 holder_id 互斥；字符串目标必须能在环境中找到；
        非字符串 holder 必须是真实的展示面。
        holder and holder_id are exclusive; string targets must resolve in the
        environment; a non-string holder must be a real surface.
        """
        self._lifecycle.transition(LifecycleState.VALIDATING)

        try:
            self.config = HostConfig.coerce(self._raw_config)
        except TypeError as e:
            raise ConfigurationError(str(e)) from e

        holder = self.config.holder
        holder_id = self.config.holder_id

        if holder is not None and holder_id is not None:
            raise ConfigurationError(
                "«holder_id» and «holder» params can't be assigned at the same time."
            )

        if holder_id is not None:
            if not isinstance(holder_id, str):
                raise ConfigurationError("«holder_id» value must be a string")
            await self._require_surface(holder_id)

        if isinstance(holder, str):
            await self._require_surface(holder)
        elif holder is not None and not self.environment.is_surface(holder):
            raise ConfigurationError("«holder» value must be a surface")

    async def _require_surface(self, identifier: str) -> None:
        found = self.environment.get(identifier)
        if inspect.isawaitable(found):
            found = await found
        if not found:
            raise ConfigurationError(
                f"Surface with ID «{identifier}» is missing. Pass correct holder's ID."
            )

    def init(self) -> None:
        """
        构造模块实例并注入同伴视图
        Construct module instances and inject peer views.
        """
        self._lifecycle.transition(LifecycleState.INITIALIZING)

        self.registry.seal()
        self.module_instances = self.registry.instantiate(self.config, self.event_bus)
        assign_peer_views(self.module_instances)

    async def start(self) -> None:
        """
        按固定顺序依次准备模块
        Prepare modules one after another in the fixed start order.

        FatalModuleError 原样抛出并中止；其他错误记录后继续。
        FatalModuleError propagates and aborts; any other error is logged and
        the sequence moves on.
        """
        self._lifecycle.transition(LifecycleState.STARTING)

        for name in self.start_order:
            instance = self.module_instances.get(name)
            prepare = getattr(instance, "prepare", None)
            if instance is None or not callable(prepare):
                self._skip(name)
                continue

            try:
                result = prepare()
                if inspect.isawaitable(result):
                    await result
            except FatalModuleError:
                logger.error("模块 %s 准备时发生致命错误", name)
                raise
            except Exception as e:
                self._skip(name, e)

    def _skip(self, name: str, cause: BaseException | None = None) -> None:
        error = TransientModuleError(name, cause)
        self.skipped[name] = error
        logger.warning(
            "Module %s was skipped because of %r",
            name,
            cause if cause is not None else "missing prepare()",
        )

    async def render(self) -> None:
        """
        等待启动副作用结束后渲染初始内容
        Render the initial payload once start-phase side effects settle.
        """
        self._lifecycle.transition(LifecycleState.RENDERING)

        await self._settle_side_effects()

        delay = float(self.settings.get("render.delay", 0.0) or 0.0)
        if delay > 0:
            await asyncio.sleep(delay)

        renderer = self.module_instances.get(RENDERER)
        render = getattr(renderer, "render", None)
        if renderer is None or not callable(render):
            raise RenderError(f"No {RENDERER} module is available to render content")

        result = render(self.config.blocks)
        if inspect.isawaitable(result):
            await result

        if self.config.autofocus:
            self._autofocus()

    async def _settle_side_effects(self) -> None:
        """
        等待模块在 prepare() 中登记的所有副作用（可能多轮）
        Await every side effect modules deferred during prepare(), round by round.
        """
        while True:
            pending: list[asyncio.Future[Any]] = []
            for instance in self.module_instances.values():
                drain = getattr(instance, "pending", None)
                if callable(drain):
                    pending.extend(drain())
            if not pending:
                return

            results = await asyncio.gather(*pending, return_exceptions=True)
            for result in results:
                if isinstance(result, BaseException):
                    logger.warning("启动副作用失败: %r", result)

    def _abandon_side_effects(self) -> None:
        """
        启动失败时取消尚未完成的副作用，并收集已结束副作用的异常
        On a failed startup, cancel side effects still running and collect the
        errors of those that already finished.
        """
        for instance in self.module_instances.values():
            drain = getattr(instance, "pending", None)
            if not callable(drain):
                continue
            for future in drain():
                if not future.done():
                    future.cancel()
                elif not future.cancelled() and future.exception() is not None:
                    logger.warning("启动副作用失败: %r", future.exception())

    def _autofocus(self) -> None:
        # 尽力而为：失败不影响就绪
        try:
            block_manager = self.module_instances[BLOCK_MANAGER]
            caret = self.module_instances[CARET]
            caret.set_to_block(block_manager.blocks[0], caret.positions.START)
            block_manager.highlight_current_node()
        except Exception:
            logger.warning("Autofocus was skipped", exc_info=True)

    def _publish_transition(self, event: LifecycleEvent) -> None:
        self.event_bus.emit(LIFECYCLE_EVENT, event)
