"""
错误类型 - 宿主运行时的异常层级
Error types - the exception hierarchy of the host runtime.

只有 ConfigurationError 与 FatalModuleError（以及渲染失败）会使就绪信号失败，
其余错误都会被记录日志后吸收。
Only ConfigurationError and FatalModuleError (plus render failures) reject the
readiness signal; everything else is logged and absorbed.
"""

from __future__ import annotations


class ModuleKitError(Exception):
    """所有 ModuleKit 异常的基类 / Base class of all ModuleKit errors."""


class ConfigurationError(ModuleKitError):
    """
    配置校验失败，在任何模块构造之前抛出
    Configuration validation failed; raised before any module is constructed.
    """


class ConstructionError(ModuleKitError):
    """
    模块构造函数抛出异常，该模块被忽略
    A module constructor raised; the module is omitted from the runtime.
    """

    def __init__(self, module_name: str, cause: BaseException) -> None:
        super().__init__(f"Module {module_name} could not be constructed: {cause!r}")
        self.module_name = module_name
        self.cause = cause


class FatalModuleError(ModuleKitError):
    """
    prepare() 中显式标记为致命的错误，会中止整个启动流程
    An explicitly fatal error from prepare(); aborts the whole startup sequence.
    """


class TransientModuleError(ModuleKitError):
    """
    prepare() 中的非致命错误，模块被跳过，启动继续
    A non-fatal prepare() failure; the module is skipped and startup continues.
    """

    def __init__(self, module_name: str, cause: BaseException | None = None) -> None:
        reason = repr(cause) if cause is not None else "no prepare() capability"
        super().__init__(f"Module {module_name} was skipped: {reason}")
        self.module_name = module_name
        self.cause = cause


class LifecycleError(ModuleKitError):
    """非法的生命周期状态转换 / Illegal lifecycle state transition."""


class RegistryError(ModuleKitError):
    """模块注册失败 / Module registration failed."""


class RegistrySealedError(RegistryError):
    """注册表已封存，不能再注册 / The registry is sealed; no further registration."""


class FacadeError(ModuleKitError, AttributeError):
    """门面访问错误 / Facade access error."""


class FacadeNotReadyError(FacadeError):
    """门面尚未导出（就绪之前）/ The facade is not exported yet (before readiness)."""


class FacadeDestroyedError(FacadeError):
    """门面已销毁，拒绝一切调用 / The facade was destroyed and rejects every call."""


class RenderError(ModuleKitError):
    """渲染阶段失败（例如缺少渲染模块）/ The render phase failed (e.g. no renderer module)."""
