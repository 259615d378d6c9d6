"""宿主门面测试"""

import logging

import pytest

from ModuleKit import __version__
from ModuleKit.host import ModuleHost
from ModuleKit.kernel.errors import (
    ConfigurationError,
    FacadeDestroyedError,
    FacadeNotReadyError,
)
from ModuleKit.kernel.registry import ModuleRegistry, builtin_registry
from ModuleKit.modules.base import Module

from conftest import HOLDER
from helpers import StubRenderer


@pytest.fixture
def make_host(document, settings):
    """使用内置模块和测试环境创建宿主"""

    def factory(configuration=HOLDER, registry=None):
        return ModuleHost(
            configuration,
            registry=registry if registry is not None else builtin_registry(),
            environment=document,
            settings=settings,
        )

    return factory


class TestReadiness:
    """就绪与导出测试"""

    async def test_exports_configuration_after_ready(self, make_host):
        host = make_host({"holder": HOLDER, "data": {"blocks": ["a", "b"]}})

        await host.is_ready

        assert host.configuration.holder == HOLDER
        assert host.configuration.blocks == ("a", "b")
        assert callable(host.destroy)

    async def test_api_is_unavailable_before_ready(self, make_host):
        host = make_host()

        with pytest.raises(FacadeNotReadyError):
            host.blocks
        # 门面错误同时也是 AttributeError
        assert not hasattr(host, "configuration")
        assert repr(host) == "<ModuleHost absent>"

        await host.is_ready
        assert repr(host) == "<ModuleHost live>"

    async def test_on_ready_callback(self, make_host):
        seen = []
        host = make_host({"holder": HOLDER, "onReady": lambda: seen.append("ready")})

        await host.is_ready

        assert seen == ["ready"]

    async def test_async_on_ready_callback(self, make_host):
        seen = []

        async def on_ready():
            seen.append("ready")

        host = make_host({"holder": HOLDER, "on_ready": on_ready})
        await host.is_ready

        assert seen == ["ready"]

    async def test_configuration_error_rejects_readiness(self, make_host):
        host = make_host({"holder": HOLDER, "holder_id": HOLDER})

        with pytest.raises(ConfigurationError):
            await host.is_ready
        with pytest.raises(FacadeNotReadyError):
            host.blocks

    async def test_version(self, make_host):
        host = make_host()
        assert host.version == __version__
        assert ModuleHost.version == __version__
        await host.is_ready


class TestDelegation:
    """API 委托测试"""

    async def test_namespaces_and_methods(self, make_host):
        host = make_host({"holder": HOLDER, "data": {"blocks": ["a", "b"]}})
        await host.is_ready

        assert host.blocks.count() == 2
        assert host.blocks.get(0) == "a"
        assert host.blocks.get(5) is None

        assert await host.render(["x"]) == 1
        assert host.blocks.count() == 1

        host.clear()
        assert host.blocks.count() == 0

    async def test_events_through_facade(self, make_host):
        host = make_host()
        await host.is_ready
        seen = []

        slot_id = host.events.on("custom", seen.append)
        host.events.emit("custom", 1)
        assert host.events.off(slot_id) is True
        host.events.emit("custom", 2)

        assert seen == [1]

    async def test_focus(self, make_host):
        host = make_host({"holder": HOLDER, "data": {"blocks": ["a", "b"]}})
        await host.is_ready

        assert host.caret.focus(at_end=True) is True
        assert host.focus() is True

    async def test_unknown_name(self, make_host):
        host = make_host()
        await host.is_ready

        with pytest.raises(AttributeError):
            host.no_such_method

    async def test_dir_lists_published_names(self, make_host):
        host = make_host()
        await host.is_ready

        names = dir(host)
        assert {"blocks", "caret", "events", "destroy", "configuration"} <= set(names)

    async def test_without_api_module(self, document, settings):
        registry = ModuleRegistry()
        registry.register(StubRenderer)
        host = ModuleHost(HOLDER, registry=registry, environment=document, settings=settings)

        await host.is_ready

        assert host.configuration.holder == HOLDER
        with pytest.raises(AttributeError):
            host.blocks


class TestDestroy:
    """销毁测试"""

    async def test_destroy_calls_hooks_and_removes_listeners(self, document, settings):
        destroyed = []
        seen = []

        class Tools(Module):
            name = "Tools"

            def prepare(self):
                self.listeners.on("tick", lambda: seen.append("tick"))

            def destroy(self):
                destroyed.append(self.name)

        registry = builtin_registry()
        registry.register(Tools)
        host = ModuleHost(HOLDER, registry=registry, environment=document, settings=settings)
        await host.is_ready
        bus = host.events

        host.events.emit("tick")
        host.destroy()

        assert destroyed == ["Tools"]
        assert seen == ["tick"]
        # 保存的命名空间在销毁后也失败
        with pytest.raises(FacadeDestroyedError):
            bus.emit("tick")

    async def test_facade_is_stripped(self, make_host):
        host = make_host()
        await host.is_ready

        host.destroy()

        assert vars(host) == {}
        assert repr(host) == "<ModuleHost destroyed>"
        with pytest.raises(FacadeDestroyedError):
            host.configuration
        with pytest.raises(FacadeDestroyedError):
            host.blocks

    async def test_saved_method_reference_fails(self, make_host):
        host = make_host()
        await host.is_ready
        count = host.blocks.count

        host.destroy()

        with pytest.raises(FacadeDestroyedError):
            count()

    async def test_second_destroy_fails(self, make_host):
        host = make_host()
        await host.is_ready
        destroy = host.destroy

        destroy()

        with pytest.raises(FacadeDestroyedError):
            host.destroy()
        with pytest.raises(FacadeDestroyedError):
            destroy()

    async def test_failing_hook_does_not_stop_teardown(self, document, settings, caplog):
        """某个模块的销毁钩子失败，其余清理照常进行"""
        destroyed = []

        class Fragile(Module):
            name = "Fragile"

            def destroy(self):
                raise RuntimeError("hook failed")

        class Sturdy(Module):
            name = "Sturdy"

            def destroy(self):
                destroyed.append(self.name)

        registry = builtin_registry()
        registry.register(Fragile)
        registry.register(Sturdy)
        host = ModuleHost(HOLDER, registry=registry, environment=document, settings=settings)
        await host.is_ready

        with caplog.at_level(logging.ERROR, logger="ModuleKit.host"):
            host.destroy()

        assert destroyed == ["Sturdy"]
        assert vars(host) == {}
        assert any(record.exc_info for record in caplog.records)
