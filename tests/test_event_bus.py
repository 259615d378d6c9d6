"""EventBus 测试"""

import logging

import pytest

from ModuleKit.kernel.event_bus import EventBus


@pytest.fixture
def bus():
    return EventBus()


class TestEmit:
    """事件分发测试"""

    def test_listeners_run_in_registration_order(self, bus):
        """按注册顺序同步调用"""
        seen = []
        bus.subscribe("changed", lambda value: seen.append(("a", value)))
        bus.subscribe("changed", lambda value: seen.append(("b", value)))
        bus.subscribe("changed", lambda value: seen.append(("c", value)))

        bus.emit("changed", 1)

        # emit 返回时所有监听器都已执行
        assert seen == [("a", 1), ("b", 1), ("c", 1)]

    def test_emit_passes_args_and_kwargs(self, bus):
        seen = []
        bus.subscribe("moved", lambda *args, **kwargs: seen.append((args, kwargs)))

        bus.emit("moved", 1, 2, position="start")

        assert seen == [((1, 2), {"position": "start"})]

    def test_emit_without_listeners_is_noop(self, bus):
        bus.emit("nobody.listens", 42)
        assert bus.slot_count() == 0

    def test_other_events_not_triggered(self, bus):
        seen = []
        bus.subscribe("a", lambda: seen.append("a"))
        bus.subscribe("b", lambda: seen.append("b"))

        bus.emit("a")

        assert seen == ["a"]

    def test_failing_listener_does_not_stop_others(self, bus, caplog):
        """监听器异常被记录，其余监听器继续执行"""
        seen = []

        def broken():
            raise ValueError("listener failed")

        bus.subscribe("tick", broken)
        bus.subscribe("tick", lambda: seen.append("after"))

        with caplog.at_level(logging.ERROR, logger="ModuleKit.kernel.event_bus"):
            bus.emit("tick")

        assert seen == ["after"]
        assert any("tick" in record.getMessage() for record in caplog.records)

    def test_once_listener_runs_once(self, bus):
        seen = []
        bus.subscribe("ready", lambda: seen.append("once"), once=True)

        bus.emit("ready")
        bus.emit("ready")

        assert seen == ["once"]
        assert bus.slot_count("ready") == 0

    def test_subscribe_during_emit_waits_for_next_emit(self, bus):
        seen = []

        def late():
            seen.append("late")

        def first():
            seen.append("first")
            bus.subscribe("tick", late)

        bus.subscribe("tick", first)
        bus.emit("tick")
        assert seen == ["first"]

        bus.emit("tick")
        assert seen == ["first", "first", "late"]


class TestSubscriptions:
    """订阅管理测试"""

    def test_unsubscribe(self, bus):
        seen = []

        def handler():
            seen.append("x")

        bus.subscribe("tick", handler)
        assert bus.unsubscribe("tick", handler) is True
        assert bus.unsubscribe("tick", handler) is False

        bus.emit("tick")
        assert seen == []

    def test_disconnect_by_slot_id(self, bus):
        slot_id = bus.subscribe("tick", lambda: None)

        assert bus.disconnect(slot_id) is True
        assert bus.disconnect(slot_id) is False
        assert bus.slot_count("tick") == 0

    def test_slot_count_and_clear(self, bus):
        bus.subscribe("a", lambda: None)
        bus.subscribe("a", lambda: None)
        bus.subscribe("b", lambda: None)

        assert bus.slot_count() == 3
        assert bus.slot_count("a") == 2

        bus.clear()
        assert bus.slot_count() == 0


class TestListenerGroup:
    """监听器组测试"""

    def test_remove_all_only_removes_own_subscriptions(self, bus):
        seen = []
        mine = bus.group("Mine")
        other = bus.group("Other")

        mine.on("tick", lambda: seen.append("mine"))
        mine.on("tock", lambda: seen.append("mine-tock"))
        other.on("tick", lambda: seen.append("other"))

        assert mine.remove_all() == 2
        assert len(mine) == 0

        bus.emit("tick")
        bus.emit("tock")
        assert seen == ["other"]

    def test_remove_all_skips_consumed_once_listeners(self, bus):
        group = bus.group("Mine")
        group.once("ready", lambda: None)
        group.on("tick", lambda: None)

        bus.emit("ready")

        assert group.remove_all() == 1
        assert bus.slot_count() == 0

    def test_off(self, bus):
        seen = []
        group = bus.group("Mine")
        slot_id = group.on("tick", lambda: seen.append("x"))

        assert group.off(slot_id) is True
        bus.emit("tick")

        assert seen == []
        assert len(group) == 0

    def test_owner(self, bus):
        assert bus.group("BlockManager").owner == "BlockManager"
