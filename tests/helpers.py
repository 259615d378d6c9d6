"""测试用模块与工具"""

import asyncio

from ModuleKit.modules.base import Module


class RecordingModule(Module):
    """prepare() 时记录自己的名字，可选地抛出错误"""

    calls: list = []
    prepare_error: BaseException | None = None

    async def prepare(self):
        self.calls.append(f"start:{self.name}")
        await asyncio.sleep(0)
        self.calls.append(f"end:{self.name}")
        if self.prepare_error is not None:
            raise self.prepare_error


def recording_module(name, calls, **attrs):
    """创建一个记录调用的模块类"""
    return type(name, (RecordingModule,), {"name": name, "calls": calls, **attrs})


def prepared(calls):
    """从调用记录中取出已开始 prepare 的模块名"""
    return [entry.split(":", 1)[1] for entry in calls if entry.startswith("start:")]


class StubRenderer(Module):
    """只记录渲染负载的渲染器"""

    name = "Renderer"

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.rendered = None

    async def render(self, blocks):
        await asyncio.sleep(0)
        self.rendered = list(blocks)


class ExplodingModule(Module):
    """构造即失败"""

    name = "Exploding"

    def __init__(self, **kwargs):
        raise RuntimeError("boom")
