"""Pytest 配置"""

import logging

import pytest

from ModuleKit.config.manager import SettingsManager
from ModuleKit.environment import Document

HOLDER = "editor-holder"


@pytest.fixture
def document():
    """包含 editor-holder 展示面的内存环境"""
    doc = Document()
    doc.create(HOLDER)
    return doc


@pytest.fixture
def settings(tmp_path, monkeypatch):
    """不读取磁盘文件的运行时设置"""
    monkeypatch.delenv("MODULEKIT_LOG_LEVEL", raising=False)
    return SettingsManager(settings_path=str(tmp_path / "config" / "modulekit.json"))


@pytest.fixture
def calls():
    """按顺序记录模块调用"""
    return []


@pytest.fixture(autouse=True)
def reset_modulekit_logging():
    """移除 CLI 测试安装的处理器，避免写入已关闭的流"""
    yield
    root = logging.getLogger("ModuleKit")
    for handler in list(root.handlers):
        if getattr(handler, "_modulekit_handler", False):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(logging.NOTSET)
