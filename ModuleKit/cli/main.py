"""
CLI 主入口 - 使用 Click 框架
CLI main entry - using Click framework.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import sys
from typing import Any

import click

from ModuleKit.config.defaults import DEFAULT_HOLDER
from ModuleKit.config.manager import SETTINGS_FILE, SettingsManager

logger = logging.getLogger("ModuleKit")

_MOUNT_KEYS = ("holder", "mount", "holder_id", "holderId", "mount_id", "mountId")


def _load_settings(settings_path: str) -> SettingsManager:
    settings = SettingsManager(settings_path=settings_path)
    asyncio.run(settings.load())
    return settings


@click.group()
@click.option("--settings", "settings_path", default=SETTINGS_FILE, help="运行时设置文件")
@click.pass_context
def cli(ctx: click.Context, settings_path: str) -> None:
    """ModuleKit - 可插拔模块宿主"""
    ctx.obj = {"settings_path": settings_path}


@cli.command()
@click.option("--holder", default=None, help="挂载目标 ID")
@click.option("--config", "config_file", default=None, type=click.Path(exists=True), help="宿主配置 JSON 文件")
@click.option("--autofocus/--no-autofocus", default=None, help="就绪后聚焦首个内容项")
@click.pass_context
def run(ctx: click.Context, holder: str | None, config_file: str | None, autofocus: bool | None) -> None:
    """启动宿主并输出导出的配置 / Boot a host and print its exported config."""
    from ModuleKit.environment import Document
    from ModuleKit.host import ModuleHost
    from ModuleKit.kernel.registry import ModuleRegistry
    from ModuleKit.utils.logging import setup_logging

    settings = _load_settings(ctx.obj["settings_path"])
    setup_logging(settings.get("log.level", "INFO"), settings.get("log.file") or None)

    configuration: dict[str, Any] = {}
    if config_file:
        with open(config_file, encoding="utf-8") as f:
            configuration = json.load(f)
    if holder:
        configuration["holder"] = holder
    if autofocus is not None:
        configuration["autofocus"] = autofocus

    # 内存环境：为字符串挂载目标创建展示面
    document = Document()
    targets = [configuration[key] for key in _MOUNT_KEYS if key in configuration]
    for target in targets or [DEFAULT_HOLDER]:
        if isinstance(target, str):
            document.create(target)

    registry = ModuleRegistry()
    registry.discover(settings.get("modules.package", "ModuleKit.modules.builtin"))

    async def main() -> dict[str, Any]:
        host = ModuleHost(configuration, registry=registry, environment=document, settings=settings)
        await host.is_ready
        summary = {
            "configuration": host.configuration.to_dict(),
            "blocks": host.blocks.count(),
        }
        host.destroy()
        return summary

    try:
        summary = asyncio.run(main())
    except Exception as e:
        logger.error("启动失败: %s", e)
        sys.exit(1)

    click.echo(json.dumps(summary, ensure_ascii=False, indent=2, default=str))


@cli.command()
@click.pass_context
def init(ctx: click.Context) -> None:
    """初始化运行时设置 / Initialize runtime settings."""
    settings_path = ctx.obj["settings_path"]

    if os.path.exists(settings_path):
        click.echo(f"设置文件已存在: {settings_path}")
        if not click.confirm("是否覆盖?"):
            return

    settings = SettingsManager(settings_path=settings_path)
    asyncio.run(settings.save())
    click.echo(f"设置文件已创建: {settings_path}")


@cli.command()
def version() -> None:
    """显示版本信息 / Show version info."""
    from ModuleKit import __app_name__, __version__

    click.echo(f"{__app_name__} v{__version__}")


@cli.group()
def modules() -> None:
    """模块管理 / Module management."""
    pass


@modules.command("list")
@click.option("--package", default=None, help="要扫描的模块包")
@click.pass_context
def modules_list(ctx: click.Context, package: str | None) -> None:
    """列出可发现的模块 / List discoverable modules."""
    from ModuleKit.kernel.core import START_ORDER
    from ModuleKit.kernel.registry import ModuleRegistry

    if package is None:
        settings = _load_settings(ctx.obj["settings_path"])
        package = settings.get("modules.package", "ModuleKit.modules.builtin")

    registry = ModuleRegistry()
    registry.discover(package)

    if not len(registry):
        click.echo("没有找到模块")
        return

    for name in registry.names():
        marker = " (start order)" if name in START_ORDER else ""
        click.echo(f"  - {name}{marker}")


@cli.group()
def conf() -> None:
    """设置管理 / Settings management."""
    pass


@conf.command("show")
@click.argument("key", required=False)
@click.pass_context
def conf_show(ctx: click.Context, key: str | None) -> None:
    """显示设置 / Show settings."""
    settings = _load_settings(ctx.obj["settings_path"])

    if key:
        value = settings.get(key)
        if value is None:
            click.echo(f"键 '{key}' 不存在")
            return
        click.echo(json.dumps(value, ensure_ascii=False, indent=2))
    else:
        click.echo(json.dumps(settings.as_dict(), ensure_ascii=False, indent=2))


if __name__ == "__main__":
    cli()
