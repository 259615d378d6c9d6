"""
命令行模块
CLI module.
"""

from ModuleKit.cli.main import cli

__all__ = ["cli"]
