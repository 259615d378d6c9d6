"""
模块系统 - Module 是 ModuleKit 的扩展单元
Module system - a Module is the unit of extension in ModuleKit.
"""

from ModuleKit.modules.base import Module

__all__ = ["Module"]
