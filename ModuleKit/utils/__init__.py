"""
工具模块
Utility module.
"""

from ModuleKit.utils.logging import log_labeled, setup_logging

__all__ = ["log_labeled", "setup_logging"]
