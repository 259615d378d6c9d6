"""
内置模块 - 让宿主可以独立启动的最小协作者集合
Builtin modules - the smallest collaborator set that lets a host boot alone.

这里的每个非私有子模块都会被注册表自动发现。
Every non-private submodule here is picked up by registry discovery.
"""
