"""Utility helpers for server-rendered views."""
from .classnames import class_group, class_names, cn, merge_classes

__all__ = [
    "cn",
    "class_names",
    "merge_classes",
    "class_group",
]
