"""
Foundry 模块汉化引擎

定位数据文件中的可翻译文本并原样回填：
- 脚本字面量提取与回填（JS / TS）
- JSON 文档扁平化与还原
- 双语对照生成
"""

__version__ = "0.1.0"

from .core import (
    flatten,
    is_translatable,
    merge_bilingual,
    patch,
    scan,
    unflatten,
)

__all__ = [
    "utils",
    "core",
    "script",
    "scan",
    "patch",
    "flatten",
    "unflatten",
    "merge_bilingual",
    "is_translatable",
]
