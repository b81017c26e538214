"""
汉化引擎核心模块

提供文本判定、脚本提取/回填、文档扁平化、双语对照功能
"""

from .classifier import is_translatable
from .extractor import TextRange, TranslatableUnit, scan
from .patcher import PatchResult, SafePatcher, patch, patch_source
from .document import (
    flatten, unflatten, unflatten_into, is_blacklisted, parse_document, translation_progress,
)
from .bilingual import merge_bilingual

__all__ = [
    'is_translatable',
    'TextRange',
    'TranslatableUnit',
    'scan',
    'PatchResult',
    'SafePatcher',
    'patch',
    'patch_source',
    'flatten',
    'unflatten',
    'unflatten_into',
    'is_blacklisted',
    'parse_document',
    'translation_progress',
    'merge_bilingual',
]
