"""
双语对照生成

把译文与原文逐层对齐：短字段输出"译文 原文"便于辨认，
长段落只保留译文，避免界面杂乱。
"""

from __future__ import annotations

from typing import Any

from ..utils.config import DEFAULT_THRESHOLD


def merge_bilingual(translated: Any, original: Any, threshold: int = DEFAULT_THRESHOLD) -> Any:
    """
    生成智能双语对照

    Args:
        translated: 翻译后的数据
        original: 原始数据（通常来自 .original 备份）
        threshold: 原文长度小于此值时使用双语

    Returns:
        新的数据结构（不修改输入）

    Example:
        >>> merge_bilingual({"a": "译文"}, {"a": "Text"})
        {'a': '译文 Text'}
    """
    if isinstance(translated, str):
        if isinstance(original, str) and len(original) < threshold and translated != original:
            return f"{translated} {original}"
        return translated

    if isinstance(translated, list):
        if not isinstance(original, list):
            original = []
        merged = []
        for i, item in enumerate(translated):
            counterpart = original[i] if i < len(original) and original[i] is not None else item
            merged.append(merge_bilingual(item, counterpart, threshold))
        return merged

    if isinstance(translated, dict):
        if not isinstance(original, dict):
            original = {}
        merged = {}
        for key, value in translated.items():
            counterpart = original.get(key)
            merged[key] = merge_bilingual(value, value if counterpart is None else counterpart, threshold)
        return merged

    return translated
