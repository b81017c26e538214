"""
文本候选判定

判断一个字符串字面量是否是给人看的文本（需要翻译），
而不是标识符、路径、模板表达式或纯标记。

宁可漏判也不要误判：漏掉的句子可以由用户手动补回，
而被"翻译"的标识符会让模块在运行时静默出错。
"""

from __future__ import annotations

import re

# 以这些字符开头的多为引用、模板表达式或私有键：@UUID[...]、#id、${...}、_private
_RESERVED_START_RE = re.compile(r"^[@#$!{_]")
# 至少包含一个拉丁字母或中日韩统一表意文字
_LETTER_RE = re.compile(r"[a-zA-Z\u4e00-\u9fa5]")
# 小写开头的标识符：spell, my_module_setting, lib-wrapper
_CODE_ID_RE = re.compile(r"^[a-z][a-zA-Z0-9_.-]*$")
# 全大写常量：MAX_WIDTH, MIXED
_CONST_RE = re.compile(r"^[A-Z0-9_]+$")
_TAG_RE = re.compile(r"<[^>]+>")

PATH_SEPARATORS = ("/", "\\")


def strip_markup(s: str) -> str:
    """去除 <...> 标签，保留其间文本"""
    return _TAG_RE.sub("", s or "")


def is_translatable(value: str) -> bool:
    """
    判断字符串是否为翻译候选

    规则按顺序匹配，命中即返回：
        1. 去空白后长度 < 2
        2. 以 @ # $ ! { _ 开头
        3. 含路径分隔符且无空格
        4. 含 "." 且无空格（点号键名，如 PF1.AmmoDepleted）
        5. 不含任何字母
        6. 无空格时，形如小写标识符或全大写常量
        7. 去除标签后为空（纯标记，如 <i class="fas fa-check"></i>）

    Args:
        value: 字面量的值（已反转义）

    Returns:
        是否应当提取翻译
    """
    if not isinstance(value, str):
        return False

    trimmed = value.strip()
    if len(trimmed) < 2:
        return False

    if _RESERVED_START_RE.match(trimmed):
        return False

    has_space = " " in trimmed

    if not has_space and any(sep in trimmed for sep in PATH_SEPARATORS):
        return False

    if not has_space and "." in trimmed:
        return False

    if not _LETTER_RE.search(trimmed):
        return False

    if not has_space:
        if _CODE_ID_RE.match(trimmed):
            return False
        if _CONST_RE.match(trimmed):
            return False

    if not strip_markup(trimmed).strip():
        return False

    return True
