#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
通用辅助函数 - 条目行（JSONL row）的字段读取
译者或翻译服务填写的行可能使用不同的字段名，这里统一处理
"""
from __future__ import annotations

from typing import Optional

# ========================================
# 常量定义（统一来源）
# ========================================

# 译文字段名称（按优先级）
TRANS_KEYS = ("zh", "cn", "zh_cn", "translation", "target", "tgt", "zh_final")

# 条目 ID 字段名称（脚本条目用 id，文档条目也可用 key）
ID_KEYS = ("id", "key")


# ========================================
# 字段提取函数
# ========================================

def get_id(obj: dict) -> Optional[str]:
    """提取条目 ID

    数字 ID 会被转换为字符串；空字符串视为缺失。

    Returns:
        ID 字符串，如果没有则返回 None
    """
    for key in ID_KEYS:
        val = obj.get(key)
        if val is None:
            continue
        if isinstance(val, str):
            if val.strip():
                return val
            continue
        return str(val)
    return None


def get_zh(obj: dict) -> tuple[Optional[str], Optional[str]]:
    """提取译文字段

    Returns:
        (field_name, value) - 字段名和译文内容，如果没有则返回 (None, None)
    """
    for key in TRANS_KEYS:
        value = obj.get(key)
        if value is not None and str(value).strip() != "":
            return key, str(value)
    return None, None

