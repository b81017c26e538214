"""
脚本文本提取器

解析 JS / TS 源码，遍历所有字符串字面量：
- 先按语法位置排除（import 路径、对象键、本地化 API 参数、比较运算）
- 再交给 is_translatable 按内容判断
- 以字节区间生成条目 ID（"start-end"），仅在同一次扫描内有效
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Optional

from ..script.parser import (
    SITE_BINARY_OPERAND,
    SITE_CALL_ARGUMENT,
    SITE_IMPORT_SOURCE,
    SITE_PROPERTY_KEY,
    LiteralSite,
    parse_literals,
)
from .classifier import is_translatable

logger = logging.getLogger(__name__)

# game.i18n.localize("KEY") / game.i18n.format("KEY", {...})
LOCALIZE_METHODS = frozenset({"localize", "format"})
# Hooks.on("ready", ...) / Hooks.once(...) / Hooks.call(...)
HOOK_OBJECTS = frozenset({"Hooks"})
# libWrapper.register("module-id", "Target.prototype.fn", ...)
SHIM_OBJECTS = frozenset({"libWrapper"})

_LINE_SPLIT_RE = re.compile(r"\r?\n")


@dataclass(frozen=True)
class TextRange:
    start: int
    end: int


@dataclass(frozen=True)
class TranslatableUnit:
    """一个待翻译的字符串字面量"""

    id: str
    original: str
    context: str
    range: TextRange
    line: int
    column: int
    quote: str

    @property
    def start(self) -> int:
        return self.range.start

    @property
    def end(self) -> int:
        return self.range.end

    def to_row(self, file: Optional[str] = None) -> dict[str, Any]:
        """转换为 JSONL 行"""
        row: dict[str, Any] = {
            "id": self.id,
            "en": self.original,
            "context": self.context,
            "start": self.start,
            "end": self.end,
            "line": self.line,
            "col": self.column,
            "quote": self.quote,
        }
        if file is not None:
            row["file"] = file
        return row


def make_unit_id(start: int, end: int) -> str:
    return f"{start}-{end}"


def _is_lookup_call(site: LiteralSite) -> bool:
    prop = site.callee_property
    obj = site.callee_object

    if prop in LOCALIZE_METHODS:
        return True
    if prop == "get":
        # game.settings.get("module", "key") / modules.get("module-id")
        if site.arg_index == 1:
            return True
        if site.arg_index == 0 and (site.arg_count == 2 or obj == "modules"):
            return True
    if obj in HOOK_OBJECTS and site.arg_index == 0:
        return True
    if obj in SHIM_OBJECTS and site.arg_index in (0, 1):
        return True
    return False


def is_excluded_site(site: LiteralSite) -> bool:
    """按语法位置排除字面量（与字符串内容无关）"""
    if site.kind in (SITE_IMPORT_SOURCE, SITE_PROPERTY_KEY, SITE_BINARY_OPERAND):
        return True
    if site.kind == SITE_CALL_ARGUMENT:
        return _is_lookup_call(site)
    return False


def scan(source_text: str, dialect: str = "javascript") -> list[TranslatableUnit]:
    """
    扫描脚本源码，返回按起始偏移升序排列的待翻译条目

    Args:
        source_text: 源码文本
        dialect: "javascript" / "typescript" / "tsx"

    Returns:
        条目列表

    Raises:
        ScriptParseError: 源码无法解析，不返回部分结果
    """
    literals = parse_literals(source_text, dialect)
    lines = _LINE_SPLIT_RE.split(source_text)

    units: list[TranslatableUnit] = []
    for lit in literals:
        if is_excluded_site(lit.site):
            continue
        if not is_translatable(lit.value):
            continue
        row = lit.line - 1
        context = lines[row].strip() if 0 <= row < len(lines) else ""
        units.append(TranslatableUnit(
            id=make_unit_id(lit.start, lit.end),
            original=lit.value,
            context=context,
            range=TextRange(lit.start, lit.end),
            line=lit.line,
            column=lit.column,
            quote=lit.quote,
        ))

    logger.debug(f"Scanned {len(literals)} literals, {len(units)} translatable")
    return units
