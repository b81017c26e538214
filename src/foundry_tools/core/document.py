"""
Flatten nested data documents (language files, compendium JSON) into
``{path: text}`` maps and rebuild them.

Paths join property names with a reserved separator (``:::`` by default)
because real property names may contain dots. The blacklist is matched
against the dot-joined form, which is what users type.
"""

from __future__ import annotations

import copy
import json
import logging
import re
from typing import Any, Iterable, Optional

from ..utils.config import DEFAULT_SEPARATOR
from ..utils.logger import MalformedDocumentError, PathCollisionError

logger = logging.getLogger(__name__)

PUBLIC_SEPARATOR = "."

# 中文、日文假名、韩文：含有其一即视为已翻译
_CJK_RE = re.compile(r"[\u4e00-\u9fa5\u3040-\u30ff\uac00-\ud7af]")


def parse_document(text: str | bytes) -> Any:
    """Parse JSON text, raising MalformedDocumentError on bad input."""
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedDocumentError(f"Invalid JSON: {e.msg}", position=e.pos, line=e.lineno) from e
    except UnicodeDecodeError as e:
        raise MalformedDocumentError(f"Invalid encoding: {e.reason}", position=e.start) from e


def public_key(key: str, separator: str = DEFAULT_SEPARATOR) -> str:
    """Rewrite an internal path with the user-facing separator."""
    return key.replace(separator, PUBLIC_SEPARATOR)


def is_blacklisted(key: str, blacklist: Iterable[str], separator: str = DEFAULT_SEPARATOR) -> bool:
    """True when the dot-joined key ends with any non-blank pattern."""
    normalized = public_key(key, separator)
    return any(pattern and normalized.endswith(pattern) for pattern in blacklist)


def _walk(node: Any, prefix: Optional[str], separator: str, out: dict[str, str]) -> None:
    if isinstance(node, dict):
        items = ((str(k), v) for k, v in node.items())
    elif isinstance(node, list):
        items = ((str(i), v) for i, v in enumerate(node))
    else:
        return

    for name, value in items:
        if separator in name:
            raise PathCollisionError(
                "Property name contains the path separator",
                key=name,
                separator=separator,
            )
        key = name if prefix is None else f"{prefix}{separator}{name}"
        if isinstance(value, (dict, list)):
            _walk(value, key, separator, out)
        elif isinstance(value, str):
            out[key] = value


def flatten(
    doc: Any,
    blacklist: Iterable[str] = (),
    separator: str = DEFAULT_SEPARATOR,
) -> dict[str, str]:
    """
    Flatten a document into ``{path: string}``.

    Only string leaves are emitted; numbers, booleans and nulls are skipped.
    Lists are walked with their indices as path segments. If ``doc`` is raw
    JSON text that does not parse, a warning is logged and ``{}`` returned.

    Raises:
        PathCollisionError: a property name contains ``separator``
    """
    if isinstance(doc, (str, bytes, bytearray)):
        try:
            doc = parse_document(doc)
        except MalformedDocumentError as e:
            logger.warning(f"Malformed document, nothing to translate: {e}")
            return {}

    flat: dict[str, str] = {}
    _walk(doc, None, separator, flat)

    patterns = [p for p in blacklist if p and p.strip()]
    if not patterns:
        return flat

    kept = {k: v for k, v in flat.items() if not is_blacklisted(k, patterns, separator)}
    if len(kept) != len(flat):
        logger.debug(f"Blacklist removed {len(flat) - len(kept)} of {len(flat)} entries")
    return kept


def unflatten(flat: dict[str, Any], separator: str = DEFAULT_SEPARATOR) -> dict[str, Any]:
    """Rebuild nested dicts from separator-joined keys."""
    result: dict[str, Any] = {}
    for key, value in flat.items():
        parts = key.split(separator)
        current = result
        for name in parts[:-1]:
            child = current.get(name)
            if not isinstance(child, dict):
                child = {}
                current[name] = child
            current = child
        current[parts[-1]] = value
    return result


def _index(name: str) -> Optional[int]:
    try:
        return int(name)
    except ValueError:
        return None


def unflatten_into(
    doc: Any,
    flat: dict[str, Any],
    separator: str = DEFAULT_SEPARATOR,
) -> Any:
    """
    Write flat values into a deep copy of ``doc``.

    Unlike :func:`unflatten`, the result keeps everything the flat map
    does not mention: arrays, numbers, booleans and untouched strings.
    Missing dict levels are created; paths that cannot be resolved through
    a list are skipped.
    """
    result = copy.deepcopy(doc)
    for key, value in flat.items():
        parts = key.split(separator)
        current = result
        resolved = True
        for name in parts[:-1]:
            if isinstance(current, list):
                i = _index(name)
                if i is None or not 0 <= i < len(current):
                    resolved = False
                    break
                current = current[i]
            elif isinstance(current, dict):
                child = current.get(name)
                if not isinstance(child, (dict, list)):
                    child = {}
                    current[name] = child
                current = child
            else:
                resolved = False
                break

        last = parts[-1]
        if resolved and isinstance(current, list):
            i = _index(last)
            if i is not None and 0 <= i < len(current):
                current[i] = value
                continue
        elif resolved and isinstance(current, dict):
            current[last] = value
            continue

        logger.warning(f"Cannot resolve path {public_key(key, separator)!r}, skipped")
    return result


def _string_leaves(node: Any):
    stack = [node]
    while stack:
        current = stack.pop()
        if isinstance(current, dict):
            stack.extend(current.values())
        elif isinstance(current, list):
            stack.extend(current)
        elif isinstance(current, str):
            yield current


def translation_progress(doc: Any) -> dict[str, int]:
    """
    统计文档的翻译进度

    每个字符串叶子计入 total，含中日韩文字的计入 translated。
    ``doc`` 为无法解析的 JSON 文本时返回全零。

    Returns:
        {'total': 字符串总数, 'translated': 已翻译数, 'percentage': 四舍五入的百分比}
    """
    if isinstance(doc, (str, bytes, bytearray)):
        try:
            doc = parse_document(doc)
        except MalformedDocumentError as e:
            logger.warning(f"Malformed document, progress unavailable: {e}")
            return {'total': 0, 'translated': 0, 'percentage': 0}

    total = translated = 0
    if isinstance(doc, (dict, list)):
        for value in _string_leaves(doc):
            total += 1
            if _CJK_RE.search(value):
                translated += 1

    percentage = (translated * 100 * 2 + total) // (total * 2) if total else 0
    return {'total': total, 'translated': translated, 'percentage': percentage}
