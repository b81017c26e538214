"""
批量文件处理

把纯函数引擎接到磁盘文件上：
- 一个文件解析失败只记录错误，不中断整批
- JSON 文档首次加载时自动创建 .original 备份，供双语导出对照
- 条目可导出为 JSONL，交给译者或翻译服务填写后再读回
"""

from __future__ import annotations

import json
import logging
import shutil
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional

from ..script.parser import dialect_for
from ..utils.common import get_id, get_zh
from ..utils.config import get_config
from ..utils.io import (
    read_json_file,
    read_text_file,
    read_text_with_encoding,
    write_json_file,
    write_jsonl_lines,
    write_text_file,
)
from ..utils.logger import FileOperationError, FoundryToolsError, get_logger
from .bilingual import merge_bilingual
from .document import flatten, translation_progress, unflatten, unflatten_into
from .extractor import TranslatableUnit, scan
from .patcher import patch_source

logger = logging.getLogger(__name__)


def scan_file(path: str | Path, dialect: Optional[str] = None) -> list[TranslatableUnit]:
    """读取并扫描单个脚本文件

    Raises:
        ScriptParseError / FileOperationError / ConfigurationError
    """
    p = Path(path)
    return scan(read_text_file(p), dialect or dialect_for(p))


def scan_files(paths: Iterable[str | Path], show_progress: bool = False) -> dict:
    """
    批量扫描脚本文件

    Returns:
        {
            'success': {路径: 条目列表},
            'failed': [{'file': 路径, 'error': 错误信息}]
        }
    """
    paths = [Path(p) for p in paths]
    success: dict[str, list[TranslatableUnit]] = {}
    failed: list[dict[str, str]] = []

    log = get_logger()
    with log.timer(f"Scanning {len(paths)} files"), \
            log.progress(len(paths), "Scanning", disable=not show_progress) as update:
        for p in paths:
            try:
                success[str(p)] = scan_file(p)
            except FoundryToolsError as e:
                logger.error(f"Skipped {p}: {e}")
                failed.append({'file': str(p), 'error': str(e)})
            update(1)

    return {'success': success, 'failed': failed}


def export_units(paths: Iterable[str | Path], out_path: str | Path) -> dict:
    """扫描脚本并把条目写入 JSONL（每行带 file 字段）"""
    result = scan_files(paths)
    rows = [
        unit.to_row(file=file)
        for file, units in result['success'].items()
        for unit in units
    ]
    count = write_jsonl_lines(out_path, rows)
    logger.info(f"Exported {count} units to {out_path}")
    return {'count': count, 'failed': result['failed']}


def translations_from_rows(rows: Iterable[Mapping[str, Any]]) -> dict[str, str]:
    """从已填写的 JSONL 行生成 {条目ID: 译文}，未翻译的行被忽略"""
    out: dict[str, str] = {}
    for row in rows:
        uid = get_id(row)
        _, zh = get_zh(row)
        if uid is not None and zh is not None:
            out[uid] = zh
    return out


def translated_output_path(path: str | Path) -> Path:
    """script.js -> script_zh.js"""
    p = Path(path)
    suffix = get_config().get("translated_suffix", "_zh")
    return p.with_name(f"{p.stem}{suffix}{p.suffix}")


def patch_file(
    path: str | Path,
    translations: Mapping[str, Optional[str]],
    out_path: Optional[str | Path] = None,
) -> Path:
    """
    回填单个脚本文件，默认另存为 <stem>_zh<suffix>

    输出沿用源文件读取时的编码，译文无法用该编码表示时报错且不写入。

    Returns:
        输出路径

    Raises:
        FileOperationError: 读取失败或译文无法编码
    """
    p = Path(path)
    target = Path(out_path) if out_path else translated_output_path(p)
    text, encoding = read_text_with_encoding(p)
    result = patch_source(text, translations, dialect_for(p))
    write_text_file(target, result.text, encoding=encoding)
    logger.info(f"Patched {len(result.applied)} units: {p} -> {target}")
    if result.stale:
        logger.warning(f"{len(result.stale)} translations no longer match {p}, re-scan needed")
    return target


def backup_path(path: str | Path) -> Path:
    p = Path(path)
    return p.with_name(p.name + get_config().get("backup_suffix", ".original"))


def ensure_backup(path: str | Path) -> Path:
    """首次处理时创建 <file>.original 备份，已存在则不覆盖"""
    backup = backup_path(path)
    if not backup.exists():
        shutil.copy2(path, backup)
        logger.info(f"Created original backup: {backup}")
    return backup


def load_document(
    path: str | Path,
    blacklist: Optional[Iterable[str]] = None,
    create_backup: bool = True,
) -> dict[str, str]:
    """
    读取 JSON 文档并扁平化

    文档格式错误时返回空字典（视为无可翻译内容）。
    blacklist 为 None 时使用配置中的黑名单。
    """
    p = Path(path)
    text = read_text_file(p)
    if create_backup:
        ensure_backup(p)
    config = get_config()
    if blacklist is None:
        blacklist = config.get_blacklist()
    return flatten(text, blacklist, separator=config.get("separator"))


def save_document(
    path: str | Path,
    flat: Mapping[str, Any],
    template: Any = None,
) -> None:
    """把 {路径: 译文} 还原为嵌套结构并写回

    提供 template（原始文档）时保留其中的数组和非字符串值。
    """
    separator = get_config().get("separator")
    if template is None:
        data = unflatten(dict(flat), separator)
    else:
        data = unflatten_into(template, dict(flat), separator)
    write_json_file(path, data)


def document_progress(path: str | Path) -> dict[str, int]:
    """统计 JSON 文件的翻译进度；非 JSON 或无法读取的文件记为全零"""
    p = Path(path)
    if p.suffix.lower() != ".json":
        return translation_progress(None)
    try:
        text = read_text_file(p)
    except FileOperationError as e:
        logger.error(f"Cannot compute progress for {p}: {e}")
        return translation_progress(None)
    return translation_progress(text)


def export_bilingual(
    translated_path: str | Path,
    out_path: str | Path,
    original_path: Optional[str | Path] = None,
    threshold: Optional[int] = None,
) -> Path:
    """
    生成双语对照 JSON

    Args:
        translated_path: 已翻译的 JSON 文件
        out_path: 输出路径
        original_path: 原文文件，默认 <translated_path>.original
        threshold: 双语长度阈值，默认取配置
    """
    original_path = Path(original_path) if original_path else backup_path(translated_path)
    if threshold is None:
        threshold = get_config().get("bilingual_threshold")
    try:
        original = read_json_file(original_path)
    except (FoundryToolsError, json.JSONDecodeError) as e:
        # 没有原文可对照时按"全部未变"处理
        logger.warning(f"Original not available ({e}), exporting translation only")
        original = {}
    merged = merge_bilingual(read_json_file(translated_path), original, threshold)
    write_json_file(out_path, merged)
    return Path(out_path)
