"""
文件 I/O 工具函数

提供安全的文件读写功能：
- 多编码回退读取
- 原子写入（防止数据损坏）
- JSON / JSONL 读写支持
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Iterable

from .logger import FileOperationError

# 获取模块级 logger
logger = logging.getLogger(__name__)


def ensure_parent_dir(path: str | Path) -> Path:
    """确保父目录存在"""
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    return p


def read_text_with_encoding(path: str | Path, encoding: str = 'utf-8') -> tuple[str, str]:
    """以 UTF-8 优先读取，失败时对常见编码回退，同时返回实际使用的编码。

    尝试顺序：指定编码 -> utf-8-sig -> cp1252 -> latin1
    换行符原样保留（\\r\\n 不会被转换），字节偏移与磁盘文件一致。

    Raises:
        FileOperationError: 文件不存在或无法读取
    """
    p = Path(path)
    if not p.is_file():
        raise FileOperationError("File not found", file_path=p)
    try:
        raw = p.read_bytes()
    except OSError as e:
        raise FileOperationError(f"Cannot read file: {e}", file_path=p) from e
    for enc in (encoding, 'utf-8-sig', 'cp1252', 'latin1'):
        try:
            return raw.decode(enc), enc
        except UnicodeDecodeError:
            continue
    raise FileOperationError("Cannot decode file", file_path=p)


def read_text_file(path: str | Path, encoding: str = 'utf-8') -> str:
    """读取文本文件（编码回退规则见 read_text_with_encoding）"""
    return read_text_with_encoding(path, encoding)[0]


def _atomic_write(p: Path, write_fn, encoding: str) -> None:
    # 原子写入：先写入临时文件，再重命名
    fd, tmp_path = tempfile.mkstemp(dir=p.parent, prefix=f".{p.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, 'w', encoding=encoding, newline='') as f:
            write_fn(f)
        os.replace(tmp_path, p)
    except Exception:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise


def write_text_file(
    path: str | Path,
    text: str,
    encoding: str = 'utf-8',
    atomic: bool = True
) -> None:
    """写入文本文件（不做换行符转换，保证字节一致）

    Args:
        path: 文件路径
        text: 文件内容
        encoding: 编码
        atomic: 是否使用原子写入（先写临时文件再重命名）

    Raises:
        FileOperationError: 文本无法用指定编码表示
    """
    p = ensure_parent_dir(path)
    try:
        if atomic:
            _atomic_write(p, lambda f: f.write(text), encoding)
        else:
            with p.open('w', encoding=encoding, newline='') as f:
                f.write(text)
    except UnicodeEncodeError as e:
        raise FileOperationError(f"Cannot encode text as {encoding}", file_path=p, reason=e.reason) from e


def read_json_file(path: str | Path) -> Any:
    """读取 JSON 文件（json.JSONDecodeError 由调用方处理）"""
    return json.loads(read_text_file(path))


def write_json_file(path: str | Path, data: Any, indent: int = 2) -> None:
    """以 UTF-8、保留非 ASCII 字符的方式写入 JSON"""
    write_text_file(path, json.dumps(data, ensure_ascii=False, indent=indent) + "\n")


def read_jsonl_lines(
    path: str | Path,
    skip_invalid: bool = True,
    log_errors: bool = True
) -> list[Dict[str, Any]]:
    """读取 JSONL 文件

    Args:
        path: 文件路径
        skip_invalid: 是否跳过无效行
        log_errors: 是否记录解析错误

    Returns:
        解析后的对象列表
    """
    p = Path(path)
    out: list[Dict[str, Any]] = []
    error_count = 0

    with p.open('r', encoding='utf-8') as f:
        for line_num, line in enumerate(f, 1):
            if not line.strip():
                continue
            try:
                out.append(json.loads(line))
            except json.JSONDecodeError as e:
                error_count += 1
                if log_errors:
                    logger.warning(f"JSONL parse error at {p.name}:{line_num}: {e}")
                if not skip_invalid:
                    raise

    if error_count > 0 and log_errors:
        logger.warning(f"Skipped {error_count} invalid lines in {p.name}")

    return out


def write_jsonl_lines(
    path: str | Path,
    rows: Iterable[Dict[str, Any]],
    atomic: bool = True
) -> int:
    """写入 JSONL 文件

    Returns:
        写入的行数
    """
    p = ensure_parent_dir(path)
    count = 0

    def _write(f):
        nonlocal count
        for obj in rows:
            f.write(json.dumps(obj, ensure_ascii=False) + "\n")
            count += 1

    if atomic:
        _atomic_write(p, _write, 'utf-8')
    else:
        with p.open('w', encoding='utf-8') as f:
            _write(f)

    return count
