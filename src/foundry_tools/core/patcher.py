"""
脚本回填器

- patch(): 重新扫描源码，按条目 ID 把译文写回对应字面量，
  区间外的每个字节（空白、注释、格式）原样保留
- SafePatcher: 批量回填文件，自动备份、可选语法验证、失败可回滚
"""

from __future__ import annotations

import logging
import re
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Mapping, Optional

from ..script.parser import dialect_for, parse_literals
from ..utils.config import get_config
from ..utils.io import read_text_with_encoding, write_text_file
from ..utils.logger import FoundryToolsError
from .extractor import scan

logger = logging.getLogger(__name__)

_LINE_TERMINATOR_RE = re.compile(r"[\r\n\u2028\u2029]")

Edit = tuple[int, int, str]


@dataclass
class PatchResult:
    """一次回填的结果"""
    text: str
    applied: list[str] = field(default_factory=list)
    stale: list[str] = field(default_factory=list)


def escape_for_quote(text: str, quote: str) -> str:
    """只转义与定界符相同的引号，另一种引号原样保留"""
    if quote in ("'", '"'):
        return text.replace(quote, "\\" + quote)
    return text


def apply_edits(data: bytes, edits: list[Edit]) -> bytes:
    """
    按原始偏移一次性应用所有替换

    Args:
        data: 原始字节
        edits: [(start, end, replacement)]，区间互不重叠

    Returns:
        替换后的字节
    """
    out = bytearray()
    pos = 0
    for start, end, replacement in sorted(edits, key=lambda e: e[0]):
        if start < pos:
            raise ValueError(f"Overlapping edit at {start}-{end}")
        out += data[pos:start]
        out += replacement.encode("utf-8")
        pos = end
    out += data[pos:]
    return bytes(out)


def patch_source(
    source_text: str,
    id_to_translation: Mapping[str, Optional[str]],
    dialect: str = "javascript",
) -> PatchResult:
    """
    回填译文并返回明细（已应用的 ID、找不到的过期 ID）

    值为 None 的条目视为未翻译，跳过。

    Raises:
        ScriptParseError: 源码无法解析
    """
    if not id_to_translation:
        return PatchResult(text=source_text)

    data = source_text.encode("utf-8")
    units = scan(source_text, dialect)

    edits: list[Edit] = []
    applied: list[str] = []
    for unit in units:
        translated = id_to_translation.get(unit.id)
        if translated is None:
            continue
        quote = data[unit.start:unit.start + 1].decode("utf-8")
        if _LINE_TERMINATOR_RE.search(translated):
            logger.warning(f"Translation for {unit.id} contains a line break; written unescaped")
        edits.append((unit.start, unit.end, quote + escape_for_quote(translated, quote) + quote))
        applied.append(unit.id)

    known = {unit.id for unit in units}
    stale = [uid for uid in id_to_translation if uid not in known]
    if stale:
        logger.debug(f"Ignored {len(stale)} stale ids: {stale[:5]}")

    if not edits:
        return PatchResult(text=source_text, stale=stale)
    return PatchResult(
        text=apply_edits(data, edits).decode("utf-8"),
        applied=applied,
        stale=stale,
    )


def patch(
    source_text: str,
    id_to_translation: Mapping[str, Optional[str]],
    dialect: str = "javascript",
) -> str:
    """回填译文，返回新的源码文本"""
    return patch_source(source_text, id_to_translation, dialect).text


class SafePatcher:
    """安全的文件回填器"""

    def __init__(self, backup_dir: Path, verify: Optional[bool] = None, dialect: Optional[str] = None):
        """
        初始化回填器

        Args:
            backup_dir: 备份目录
            verify: 是否重新解析回填结果以验证语法；None 时取配置 verify_patches
            dialect: 固定语法；None 时按文件后缀判断
        """
        self.backup_dir = Path(backup_dir)
        self.verify = get_config().get("verify_patches", True) if verify is None else verify
        self.dialect = dialect
        self.patched_files: list[tuple[Path, Path]] = []

    def _dialect(self, path: Path) -> str:
        return self.dialect or dialect_for(path)

    def patch_with_rollback(
        self,
        target_dir: Path,
        trans_data: Mapping[str, Mapping[str, Optional[str]]],
        patch_fn: Optional[Callable[[str, Mapping[str, Optional[str]]], str]] = None
    ) -> dict:
        """
        安全回填（支持回滚）

        Args:
            target_dir: 目标目录
            trans_data: 翻译数据 {相对路径: {条目ID: 译文}}
            patch_fn: 自定义回填函数 (原文本, 翻译数据) -> 新文本

        Returns:
            {
                'success': 成功文件列表,
                'failed': 失败文件列表,
                'stale': {相对路径: 过期ID列表},
                'rollback': 回滚函数
            }
        """
        target_dir = Path(target_dir)
        root = target_dir.resolve()
        self.backup_dir.mkdir(parents=True, exist_ok=True)

        success = []
        failed = []
        stale: dict[str, list[str]] = {}

        for rel_path, trans in trans_data.items():
            target_file = target_dir / rel_path

            if not target_file.resolve().is_relative_to(root):
                logger.warning(f"Unsafe path rejected: {rel_path}")
                failed.append({'file': str(rel_path), 'error': 'Unsafe path'})
                continue

            if not target_file.exists():
                logger.warning(f"Target file not found: {target_file}")
                failed.append({'file': str(rel_path), 'error': 'File not found'})
                continue

            try:
                # 1. 备份
                backup_file = self.backup_dir / rel_path
                backup_file.parent.mkdir(parents=True, exist_ok=True)
                shutil.copy2(target_file, backup_file)

                # 2. 读取原文
                original, encoding = read_text_with_encoding(target_file)

                # 3. 回填
                if patch_fn:
                    patched = patch_fn(original, trans)
                else:
                    result = patch_source(original, trans, self._dialect(target_file))
                    patched = result.text
                    if result.stale:
                        stale[str(rel_path)] = result.stale

                # 4. 验证（可选）
                if self.verify:
                    parse_literals(patched, self._dialect(target_file))

                # 5. 写入
                write_text_file(target_file, patched, encoding=encoding)

                success.append(str(rel_path))
                self.patched_files.append((target_file, backup_file))
                logger.info(f"Patched: {rel_path}")

            except (FoundryToolsError, OSError, ValueError) as e:
                logger.error(f"Failed to patch {rel_path}: {e}")
                failed.append({'file': str(rel_path), 'error': str(e)})

        return {
            'success': success,
            'failed': failed,
            'stale': stale,
            'rollback': self._create_rollback_fn()
        }

    def _create_rollback_fn(self):
        """创建回滚函数"""
        patched = list(self.patched_files)

        def rollback():
            """回滚所有已回填的文件"""
            rollback_count = 0
            for target, backup in patched:
                try:
                    shutil.copy2(backup, target)
                    rollback_count += 1
                    logger.info(f"Rolled back: {target}")
                except OSError as e:
                    logger.error(f"Failed to rollback {target}: {e}")

            logger.info(f"Rolled back {rollback_count}/{len(patched)} files")

        return rollback
