from .common import get_id, get_zh, TRANS_KEYS, ID_KEYS
from .io import (
    ensure_parent_dir, read_text_file, read_text_with_encoding, write_text_file,
    read_json_file, write_json_file, read_jsonl_lines, write_jsonl_lines,
)
from .config import EngineConfig, ConfigManager, get_config
from .logger import (
    TranslationLogger, get_logger, setup_logger,
    FoundryToolsError, FileOperationError, ScriptParseError,
    MalformedDocumentError, PathCollisionError, ConfigurationError,
)

__all__ = [
    # common utilities
    "get_id",
    "get_zh",
    # constants
    "TRANS_KEYS",
    "ID_KEYS",
    # io
    "ensure_parent_dir",
    "read_text_file",
    "read_text_with_encoding",
    "write_text_file",
    "read_json_file",
    "write_json_file",
    "read_jsonl_lines",
    "write_jsonl_lines",
    # config
    "EngineConfig",
    "ConfigManager",
    "get_config",
    # logger
    "TranslationLogger",
    "get_logger",
    "setup_logger",
    # errors
    "FoundryToolsError",
    "FileOperationError",
    "ScriptParseError",
    "MalformedDocumentError",
    "PathCollisionError",
    "ConfigurationError",
]
