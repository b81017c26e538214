"""
Configuration management for the localisation engine.

The config file also carries the user's key blacklist, so ConfigManager
doubles as the blacklist provider handed to the document flattener.
"""

from __future__ import annotations

import json
import logging
import os
import threading
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)

DEFAULT_SEPARATOR = ":::"
DEFAULT_THRESHOLD = 50


@dataclass
class EngineConfig:
    """Engine configuration settings."""

    # Document flattening
    separator: str = DEFAULT_SEPARATOR
    blacklist: list[str] = field(default_factory=list)

    # Bilingual export
    bilingual_threshold: int = DEFAULT_THRESHOLD

    # Files
    backup_suffix: str = ".original"
    translated_suffix: str = "_zh"

    # Script patching
    verify_patches: bool = True

    def __post_init__(self):
        """Validate field values after initialization."""
        if not self.separator:
            logger.warning(f"separator must not be empty, using {DEFAULT_SEPARATOR!r}")
            self.separator = DEFAULT_SEPARATOR
        if self.bilingual_threshold < 0:
            logger.warning(f"bilingual_threshold must be >= 0, got {self.bilingual_threshold}, using 0")
            self.bilingual_threshold = 0
        if not self.backup_suffix:
            logger.warning("backup_suffix must not be empty, using '.original'")
            self.backup_suffix = ".original"
        self.blacklist = [p for p in self.blacklist if isinstance(p, str) and p.strip()]


def _default_config_path() -> Path:
    """获取默认配置路径，支持环境变量覆盖"""
    p = os.environ.get("FOUNDRY_TOOLS_CONFIG")
    if p:
        return Path(p)
    return Path.cwd() / "config.json"


class ConfigManager:
    """Manage engine configuration with automatic save/load."""

    def __init__(self, config_path: Optional[Path] = None):
        """
        Initialize config manager.

        Args:
            config_path: Path to config file. Defaults to $FOUNDRY_TOOLS_CONFIG
                or ./config.json
        """
        self.config_path = Path(config_path) if config_path else _default_config_path()
        self._lock = threading.Lock()
        self.config = self.load()

    def load(self) -> EngineConfig:
        """Load configuration from file."""
        if not self.config_path.exists():
            return EngineConfig()

        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                data = json.load(f)

            # Filter out unknown keys to avoid TypeError
            valid_fields = {f.name for f in EngineConfig.__dataclass_fields__.values()}
            filtered_data = {k: v for k, v in data.items() if k in valid_fields}

            return EngineConfig(**filtered_data)
        except (json.JSONDecodeError, TypeError, AttributeError) as e:
            logger.warning(f"Failed to load config: {e}, using defaults")
            return EngineConfig()
        except OSError as e:
            logger.warning(f"Config file I/O error: {e}, using defaults")
            return EngineConfig()

    def save(self) -> bool:
        """Save configuration to file."""
        try:
            with self._lock:
                data = asdict(self.config)
                self.config_path.parent.mkdir(parents=True, exist_ok=True)
                with open(self.config_path, 'w', encoding='utf-8') as f:
                    json.dump(data, f, indent=2, ensure_ascii=False)
            return True
        except OSError as e:
            logger.error(f"Failed to save config: {e}")
            return False
        except (TypeError, ValueError) as e:
            logger.error(f"Config serialization error: {e}")
            return False

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value."""
        return getattr(self.config, key, default)

    def set(self, key: str, value: Any, auto_save: bool = True) -> bool:
        """Set configuration value."""
        if not hasattr(self.config, key):
            logger.warning(f"Unknown config key: {key}")
            return False

        with self._lock:
            setattr(self.config, key, value)

        if auto_save:
            return self.save()
        return True

    def get_blacklist(self) -> list[str]:
        """Blacklisted key suffixes, sorted."""
        with self._lock:
            return sorted(set(self.config.blacklist))

    def add_blacklist_pattern(self, pattern: str) -> bool:
        """Add a key suffix to the blacklist."""
        if not pattern or not pattern.strip():
            return False
        with self._lock:
            if pattern not in self.config.blacklist:
                self.config.blacklist.append(pattern)
        return self.save()

    def remove_blacklist_pattern(self, pattern: str) -> bool:
        """Remove a key suffix from the blacklist."""
        with self._lock:
            if pattern not in self.config.blacklist:
                return False
            self.config.blacklist.remove(pattern)
        return self.save()

    def reset_to_defaults(self) -> bool:
        """Reset configuration to default values."""
        with self._lock:
            self.config = EngineConfig()
        return self.save()


# Global config instance with thread safety
_config_manager: Optional[ConfigManager] = None
_config_lock = threading.Lock()


def get_config() -> ConfigManager:
    """Get global config manager instance (thread-safe singleton)."""
    global _config_manager
    if _config_manager is None:
        with _config_lock:
            # Double-check locking pattern
            if _config_manager is None:
                _config_manager = ConfigManager()
    return _config_manager
