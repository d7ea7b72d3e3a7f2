# ============================================================================
# FILE: config.py
# RELPATH: txtarchive/src/txtarchive/core/config.py
# PROJECT: Text Archive Tool v1.0
# TEAM: Ringo (Owner), John (Lead Dev), George (Architect), Paul (Lead Analyst)
# VERSION: 1.0.0
# LIFECYCLE: Proposed
# DESCRIPTION: JSON-backed configuration for decoder, edit and I/O policies
# ============================================================================

"""
Configuration Manager for Text Archive Tool v1.0.

Loads, saves and validates ``txtar_config.json``. Sections:

- ``global_settings``: log directory
- ``encoding``: detection policy (``EncodingConfig``)
- ``decoder``: tag strictness and verbosity
- ``edits``: edit application policy
- ``extract``: extraction defaults for the ``x`` command
- ``create``: input filtering for the ``create`` command
"""

import json
from pathlib import Path
from typing import Any, Dict

from txtarchive.core.detection import EncodingConfig
from txtarchive.core.exceptions import (
    ConfigError,
    ConfigLoadError,
    ConfigValidationError,
)

OVERWRITE_POLICIES = ["prompt", "skip", "rename", "overwrite"]


class ConfigManager:
    """
    Manages the tool configuration file.

    Missing files are created with DEFAULT_CONFIG. Sections absent from an
    existing file fall back to their defaults on load; unknown keys are kept.
    """

    DEFAULT_CONFIG = {
        "global_settings": {
            "log_dir": "logs",
        },
        "encoding": {
            "check_content_markers": True,
            "validate_utf8": True,
        },
        "decoder": {
            "strict_tags": False,
            "verbose": 0,
        },
        "edits": {
            "require_unique": False,
        },
        "extract": {
            "include_snippets": False,
            "overwrite_policy": "prompt",
            "apply_edits": False,
        },
        "create": {
            "allow_globs": None,
            "deny_globs": ["**/.git/**", "**/__pycache__/**"],
            "max_file_mb": 10,
        },
    }

    def __init__(self, config_file: str = "txtar_config.json"):
        """
        Args:
            config_file: Path to configuration file
        """
        self.config_file = Path(config_file)
        self.config: Dict = {}
        self._load_or_create()

    def _load_or_create(self) -> None:
        if self.config_file.exists():
            self.load()
        else:
            self.config = self._deep_copy(self.DEFAULT_CONFIG)
            self.save()

    def load(self) -> Dict:
        """
        Load configuration from file, filling in missing sections.

        Raises:
            ConfigLoadError: If file cannot be loaded or parsed
        """
        try:
            text = self.config_file.read_text(encoding='utf-8')
            data = json.loads(text)
        except FileNotFoundError:
            raise ConfigLoadError(str(self.config_file), "File not found")
        except json.JSONDecodeError as e:
            raise ConfigLoadError(str(self.config_file), f"Invalid JSON: {e}")
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigLoadError(str(self.config_file), str(e))

        if not isinstance(data, dict):
            raise ConfigLoadError(str(self.config_file), "Top-level JSON value must be an object")

        self.config = self._merge_defaults(data)
        return self.config

    def save(self) -> None:
        """
        Raises:
            ConfigError: If file cannot be written
        """
        try:
            text = json.dumps(self.config, indent=2, ensure_ascii=False)
            self.config_file.write_text(text, encoding='utf-8')
        except (OSError, TypeError) as e:
            raise ConfigError(f"Failed to save config: {e}")

    def _merge_defaults(self, data: Dict) -> Dict:
        merged = self._deep_copy(self.DEFAULT_CONFIG)
        for section, values in data.items():
            if isinstance(values, dict) and isinstance(merged.get(section), dict):
                merged[section].update(self._deep_copy(values))
            else:
                merged[section] = self._deep_copy(values)
        return merged

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get configuration value using dot-notation path.

        Args:
            key_path: Dot-separated path (e.g., 'decoder.strict_tags')
            default: Default value if key not found
        """
        value = self.config
        for key in key_path.split('.'):
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default
        return value

    def set(self, key_path: str, value: Any) -> None:
        """Set configuration value using dot-notation path."""
        keys = key_path.split('.')
        target = self.config
        for key in keys[:-1]:
            if key not in target:
                target[key] = {}
            target = target[key]
        target[keys[-1]] = value

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate(self) -> bool:
        """
        Validate configuration values.

        Raises:
            ConfigValidationError: If validation fails
        """
        for section in ("encoding", "decoder", "edits", "extract", "create"):
            if not isinstance(self.config.get(section), dict):
                raise ConfigValidationError(section, self.config.get(section),
                                            f"Required section '{section}' missing")

        for key in ("encoding.check_content_markers", "encoding.validate_utf8",
                    "decoder.strict_tags", "edits.require_unique",
                    "extract.include_snippets", "extract.apply_edits"):
            self._validate_bool(key)

        self._validate_verbose()
        self._validate_overwrite_policy()
        self._validate_globs("create.allow_globs", allow_none=True)
        self._validate_globs("create.deny_globs", allow_none=False)
        self._validate_max_file_mb()
        return True

    def _validate_bool(self, key: str) -> None:
        value = self.get(key)
        if not isinstance(value, bool):
            raise ConfigValidationError(key, value, "Must be true or false")

    def _validate_verbose(self) -> None:
        value = self.get('decoder.verbose')
        if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= 3:
            raise ConfigValidationError('decoder.verbose', value, "Must be an integer from 0 to 3")

    def _validate_overwrite_policy(self) -> None:
        value = self.get('extract.overwrite_policy')
        if value not in OVERWRITE_POLICIES:
            raise ConfigValidationError(
                'extract.overwrite_policy',
                value,
                f"Must be one of: {', '.join(OVERWRITE_POLICIES)}"
            )

    def _validate_globs(self, key: str, allow_none: bool) -> None:
        value = self.get(key)
        if value is None and allow_none:
            return
        if not isinstance(value, list) or not all(isinstance(p, str) for p in value):
            raise ConfigValidationError(key, value, "Must be a list of glob strings")

    def _validate_max_file_mb(self) -> None:
        value = self.get('create.max_file_mb')
        if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
            raise ConfigValidationError('create.max_file_mb', value, "Must be a positive number")

    # ------------------------------------------------------------------
    # Typed views
    # ------------------------------------------------------------------

    def encoding_config(self) -> EncodingConfig:
        return EncodingConfig(
            check_content_markers=bool(self.get('encoding.check_content_markers', True)),
            validate_utf8=bool(self.get('encoding.validate_utf8', True)),
        )

    def decoder_options(self) -> Dict[str, Any]:
        """Keyword arguments for ``Decoder``."""
        return {
            "verbose": int(self.get('decoder.verbose', 0)),
            "strict_tags": bool(self.get('decoder.strict_tags', False)),
        }

    def _deep_copy(self, obj: Any) -> Any:
        if isinstance(obj, dict):
            return {k: self._deep_copy(v) for k, v in obj.items()}
        elif isinstance(obj, list):
            return [self._deep_copy(item) for item in obj]
        else:
            return obj

    def reset_to_defaults(self) -> None:
        self.config = self._deep_copy(self.DEFAULT_CONFIG)
        self.save()

    def export_dict(self) -> Dict:
        """Return a deep copy of the configuration."""
        return self._deep_copy(self.config)


# ============================================================================
# LIFECYCLE STATUS: Proposed
# NEXT STEPS: None
# DEPENDENCIES: detection.py, exceptions.py
# TESTS: tests/unit/test_config.py
# ============================================================================
