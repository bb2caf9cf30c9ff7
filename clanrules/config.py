"""
Configuration management for rule reviews.

Supports:
- Loading config from YAML
- Merging overrides
- Config validation with Pydantic
- Config hashing for reproducibility
"""

import hashlib
import logging
from pathlib import Path
from typing import Any, Optional, Union

import yaml
from pydantic import BaseModel, Field, ValidationError

from .lists.parser import ListKind, ParsedRuleList, read_rule_file
from .rules.schemas import CORRECTION_FIELDS, CorrectionRule, ValidationRuleEntry, VALIDATION_FIELDS

logger = logging.getLogger(__name__)


class ConfigError(ValueError):
    """Raised when a config file cannot be turned into an EngineConfig."""


# =============================================================================
# Pydantic Config Models
# =============================================================================


class ReviewConfig(BaseModel):
    """Batch review switches."""

    auto_correct: bool = True  # Apply correction rules before validating
    run_validation: bool = True  # Classify rows (all rows neutral when off)
    max_messages: int = 50  # Validation messages printed by the CLI


class RuleSourceConfig(BaseModel):
    """Rule list files, keyed by the field they belong to."""

    validation_lists: dict[str, str] = Field(default_factory=dict)  # field -> path
    correction_lists: dict[str, str] = Field(default_factory=dict)  # field (or "all") -> path
    base_dir: Optional[str] = None  # Relative paths resolve against this (default: config dir)


class EngineConfig(BaseModel):
    """Root configuration."""

    name: str = ""
    review: ReviewConfig = Field(default_factory=ReviewConfig)
    rules: RuleSourceConfig = Field(default_factory=RuleSourceConfig)

    def config_hash(self) -> str:
        """
        Generate hash of config for reproducibility tracking.

        Returns:
            SHA256 hash of serialized config (first 12 chars)
        """
        config_json = self.model_dump_json(exclude={"name": True, "rules": {"base_dir"}})
        return hashlib.sha256(config_json.encode()).hexdigest()[:12]

    def resolve_path(self, path: str) -> Path:
        """Resolve a rule list path against rules.base_dir."""
        p = Path(path)
        if p.is_absolute() or not self.rules.base_dir:
            return p
        return Path(self.rules.base_dir) / p


# =============================================================================
# Config Loading Functions
# =============================================================================


def load_yaml(path: Union[str, Path]) -> dict[str, Any]:
    """Load YAML file and return as dict."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def deep_merge(base: dict, override: dict) -> dict:
    """
    Deep merge two dictionaries.

    Override values take precedence. Nested dicts are merged recursively.
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def load_config(
    config_path: Union[str, Path],
    overrides: Optional[dict[str, Any]] = None,
) -> EngineConfig:
    """
    Load engine configuration from YAML.

    Args:
        config_path: Path to config file
        overrides: Optional dict merged over the file contents (e.g. from CLI flags)

    Returns:
        EngineConfig with all settings resolved

    Raises:
        FileNotFoundError: if the config file does not exist
        ConfigError: if the contents do not validate
    """
    config_path = Path(config_path)
    config_dict = load_yaml(config_path)
    if overrides:
        config_dict = deep_merge(config_dict, overrides)

    rules = config_dict.get("rules") or {}
    if isinstance(rules, dict) and not rules.get("base_dir"):
        config_dict["rules"] = {**rules, "base_dir": str(config_path.resolve().parent)}

    try:
        config = EngineConfig.model_validate(config_dict)
    except ValidationError as e:
        raise ConfigError(f"Invalid config {config_path}: {e}") from e

    logger.info(f"Loaded config: {config.name or config_path.stem} (hash: {config.config_hash()})")
    return config


def validate_config(config: EngineConfig) -> list[str]:
    """
    Check a config for likely mistakes.

    Returns:
        List of warning messages (empty when nothing looks wrong)
    """
    warnings = []

    for field_name in config.rules.validation_lists:
        if field_name not in VALIDATION_FIELDS:
            warnings.append(f"Validation list for unknown field '{field_name}' will be ignored")
    for field_name in config.rules.correction_lists:
        if field_name not in CORRECTION_FIELDS:
            warnings.append(f"Correction list for unknown field '{field_name}' will be ignored")

    for path in [*config.rules.validation_lists.values(), *config.rules.correction_lists.values()]:
        if not config.resolve_path(path).exists():
            warnings.append(f"Rule list file not found: {path}")

    if config.review.run_validation and not config.rules.validation_lists:
        warnings.append("Validation is enabled but no validation lists are configured")
    if config.review.auto_correct and not config.rules.correction_lists:
        warnings.append("Auto-correct is enabled but no correction lists are configured")

    return warnings


def load_rule_lists(
    config: EngineConfig,
) -> tuple[list[ValidationRuleEntry], list[CorrectionRule], list[str]]:
    """
    Read every configured rule list.

    Lists for unknown fields are skipped. Parse errors are returned, not raised.

    Returns:
        Tuple of (validation rules, correction rules, parse error messages)
    """
    validation_rules: list[ValidationRuleEntry] = []
    correction_rules: list[CorrectionRule] = []
    errors: list[str] = []

    def _collect(parsed: ParsedRuleList, path: str, target: list) -> None:
        target.extend(parsed.entries)
        errors.extend(f"{path}: {error}" for error in parsed.errors)

    for field_name, path in config.rules.validation_lists.items():
        if field_name not in VALIDATION_FIELDS:
            continue
        parsed = read_rule_file(config.resolve_path(path), ListKind.VALIDATION, field_name)
        _collect(parsed, path, validation_rules)

    for field_name, path in config.rules.correction_lists.items():
        if field_name not in CORRECTION_FIELDS:
            continue
        parsed = read_rule_file(config.resolve_path(path), ListKind.CORRECTION, field_name)
        _collect(parsed, path, correction_rules)

    return validation_rules, correction_rules, errors
