"""Configuration loading and validation for the ClawGuard gate.

This module handles loading clawguard.json files and validating their structure.
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from .approval import DEFAULT_POLL_INTERVAL_MS
from .formatting import DEFAULT_TIMEOUT_MS

BOT_TOKEN_ENV_VAR = "DISCORD_BOT_TOKEN"


@dataclass
class DiscordConfig:
    """Settings for the Discord approval workflow."""

    enabled: bool = False
    channel_id: Optional[str] = None
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS
    bot_token: Optional[str] = None

    @property
    def approval_configured(self) -> bool:
        """Approval is only attempted when enabled and a channel is set."""
        return bool(self.enabled and self.channel_id)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DiscordConfig':
        """Create from the "discord" section of a config file."""
        channel_id = data.get("channelId")
        return cls(
            enabled=bool(data.get("enabled", False)),
            channel_id=str(channel_id) if channel_id else None,
            timeout_ms=data.get("timeout") or DEFAULT_TIMEOUT_MS,
            poll_interval_ms=data.get("pollInterval") or DEFAULT_POLL_INTERVAL_MS,
            bot_token=data.get("botToken") or os.environ.get(BOT_TOKEN_ENV_VAR),
        )


@dataclass
class ClawGuardConfig:
    """Structured representation of a ClawGuard configuration file."""

    version: str = "1.0"
    discord: DiscordConfig = field(default_factory=DiscordConfig)


class ConfigValidationError(Exception):
    """Raised when configuration validation fails."""

    def __init__(self, errors: List[str]):
        self.errors = errors
        super().__init__(f"Configuration validation failed: {'; '.join(errors)}")


def _is_positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def validate_config(config: Dict[str, Any]) -> Tuple[bool, List[str]]:
    """Validate a ClawGuard configuration dict.

    Args:
        config: Raw configuration dict loaded from JSON

    Returns:
        Tuple of (is_valid, list_of_errors). Entries starting with
        "Warning:" do not make the config invalid.
    """
    errors: List[str] = []

    version = config.get("version")
    if version and str(version) not in ("1.0", "1"):
        errors.append(f"Unsupported config version: {version}")

    discord = config.get("discord", {})
    if not isinstance(discord, dict):
        errors.append("'discord' must be an object")
        return False, errors

    enabled = discord.get("enabled", False)
    if not isinstance(enabled, bool):
        errors.append("'discord.enabled' must be a boolean")

    channel_id = discord.get("channelId")
    if channel_id is not None and not isinstance(channel_id, str):
        errors.append("'discord.channelId' must be a string")

    for key in ("timeout", "pollInterval"):
        value = discord.get(key)
        if value is not None and not _is_positive_int(value):
            errors.append(f"'discord.{key}' must be a positive integer (milliseconds)")

    if enabled is True and not channel_id:
        errors.append("Warning: discord.enabled is set without channelId, approval is disabled")

    actual_errors = [e for e in errors if not e.startswith("Warning:")]
    return len(actual_errors) == 0, errors


def load_config(
    path: Optional[str] = None,
    env_var: str = "CLAWGUARD_CONFIG_PATH"
) -> ClawGuardConfig:
    """Load and validate a ClawGuard configuration file.

    Args:
        path: Direct path to config file. If None, uses env_var or defaults.
        env_var: Environment variable name for config path

    Returns:
        ClawGuardConfig instance

    Raises:
        FileNotFoundError: If config file doesn't exist
        ConfigValidationError: If config validation fails
        json.JSONDecodeError: If config file is not valid JSON
    """
    if path is None:
        path = os.environ.get(env_var)

    if path is None:
        default_paths = [
            Path.cwd() / "clawguard.json",
            Path.cwd() / ".clawguard.json",
            Path.home() / ".config" / "clawguard" / "config.json",
        ]
        for default_path in default_paths:
            if default_path.exists():
                path = str(default_path)
                break

    if path is None:
        return ClawGuardConfig(discord=DiscordConfig.from_dict({}))

    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"ClawGuard config file not found: {path}")

    with open(config_path, 'r', encoding='utf-8') as f:
        raw_config = json.load(f)

    is_valid, errors = validate_config(raw_config)
    if not is_valid:
        raise ConfigValidationError([e for e in errors if not e.startswith("Warning:")])

    return ClawGuardConfig(
        version=str(raw_config.get("version", "1.0")),
        discord=DiscordConfig.from_dict(raw_config.get("discord", {})),
    )


def create_default_config(path: str) -> None:
    """Create a default clawguard.json file at the given path.

    Args:
        path: Path where to create the config file
    """
    default_config = {
        "version": "1.0",
        "discord": {
            "enabled": False,
            "channelId": "",
            "timeout": DEFAULT_TIMEOUT_MS,
            "pollInterval": DEFAULT_POLL_INTERVAL_MS,
        },
    }

    config_path = Path(path)
    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, 'w', encoding='utf-8') as f:
        json.dump(default_config, f, indent=2)
