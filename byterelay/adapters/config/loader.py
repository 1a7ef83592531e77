"""
Configuration loader with priority: CLI > env > TOML > defaults
"""
import os
import tomllib
from pathlib import Path
from typing import Dict, Any, Optional

from ...core.constants import CONFIG_SECTION, ENV_PREFIX
from ...core.conversion import parse_port, parse_size
from ...core.exceptions import ConfigError, ConversionError
from ...domain.relay.models import RelayConfig


class ConfigLoader:
    """Configuration loader with priority support"""

    # Environment variable suffix -> config key
    ENV_MAPPINGS = {
        "FILE": "file_name",
        "IP_IN": "ip_in",
        "IP_OUT": "ip_out",
        "PORT_IN": "port_in",
        "PORT_OUT": "port_out",
        "BUFFER_SIZE": "buffer_size",
        "VERBOSE": "verbose",
        "BACKLOG": "backlog",
        "ACCEPT_POLL_INTERVAL": "accept_poll_interval",
        "LOG_LEVEL": "log_level",
        "LOG_FILE": "log_file",
    }

    def __init__(self, env_prefix: str = ENV_PREFIX, labels: Optional[Dict[str, str]] = None):
        """
        Initialize loader.

        Args:
            env_prefix: Prefix of the environment variables to read
            labels: Display names for config keys in diagnostics (e.g. CLI flags)
        """
        self._env_prefix = env_prefix
        self.labels = labels or {}

    def load_toml(self, path: Path) -> Dict[str, Any]:
        """
        Load the [relay] table of a TOML configuration file.

        Raises:
            ConfigError: If the file is missing or not valid TOML
        """
        if not path.exists():
            raise ConfigError(f"Configuration file not found: {path}")

        try:
            data = tomllib.loads(path.read_text(encoding='utf-8'))
        except (tomllib.TOMLDecodeError, UnicodeDecodeError) as e:
            raise ConfigError(f"Failed to parse TOML configuration: {e}") from e

        section = data.get(CONFIG_SECTION, {})
        if not isinstance(section, dict):
            raise ConfigError(f"[{CONFIG_SECTION}] must be a table in {path}")
        return section

    def load_env(self) -> Dict[str, Any]:
        """Load configuration from environment variables"""
        config = {}
        for suffix, config_key in self.ENV_MAPPINGS.items():
            value = os.getenv(self._env_prefix + suffix)
            if value:
                config[config_key] = value
        return config

    def merge_configs(self, *configs: Dict[str, Any]) -> Dict[str, Any]:
        """
        Merge multiple configurations with priority.
        Later configs override earlier ones; None values never override.
        """
        result: Dict[str, Any] = {}
        for config in configs:
            for key, value in config.items():
                if value is not None:
                    result[key] = value
        return result

    def load(
        self,
        toml_path: Optional[Path] = None,
        cli_overrides: Optional[Dict[str, Any]] = None,
        use_env: bool = True,
    ) -> Dict[str, Any]:
        """
        Load configuration with priority: CLI > env > TOML > defaults

        Args:
            toml_path: Path to TOML configuration file
            cli_overrides: CLI parameter overrides (None means "not given")
            use_env: Whether to load from environment variables

        Returns:
            Merged raw configuration dictionary
        """
        configs = []

        if toml_path:
            configs.append(self.load_toml(toml_path))

        if use_env:
            env_config = self.load_env()
            if env_config:
                configs.append(env_config)

        if cli_overrides:
            configs.append(cli_overrides)

        return self.merge_configs(*configs)

    def build(self, raw: Dict[str, Any]) -> RelayConfig:
        """
        Convert a merged raw dictionary into a RelayConfig.

        Numeric strings from any layer are converted with parse_port /
        parse_size so every source reports the same diagnostics.

        Raises:
            ConversionError: If a numeric value is malformed
            ConfigError: If a value has the wrong type
        """
        data = dict(raw)
        for key, parse in (
            ("port_in", parse_port),
            ("port_out", parse_port),
            ("buffer_size", parse_size),
            ("backlog", parse_size),
        ):
            if key not in data:
                continue
            try:
                data[key] = parse(data[key])
            except ConversionError as e:
                raise ConversionError(e.value, e.reason, option=self.labels.get(key, key)) from None
        if "verbose" in data:
            data["verbose"] = _to_bool(data["verbose"])
        if "accept_poll_interval" in data:
            try:
                data["accept_poll_interval"] = float(data["accept_poll_interval"])
            except (TypeError, ValueError) as e:
                raise ConfigError(
                    f"Invalid accept_poll_interval: {data['accept_poll_interval']!r}"
                ) from e

        unknown = set(data) - set(RelayConfig().to_dict())
        if unknown:
            raise ConfigError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")

        return RelayConfig.from_dict(data)


def _to_bool(value: Any) -> bool:
    """Convert string value to boolean"""
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in ("true", "yes", "1", "on"):
        return True
    if text in ("false", "no", "0", "off", ""):
        return False
    raise ConfigError(f"Invalid boolean value: {value!r}")
