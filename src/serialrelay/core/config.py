"""
Configuration management for the serial relay.

Loads configuration from YAML files with environment variable overrides.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml


# Default configuration paths
DEFAULT_CONFIG_DIR = Path.home() / ".config" / "serialrelay"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.yaml"
SYSTEM_CONFIG_FILE = Path("/etc/serialrelay/config.yaml")


@dataclass
class SerialConfig:
    """Serial link configuration."""

    baud_rate: int = 9600
    read_timeout: float = 0.1
    write_timeout: float = 2.0


@dataclass
class ServerConfig:
    """Web server configuration."""

    host: str = "0.0.0.0"
    port: int = 3000
    cors_allowed_origins: str = "*"


@dataclass
class Config:
    """Main configuration for the serial relay."""

    serial: SerialConfig = field(default_factory=SerialConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    log_level: str = "INFO"
    traffic_log_dir: Optional[Path] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Config":
        """Create Config from dictionary."""
        serial_data = data.get("serial", {})
        server_data = data.get("server", {})

        serial = SerialConfig(
            baud_rate=serial_data.get("baud_rate", 9600),
            read_timeout=serial_data.get("read_timeout", 0.1),
            write_timeout=serial_data.get("write_timeout", 2.0),
        )

        server = ServerConfig(
            host=server_data.get("host", "0.0.0.0"),
            port=server_data.get("port", 3000),
            cors_allowed_origins=server_data.get("cors_allowed_origins", "*"),
        )

        traffic_log_dir = data.get("traffic_log_dir")

        return cls(
            serial=serial,
            server=server,
            log_level=data.get("log_level", "INFO"),
            traffic_log_dir=Path(traffic_log_dir) if traffic_log_dir else None,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert Config to dictionary."""
        return {
            "serial": {
                "baud_rate": self.serial.baud_rate,
                "read_timeout": self.serial.read_timeout,
                "write_timeout": self.serial.write_timeout,
            },
            "server": {
                "host": self.server.host,
                "port": self.server.port,
                "cors_allowed_origins": self.server.cors_allowed_origins,
            },
            "log_level": self.log_level,
            "traffic_log_dir": str(self.traffic_log_dir) if self.traffic_log_dir else None,
        }


def load_config(config_path: Optional[Path] = None) -> Config:
    """
    Load configuration from YAML file.

    Search order:
    1. Explicit path if provided
    2. SERIALRELAY_CONFIG environment variable
    3. ~/.config/serialrelay/config.yaml
    4. /etc/serialrelay/config.yaml
    5. Default values

    Environment variable overrides:
    - SERIALRELAY_BAUD_RATE: Override serial.baud_rate
    - SERIALRELAY_HOST: Override server.host
    - PORT, SERIALRELAY_PORT: Override server.port (the latter wins)
    - SERIALRELAY_LOG_LEVEL: Override log_level
    - SERIALRELAY_TRAFFIC_LOG_DIR: Override traffic_log_dir

    Args:
        config_path: Optional explicit path to config file

    Returns:
        Loaded configuration
    """
    if config_path:
        paths_to_try = [config_path]
    else:
        env_path = os.environ.get("SERIALRELAY_CONFIG")
        paths_to_try = []
        if env_path:
            paths_to_try.append(Path(env_path))
        paths_to_try.extend([DEFAULT_CONFIG_FILE, SYSTEM_CONFIG_FILE])

    config_data = {}
    for path in paths_to_try:
        if path.exists():
            try:
                with open(path) as f:
                    config_data = yaml.safe_load(f) or {}
                break
            except (OSError, yaml.YAMLError):
                continue

    config = Config.from_dict(config_data)
    return _apply_env_overrides(config)


def _env_int(name: str) -> Optional[int]:
    """Read an integer environment variable, ignoring invalid values."""
    try:
        return int(os.environ[name])
    except (KeyError, ValueError):
        return None


def _apply_env_overrides(config: Config) -> Config:
    """Apply environment variable overrides to config."""
    baud_rate = _env_int("SERIALRELAY_BAUD_RATE")
    if baud_rate is not None:
        config.serial.baud_rate = baud_rate

    if "SERIALRELAY_HOST" in os.environ:
        config.server.host = os.environ["SERIALRELAY_HOST"]

    for name in ("PORT", "SERIALRELAY_PORT"):
        port = _env_int(name)
        if port is not None:
            config.server.port = port

    if "SERIALRELAY_LOG_LEVEL" in os.environ:
        config.log_level = os.environ["SERIALRELAY_LOG_LEVEL"]

    if "SERIALRELAY_TRAFFIC_LOG_DIR" in os.environ:
        config.traffic_log_dir = Path(os.environ["SERIALRELAY_TRAFFIC_LOG_DIR"])

    return config


def save_config(config: Config, path: Path) -> None:
    """
    Save configuration to YAML file.

    Args:
        config: Configuration to save
        path: Path to save to
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w") as f:
        f.write("# Serial Relay Configuration\n")
        f.write("# See documentation for all options\n\n")
        yaml.dump(config.to_dict(), f, default_flow_style=False, sort_keys=False)


def get_default_config() -> Config:
    """Get default configuration without loading from file."""
    return Config()
