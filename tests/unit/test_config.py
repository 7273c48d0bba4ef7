"""Unit tests for configuration management."""

from pathlib import Path

from serialrelay.core.config import (
    Config,
    SerialConfig,
    ServerConfig,
    get_default_config,
    load_config,
    save_config,
)


class TestSerialConfig:
    """Tests for SerialConfig dataclass."""

    def test_default_values(self):
        """Test default serial configuration."""
        config = SerialConfig()
        assert config.baud_rate == 9600
        assert config.read_timeout == 0.1
        assert config.write_timeout == 2.0


class TestServerConfig:
    """Tests for ServerConfig dataclass."""

    def test_default_values(self):
        """Test default server configuration."""
        config = ServerConfig()
        assert config.host == "0.0.0.0"
        assert config.port == 3000
        assert config.cors_allowed_origins == "*"


class TestConfig:
    """Tests for main Config class."""

    def test_default_values(self):
        """Test default configuration values."""
        config = Config()
        assert isinstance(config.serial, SerialConfig)
        assert isinstance(config.server, ServerConfig)
        assert config.log_level == "INFO"
        assert config.traffic_log_dir is None

    def test_from_dict_empty(self):
        """Test creating config from empty dict uses defaults."""
        config = Config.from_dict({})
        assert config.serial.baud_rate == 9600
        assert config.server.port == 3000

    def test_from_dict_custom_values(self):
        """Test creating config from dict with custom values."""
        data = {
            "serial": {
                "baud_rate": 115200,
                "read_timeout": 0.5,
                "write_timeout": 1.0,
            },
            "server": {
                "host": "127.0.0.1",
                "port": 8080,
                "cors_allowed_origins": "http://localhost:8080",
            },
            "log_level": "DEBUG",
            "traffic_log_dir": "/var/log/serialrelay",
        }
        config = Config.from_dict(data)

        assert config.serial.baud_rate == 115200
        assert config.serial.read_timeout == 0.5
        assert config.serial.write_timeout == 1.0
        assert config.server.host == "127.0.0.1"
        assert config.server.port == 8080
        assert config.server.cors_allowed_origins == "http://localhost:8080"
        assert config.log_level == "DEBUG"
        assert config.traffic_log_dir == Path("/var/log/serialrelay")

    def test_to_dict(self):
        """Test converting config to dict."""
        data = Config().to_dict()

        assert data["serial"]["baud_rate"] == 9600
        assert data["server"]["port"] == 3000
        assert data["log_level"] == "INFO"
        assert data["traffic_log_dir"] is None

    def test_roundtrip(self):
        """Test config survives to_dict/from_dict roundtrip."""
        original = Config(traffic_log_dir=Path("/tmp/traffic"))
        restored = Config.from_dict(original.to_dict())

        assert restored.serial.baud_rate == original.serial.baud_rate
        assert restored.server.host == original.server.host
        assert restored.traffic_log_dir == original.traffic_log_dir


class TestLoadConfig:
    """Tests for load_config function."""

    def test_load_default_config(self):
        """Test loading config with no file returns defaults."""
        config = load_config()
        assert isinstance(config, Config)
        assert config.serial.baud_rate == 9600

    def test_load_from_explicit_path(self, tmp_path):
        """Test loading config from explicit path."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text(
            """
serial:
  baud_rate: 57600
server:
  port: 5050
log_level: WARNING
"""
        )
        config = load_config(config_file)
        assert config.serial.baud_rate == 57600
        assert config.server.port == 5050
        assert config.log_level == "WARNING"

    def test_load_from_env_path(self, tmp_path, monkeypatch):
        """Test SERIALRELAY_CONFIG points at a config file."""
        config_file = tmp_path / "relay.yaml"
        config_file.write_text("server:\n  host: 127.0.0.1\n")
        monkeypatch.setenv("SERIALRELAY_CONFIG", str(config_file))

        config = load_config()
        assert config.server.host == "127.0.0.1"

    def test_invalid_yaml_falls_back_to_defaults(self, tmp_path):
        """Test unreadable YAML is skipped."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("serial: [unclosed\n")
        config = load_config(config_file)
        assert config.serial.baud_rate == 9600

    def test_env_override_baud_rate(self, monkeypatch):
        """Test SERIALRELAY_BAUD_RATE environment override."""
        monkeypatch.setenv("SERIALRELAY_BAUD_RATE", "115200")
        config = load_config()
        assert config.serial.baud_rate == 115200

    def test_env_override_port(self, monkeypatch):
        """Test PORT environment override."""
        monkeypatch.setenv("PORT", "4000")
        config = load_config()
        assert config.server.port == 4000

    def test_env_override_serialrelay_port_wins(self, monkeypatch):
        """Test SERIALRELAY_PORT takes precedence over PORT."""
        monkeypatch.setenv("PORT", "4000")
        monkeypatch.setenv("SERIALRELAY_PORT", "4001")
        config = load_config()
        assert config.server.port == 4001

    def test_env_override_host_and_log_level(self, monkeypatch):
        """Test SERIALRELAY_HOST and SERIALRELAY_LOG_LEVEL overrides."""
        monkeypatch.setenv("SERIALRELAY_HOST", "127.0.0.1")
        monkeypatch.setenv("SERIALRELAY_LOG_LEVEL", "DEBUG")
        config = load_config()
        assert config.server.host == "127.0.0.1"
        assert config.log_level == "DEBUG"

    def test_env_override_traffic_log_dir(self, monkeypatch, tmp_path):
        """Test SERIALRELAY_TRAFFIC_LOG_DIR override."""
        monkeypatch.setenv("SERIALRELAY_TRAFFIC_LOG_DIR", str(tmp_path))
        config = load_config()
        assert config.traffic_log_dir == tmp_path

    def test_env_override_invalid_port(self, monkeypatch):
        """Test invalid PORT is ignored."""
        monkeypatch.setenv("PORT", "not-a-number")
        config = load_config()
        assert config.server.port == 3000  # Default


class TestSaveConfig:
    """Tests for save_config function."""

    def test_save_config(self, tmp_path):
        """Test saving config to file."""
        config_file = tmp_path / "subdir" / "config.yaml"

        save_config(Config(), config_file)

        assert config_file.exists()
        content = config_file.read_text()
        assert content.startswith("# Serial Relay Configuration")
        assert "baud_rate:" in content

    def test_save_and_load_roundtrip(self, tmp_path):
        """Test config survives save/load roundtrip."""
        original = Config()
        original.serial.baud_rate = 19200
        original.log_level = "ERROR"

        config_file = tmp_path / "config.yaml"
        save_config(original, config_file)
        loaded = load_config(config_file)

        assert loaded.serial.baud_rate == 19200
        assert loaded.log_level == "ERROR"


class TestGetDefaultConfig:
    """Tests for get_default_config function."""

    def test_returns_defaults(self):
        """Test get_default_config returns default values."""
        config = get_default_config()
        assert isinstance(config, Config)
        assert config.serial.baud_rate == 9600
        assert config.server.port == 3000
