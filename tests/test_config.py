"""
Unit tests for config module and settings loader
"""
import pytest

from config import Config, DataConfig, LoggingConfig, ServerConfig
from environment_config_loader import EnvironmentConfigLoader


class TestDataConfig:
    """Tests for DataConfig"""

    def test_default_values(self):
        """Test default configuration values"""
        config = DataConfig()
        assert config.protocol == "mongodb"
        assert config.database == "randos"
        assert config.default_page_size == 100
        assert config.max_page_size == 10000
        assert config.timeout_seconds == 30

    def test_mongo_uri_without_credentials(self):
        """Credentials are omitted when either one is empty"""
        config = DataConfig(host="db:27017", database="test", options="w=1", username="user")
        assert config.mongo_uri() == "mongodb://db:27017/test?w=1"

    def test_mongo_uri_with_credentials(self):
        config = DataConfig(host="db:27017", database="test", options="w=1",
                            username="user", password="secret")
        assert config.mongo_uri() == "mongodb://user:secret@db:27017/test?w=1"

    def test_redacted_uri_hides_password(self):
        config = DataConfig(username="user", password="secret")
        assert "secret" not in config.redacted_uri()
        assert "user:****@" in config.redacted_uri()

    def test_srv_protocol(self):
        config = DataConfig(protocol="mongodb+srv", host="cluster.example.net")
        assert config.mongo_uri().startswith("mongodb+srv://cluster.example.net/")


class TestServerConfig:
    """Tests for ServerConfig"""

    def test_host_port(self):
        assert ServerConfig(address="127.0.0.1:9000").host_port() == ("127.0.0.1", 9000)

    def test_host_defaults_to_all_interfaces(self):
        assert ServerConfig(address=":8080").host_port() == ("0.0.0.0", 8080)

    def test_invalid_port_raises(self):
        with pytest.raises(ValueError):
            ServerConfig(address="localhost").host_port()


class TestEnvironmentConfigLoader:
    """Tests for settings file and environment layering"""

    @pytest.fixture
    def settings_file(self, tmp_path):
        path = tmp_path / "defaults.yaml"
        path.write_text(
            "data:\n"
            "  host: mongo:27017\n"
            "  database: fromfile\n"
            "  defaultPageSize: 25\n"
            "  maxPageSize: 250\n"
            "logging:\n"
            "  level: debug\n"
            "server:\n"
            "  address: 0.0.0.0:9999\n"
        )
        return path

    @pytest.fixture(autouse=True)
    def clean_env(self, monkeypatch):
        for key in ("ENV", "APP_ENV", "DATA_HOST", "DATA_DATABASE", "DATA_MAX_PAGE_SIZE",
                    "LOGGING_LEVEL", "POPULATE", "SERVER_ADDRESS"):
            monkeypatch.delenv(key, raising=False)

    def test_reads_settings_file(self, settings_file):
        config = EnvironmentConfigLoader(settings_file).load()

        assert config.data.host == "mongo:27017"
        assert config.data.database == "fromfile"
        assert config.data.default_page_size == 25
        assert config.data.max_page_size == 250
        assert config.logging.level == "debug"
        assert config.server.address == "0.0.0.0:9999"
        # untouched keys keep dataclass defaults
        assert config.data.timeout_seconds == 30

    def test_environment_overrides_file(self, settings_file, monkeypatch):
        monkeypatch.setenv("DATA_DATABASE", "fromenv")
        monkeypatch.setenv("DATA_MAX_PAGE_SIZE", "500")
        monkeypatch.setenv("LOGGING_LEVEL", "trace")
        monkeypatch.setenv("POPULATE", "true")

        config = EnvironmentConfigLoader(settings_file).load()

        assert config.data.database == "fromenv"
        assert config.data.max_page_size == 500
        assert config.logging.level == "trace"
        assert config.populate is True

    def test_environment_overlay_file(self, settings_file, monkeypatch):
        (settings_file.parent / "test.yaml").write_text("data:\n  database: overlay\n")
        monkeypatch.setenv("ENV", "test")

        config = EnvironmentConfigLoader(settings_file).load()

        assert config.data.database == "overlay"
        assert config.data.host == "mongo:27017"

    def test_missing_settings_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            EnvironmentConfigLoader(tmp_path / "missing.yaml").load()


class TestConfig:
    """Tests for main Config class"""

    def test_default_structure(self):
        config = Config()
        assert isinstance(config.data, DataConfig)
        assert isinstance(config.logging, LoggingConfig)
        assert isinstance(config.server, ServerConfig)
        assert config.populate is False

    def test_load_uses_loader(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("populate: true\n")
        assert Config.load(path).populate is True
