"""Tests for FetcherConfig loading (defaults -> XDG -> project/explicit TOML -> env)."""

import logging
import os
from unittest.mock import patch

import pytest

from drivefetch.config import FetcherConfig, get_config, set_config
from drivefetch.core.records import FetchOptions, SortOrder


@pytest.fixture
def isolated(tmp_path, monkeypatch):
    """Run from an empty directory with no DRIVEFETCH_* variables and a private XDG home."""
    monkeypatch.chdir(tmp_path)
    env = {"XDG_CONFIG_HOME": str(tmp_path / "xdg")}
    with patch.dict(os.environ, env, clear=True):
        yield tmp_path


def _write_xdg(tmp_path, content):
    path = tmp_path / "xdg" / "drivefetch" / "config.toml"
    path.parent.mkdir(parents=True)
    path.write_text(content)
    return path


class TestDefaults:
    def test_defaults(self, isolated):
        config = FetcherConfig.from_env()
        assert config.nodes == []
        assert config.records_path == "/records/confirmed"
        assert config.timeout == 30.0
        assert config.log_level == "INFO"
        assert config.structured_logging is False
        assert config.defaults == FetchOptions()


class TestTomlLoading:
    @pytest.fixture
    def project_config_content(self):
        return """
[nodes]
urls = ["https://node-a:3001", "https://node-b:3001"]

[logging]
level = "debug"
structured = true

[fetch]
page_size = 50
order = "asc"
concurrency = 4
retries = 5
base_delay_ms = 250
records_path = "/transactions/confirmed"
timeout = 12.5
"""

    def test_project_config(self, isolated, project_config_content):
        (isolated / "drivefetch.toml").write_text(project_config_content)

        config = FetcherConfig.from_env()

        assert config.nodes == ["https://node-a:3001", "https://node-b:3001"]
        assert config.log_level == "DEBUG"
        assert config.structured_logging is True
        assert config.records_path == "/transactions/confirmed"
        assert config.timeout == 12.5
        assert config.defaults.page_size == 50
        assert config.defaults.order == SortOrder.ASC
        assert config.defaults.concurrency == 4
        assert config.defaults.retries == 5
        assert config.defaults.base_delay == 0.25

    def test_project_overrides_xdg(self, isolated):
        _write_xdg(isolated, '[logging]\nlevel = "ERROR"\n\n[fetch]\nretries = 1\nconcurrency = 2\n')
        (isolated / "drivefetch.toml").write_text("[fetch]\nretries = 6\n")

        config = FetcherConfig.from_env()

        assert config.log_level == "ERROR"
        assert config.defaults.retries == 6
        assert config.defaults.concurrency == 2

    def test_explicit_file_skips_layers(self, isolated):
        _write_xdg(isolated, '[logging]\nlevel = "ERROR"\n')
        explicit = isolated / "custom.toml"
        explicit.write_text('[nodes]\nurls = "https://x:3000, https://y:3000"\n')

        config = FetcherConfig.from_env(str(explicit))

        assert config.nodes == ["https://x:3000", "https://y:3000"]
        assert config.log_level == "INFO"

    def test_config_file_env_var(self, isolated):
        explicit = isolated / "env.toml"
        explicit.write_text("[fetch]\npage_size = 20\n")
        os.environ["DRIVEFETCH_CONFIG_FILE"] = str(explicit)

        assert FetcherConfig.from_env().defaults.page_size == 20

    def test_missing_file_keeps_defaults(self, isolated, caplog):
        config = FetcherConfig.from_env(str(isolated / "absent.toml"))
        assert config.defaults == FetchOptions()
        assert "Config file not found" in caplog.text

    def test_malformed_toml_keeps_defaults(self, isolated, caplog):
        (isolated / "drivefetch.toml").write_text("[fetch\npage_size = ")
        config = FetcherConfig.from_env()
        assert config.defaults == FetchOptions()
        assert "Failed to parse config file" in caplog.text

    def test_invalid_option_keeps_previous(self, isolated, caplog):
        (isolated / "drivefetch.toml").write_text("[fetch]\npage_size = 500\nretries = 2\n")
        config = FetcherConfig.from_env()
        assert config.defaults.page_size == 100
        assert config.defaults.retries == 3
        assert "Ignoring invalid fetch options" in caplog.text

    def test_unknown_option_warns(self, isolated, caplog):
        (isolated / "drivefetch.toml").write_text("[fetch]\nturbo = true\nretries = 2\n")
        config = FetcherConfig.from_env()
        assert config.defaults.retries == 2
        assert "unknown fetch option 'turbo'" in caplog.text


class TestEnvOverrides:
    def test_env_beats_toml(self, isolated):
        (isolated / "drivefetch.toml").write_text('[nodes]\nurls = ["https://toml:3001"]\n[fetch]\nconcurrency = 2\n')
        os.environ.update(
            {
                "DRIVEFETCH_NODES": "https://env-a:3001, https://env-b:3001",
                "DRIVEFETCH_CONCURRENCY": "16",
                "DRIVEFETCH_RETRIES": "0",
                "DRIVEFETCH_BASE_DELAY_MS": "100",
                "DRIVEFETCH_PAGE_SIZE": "10",
                "DRIVEFETCH_ORDER": "ASC",
                "DRIVEFETCH_DEBUG": "yes",
                "DRIVEFETCH_TYPES": "16705",
                "DRIVEFETCH_TIMEOUT": "3",
                "DRIVEFETCH_LOG_LEVEL": "warning",
                "DRIVEFETCH_STRUCTURED_LOGGING": "1",
                "DRIVEFETCH_RECORDS_PATH": "/transactions/confirmed",
            }
        )

        config = FetcherConfig.from_env()

        assert config.nodes == ["https://env-a:3001", "https://env-b:3001"]
        assert config.timeout == 3.0
        assert config.log_level == "WARNING"
        assert config.structured_logging is True
        assert config.records_path == "/transactions/confirmed"
        defaults = config.defaults
        assert defaults.concurrency == 16
        assert defaults.retries == 0
        assert defaults.base_delay_ms == 100
        assert defaults.page_size == 10
        assert defaults.order == SortOrder.ASC
        assert defaults.debug is True
        assert defaults.types == (16705,)

    def test_unparseable_env_ignored(self, isolated, caplog):
        os.environ["DRIVEFETCH_CONCURRENCY"] = "lots"
        os.environ["DRIVEFETCH_TIMEOUT"] = "soon"
        config = FetcherConfig.from_env()
        assert config.defaults.concurrency == 8
        assert config.timeout == 30.0
        assert "DRIVEFETCH_CONCURRENCY" in caplog.text

    def test_out_of_range_env_ignored(self, isolated):
        os.environ["DRIVEFETCH_CONCURRENCY"] = "0"
        assert FetcherConfig.from_env().defaults.concurrency == 8


class TestGlobalConfig:
    def test_get_config_loads_once(self, isolated):
        os.environ["DRIVEFETCH_NODES"] = "https://only:3001"
        first = get_config()
        assert first.nodes == ["https://only:3001"]
        os.environ["DRIVEFETCH_NODES"] = "https://changed:3001"
        assert get_config() is first

    def test_set_config(self):
        config = FetcherConfig(nodes=["https://set:3001"])
        set_config(config)
        assert get_config() is config


class TestSetupLogging:
    @pytest.fixture
    def package_logger(self):
        logger = logging.getLogger("drivefetch")
        handlers, level = list(logger.handlers), logger.level
        yield logger
        logger.handlers = handlers
        logger.setLevel(level)

    def test_plain_formatter(self, package_logger):
        FetcherConfig(log_level="DEBUG").setup_logging()
        assert package_logger.level == logging.DEBUG
        assert "%(levelname)s" in package_logger.handlers[-1].formatter._fmt

    def test_structured_formatter(self, package_logger):
        FetcherConfig(structured_logging=True).setup_logging()
        assert package_logger.level == logging.INFO
        assert package_logger.handlers[-1].formatter._fmt.startswith('{"timestamp"')

    def test_repeated_setup_replaces_handler(self, package_logger):
        before = len(package_logger.handlers)
        FetcherConfig().setup_logging()
        FetcherConfig(structured_logging=True, log_level="WARNING").setup_logging()

        assert len(package_logger.handlers) == before + 1
        assert package_logger.level == logging.WARNING
        assert package_logger.handlers[-1].formatter._fmt.startswith('{"timestamp"')

    def test_unknown_level_falls_back_to_info(self, package_logger):
        FetcherConfig(log_level="CHATTY").setup_logging()
        assert package_logger.level == logging.INFO
