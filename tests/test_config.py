"""Tests for configuration and logging setup."""

import json
import logging
import logging.handlers
import sys

import pytest

from osbapi_broker.config import Config, LoggingConfig
from osbapi_broker.logging_config import JSONFormatter, setup_logging


class TestConfig:
    """Test environment configuration."""

    def test_defaults(self, monkeypatch):
        """Test defaults without environment variables."""
        for name in ('API_HOST', 'API_PORT', 'API_DEBUG', 'ENABLE_CORS', 'BROKER_API_VERSION',
                     'LOG_LEVEL', 'LOG_FILE_PATH', 'CATALOG_PATH'):
            monkeypatch.delenv(name, raising=False)

        config = Config.from_env()

        assert config.api.host == "0.0.0.0"
        assert config.api.port == 8080
        assert config.api.debug is False
        assert config.api.enable_cors is False
        assert config.api.broker_api_version is None
        assert config.logging.level == "INFO"
        assert config.logging.file_path is None
        assert config.catalog.path is None

    def test_from_env(self, monkeypatch):
        """Test values are read from the environment."""
        monkeypatch.setenv('API_HOST', '127.0.0.1')
        monkeypatch.setenv('API_PORT', '9000')
        monkeypatch.setenv('API_DEBUG', 'true')
        monkeypatch.setenv('ENABLE_CORS', 'TRUE')
        monkeypatch.setenv('BROKER_API_VERSION', '2.16')
        monkeypatch.setenv('LOG_LEVEL', 'DEBUG')
        monkeypatch.setenv('LOG_BACKUP_COUNT', '2')
        monkeypatch.setenv('CATALOG_PATH', '/etc/broker/catalog.yml')

        config = Config.from_env()

        assert config.api.host == '127.0.0.1'
        assert config.api.port == 9000
        assert config.api.debug is True
        assert config.api.enable_cors is True
        assert config.api.broker_api_version == '2.16'
        assert config.logging.level == 'DEBUG'
        assert config.logging.backup_count == 2
        assert config.catalog.path == '/etc/broker/catalog.yml'


class TestJSONFormatter:
    """Test structured log output."""

    def make_record(self, exc_info=None):
        return logging.LogRecord(
            name="osbapi_broker.test",
            level=logging.INFO,
            pathname=__file__,
            lineno=10,
            msg="GET %s",
            args=("/v2/catalog",),
            exc_info=exc_info
        )

    def test_format(self):
        """Test the basic fields are written."""
        entry = json.loads(JSONFormatter().format(self.make_record()))

        assert entry['level'] == 'INFO'
        assert entry['logger'] == 'osbapi_broker.test'
        assert entry['message'] == 'GET /v2/catalog'
        assert 'exception' not in entry

    def test_extra_fields(self):
        """Test request fields passed as extra are written."""
        record = self.make_record()
        record.request_id = "req-1"
        record.status_code = 200
        record.duration_seconds = 0.5

        entry = json.loads(JSONFormatter().format(record))

        assert entry['request_id'] == "req-1"
        assert entry['status_code'] == 200
        assert entry['duration_seconds'] == 0.5
        assert 'method' not in entry

    def test_exception(self):
        """Test exception details are written."""
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = self.make_record(exc_info=sys.exc_info())

        entry = json.loads(JSONFormatter().format(record))

        assert 'RuntimeError: boom' in entry['exception']


class TestSetupLogging:
    """Test logging setup."""

    @pytest.fixture(autouse=True)
    def restore_root_logger(self):
        root_logger = logging.getLogger()
        handlers = root_logger.handlers[:]
        level = root_logger.level
        yield
        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)
            handler.close()
        for handler in handlers:
            root_logger.addHandler(handler)
        root_logger.setLevel(level)

    def test_console_handler(self):
        """Test a JSON console handler replaces existing handlers."""
        setup_logging(LoggingConfig(level="debug"))

        root_logger = logging.getLogger()
        assert root_logger.level == logging.DEBUG
        assert len(root_logger.handlers) == 1
        assert isinstance(root_logger.handlers[0].formatter, JSONFormatter)
        assert logging.getLogger('werkzeug').level == logging.WARNING

    def test_file_handler(self, tmp_path):
        """Test a rotating file handler is added when a path is configured."""
        setup_logging(LoggingConfig(file_path=str(tmp_path / "broker.log"), backup_count=3))

        handlers = logging.getLogger().handlers
        file_handlers = [h for h in handlers if isinstance(h, logging.handlers.RotatingFileHandler)]
        assert len(handlers) == 2
        assert len(file_handlers) == 1
        assert file_handlers[0].backupCount == 3
