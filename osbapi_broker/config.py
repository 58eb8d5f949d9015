"""Configuration management for the service broker."""

import os
from typing import Optional
from dataclasses import dataclass, field


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"
    file_path: Optional[str] = None
    max_file_size: int = 10 * 1024 * 1024  # 10MB
    backup_count: int = 5


@dataclass
class APIConfig:
    """API configuration."""
    host: str = "0.0.0.0"
    port: int = 8080
    debug: bool = False
    enable_cors: bool = False
    # "*" or None accepts any X-Broker-Api-Version
    broker_api_version: Optional[str] = None


@dataclass
class CatalogConfig:
    """Catalog source configuration."""
    path: Optional[str] = None


@dataclass
class Config:
    """Main configuration class."""
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    api: APIConfig = field(default_factory=APIConfig)
    catalog: CatalogConfig = field(default_factory=CatalogConfig)

    @classmethod
    def from_env(cls) -> 'Config':
        """Load configuration from environment variables."""
        config = cls()

        # API config
        config.api.host = os.getenv('API_HOST', config.api.host)
        config.api.port = int(os.getenv('API_PORT', str(config.api.port)))
        config.api.debug = os.getenv('API_DEBUG', 'false').lower() == 'true'
        config.api.enable_cors = os.getenv('ENABLE_CORS', 'false').lower() == 'true'
        config.api.broker_api_version = os.getenv('BROKER_API_VERSION', config.api.broker_api_version)

        # Logging config
        config.logging.level = os.getenv('LOG_LEVEL', config.logging.level)
        config.logging.file_path = os.getenv('LOG_FILE_PATH')
        config.logging.max_file_size = int(os.getenv('LOG_MAX_FILE_SIZE', str(config.logging.max_file_size)))
        config.logging.backup_count = int(os.getenv('LOG_BACKUP_COUNT', str(config.logging.backup_count)))

        # Catalog config
        config.catalog.path = os.getenv('CATALOG_PATH', config.catalog.path)

        return config


# Global configuration instance
config = Config.from_env()
