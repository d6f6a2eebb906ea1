"""FetcherConfig dataclass and global configuration state.

Field declarations and logging setup live here; loading logic lives in the
``_FetcherConfigLoader`` mixin (``loader.py``).
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from drivefetch.config.loader import _FetcherConfigLoader
from drivefetch.core.enumerator import DEFAULT_TIMEOUT, RECORDS_PATH
from drivefetch.core.records import FetchOptions

LOGGER_NAME = "drivefetch"
HANDLER_NAME = "drivefetch.config"
PLAIN_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
STRUCTURED_FORMAT = (
    '{"timestamp":"%(asctime)s","level":"%(levelname)s","logger":"%(name)s","message":"%(message)s"}'
)


@dataclass
class FetcherConfig(_FetcherConfigLoader):
    """Fetcher configuration with support for env vars and TOML overrides."""

    # Replica base URLs
    nodes: List[str] = field(default_factory=list)

    # Transport
    records_path: str = RECORDS_PATH
    timeout: float = DEFAULT_TIMEOUT

    # Logging configuration
    log_level: str = "INFO"
    structured_logging: bool = False

    # Default per-call options
    defaults: FetchOptions = field(default_factory=FetchOptions)

    def setup_logging(self) -> None:
        """Install the drivefetch log handler, replacing one from an earlier call."""
        package_logger = logging.getLogger(LOGGER_NAME)
        package_logger.setLevel(getattr(logging, self.log_level, logging.INFO))

        for existing in list(package_logger.handlers):
            if existing.get_name() == HANDLER_NAME:
                package_logger.removeHandler(existing)

        handler = logging.StreamHandler()
        handler.set_name(HANDLER_NAME)
        handler.setFormatter(logging.Formatter(STRUCTURED_FORMAT if self.structured_logging else PLAIN_FORMAT))
        package_logger.addHandler(handler)


# Global configuration instance
_config: Optional[FetcherConfig] = None


def get_config() -> FetcherConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = FetcherConfig.from_env()
    return _config


def set_config(config: Optional[FetcherConfig]) -> None:
    """Set (or clear, with None) the global configuration instance."""
    global _config
    _config = config
