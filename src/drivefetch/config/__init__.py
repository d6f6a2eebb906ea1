"""Configuration for drivefetch.

Usage:
    from drivefetch.config import FetcherConfig

    config = FetcherConfig.from_env()
    config.setup_logging()
"""

from drivefetch.config.fetcher import FetcherConfig, get_config, set_config

__all__ = ["FetcherConfig", "get_config", "set_config"]
