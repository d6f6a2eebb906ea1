"""FetcherConfig loading logic.

Provides ``_FetcherConfigLoader``, a mixin whose methods are inherited by
``FetcherConfig`` (defined in ``fetcher.py``), keeping that module focused on
field definitions.
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Optional, cast

from pydantic import ValidationError

from drivefetch.config.parsing import (
    _parse_bool,
    _parse_csv,
    _try_parse_float,
    _try_parse_int,
)
from drivefetch.core.records import FetchOptions

if TYPE_CHECKING:
    from drivefetch.config.fetcher import FetcherConfig

logger = logging.getLogger(__name__)

# Env var -> FetchOptions field
_OPTION_ENV_VARS: Dict[str, str] = {
    "DRIVEFETCH_PAGE_SIZE": "page_size",
    "DRIVEFETCH_CONCURRENCY": "concurrency",
    "DRIVEFETCH_RETRIES": "retries",
    "DRIVEFETCH_BASE_DELAY_MS": "base_delay_ms",
    "DRIVEFETCH_ORDER": "order",
    "DRIVEFETCH_DEBUG": "debug",
}


class _FetcherConfigLoader:
    """Mixin providing config-loading methods for ``FetcherConfig``."""

    if TYPE_CHECKING:
        nodes: List[str]
        records_path: str
        timeout: float
        log_level: str
        structured_logging: bool
        defaults: FetchOptions

    @classmethod
    def from_env(cls, config_file: Optional[str] = None) -> "FetcherConfig":
        """
        Create configuration from environment variables and optional TOML file.

        Priority (highest to lowest):
        1. Environment variables
        2. Explicit TOML file (argument or DRIVEFETCH_CONFIG_FILE)
           or project TOML config (./drivefetch.toml)
        3. XDG config (~/.config/drivefetch/config.toml)
        4. Default values
        """
        config = cls()

        toml_path = config_file or os.environ.get("DRIVEFETCH_CONFIG_FILE")
        if toml_path:
            config._load_toml(Path(toml_path))
        else:
            xdg_config_home = os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")
            xdg_config = Path(xdg_config_home) / "drivefetch" / "config.toml"
            if xdg_config.exists():
                config._load_toml(xdg_config)
                logger.debug("Loaded XDG config from %s", xdg_config)

            project_config = Path("drivefetch.toml")
            if project_config.exists():
                config._load_toml(project_config)
                logger.debug("Loaded project config from %s", project_config)

        config._load_env()
        return cast("FetcherConfig", config)

    def _load_toml(self, path: Path) -> None:
        """Load configuration from TOML file."""
        if not path.exists():
            logger.warning("Config file not found: %s", path)
            return

        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            logger.error("Failed to parse config file %s: %s", path, e)
            return

        if "nodes" in data:
            urls = data["nodes"].get("urls")
            if urls is not None:
                self.nodes = _parse_csv(urls)

        if "logging" in data:
            log = data["logging"]
            if "level" in log:
                self.log_level = str(log["level"]).upper()
            if "structured" in log:
                self.structured_logging = _parse_bool(log["structured"])

        if "fetch" in data:
            fetch = dict(data["fetch"])
            if "records_path" in fetch:
                self.records_path = str(fetch.pop("records_path"))
            if "timeout" in fetch:
                timeout = _try_parse_float(fetch.pop("timeout"), name="fetch.timeout")
                if timeout is not None and timeout > 0:
                    self.timeout = timeout
            self._apply_options(fetch, source=str(path))

    def _load_env(self) -> None:
        """Override configuration from DRIVEFETCH_* environment variables."""
        if nodes := os.environ.get("DRIVEFETCH_NODES"):
            self.nodes = _parse_csv(nodes)
        if level := os.environ.get("DRIVEFETCH_LOG_LEVEL"):
            self.log_level = level.upper()
        if structured := os.environ.get("DRIVEFETCH_STRUCTURED_LOGGING"):
            self.structured_logging = _parse_bool(structured)
        if records_path := os.environ.get("DRIVEFETCH_RECORDS_PATH"):
            self.records_path = records_path
        if timeout_raw := os.environ.get("DRIVEFETCH_TIMEOUT"):
            timeout = _try_parse_float(timeout_raw, name="DRIVEFETCH_TIMEOUT")
            if timeout is not None and timeout > 0:
                self.timeout = timeout

        overrides: Dict[str, Any] = {}
        for env_var, option in _OPTION_ENV_VARS.items():
            raw = os.environ.get(env_var)
            if raw is None or raw == "":
                continue
            if option in ("page_size", "concurrency", "retries", "base_delay_ms"):
                value = _try_parse_int(raw, name=env_var)
                if value is None:
                    continue
                overrides[option] = value
            elif option == "debug":
                overrides[option] = _parse_bool(raw)
            else:
                overrides[option] = raw.strip().lower()
        if types := os.environ.get("DRIVEFETCH_TYPES"):
            overrides["types"] = _parse_csv(types)
        self._apply_options(overrides, source="environment")

    def _apply_options(self, overrides: Dict[str, Any], *, source: str) -> None:
        """Merge option overrides, keeping the previous defaults if they are invalid."""
        known = {k: v for k, v in overrides.items() if k in FetchOptions.model_fields}
        for unknown in sorted(set(overrides) - set(known)):
            logger.warning("Ignoring unknown fetch option '%s' from %s", unknown, source)
        if not known:
            return
        try:
            self.defaults = FetchOptions(**{**self.defaults.model_dump(), **known})
        except ValidationError as e:
            logger.warning("Ignoring invalid fetch options from %s: %s", source, e)
