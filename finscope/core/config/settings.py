"""Configuration management - settings for the finscope dashboard."""

import os
import tomllib
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from loguru import logger

DEFAULT_HOME = Path.home() / ".finscope"


@dataclass
class SourcesConfig:
    """Price source configuration."""

    coingecko_url: str = "https://api.coingecko.com/api/v3"
    cryptocompare_url: str = "https://min-api.cryptocompare.com/data"
    binance_url: str = "https://api.binance.com/api/v3"
    coinmarketcap_url: str = "https://pro-api.coinmarketcap.com/v1"
    coinmarketcap_api_key: str | None = None
    http_timeout: float = 10.0
    # upper bound on each supplemental fetch inside one refresh cycle
    supplemental_timeout: float = 10.0
    listing_size: int = 100
    reference_symbol: str = "BTC"
    binance_quote_asset: str = "USDT"
    cryptocompare_currencies: str = "USD,EUR"
    user_agent: str = "finscope/0.1.0"


@dataclass
class StorageConfig:
    """Persistence configuration."""

    backend: str = "duckdb"
    path: str = str(DEFAULT_HOME / "finscope.duckdb")


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "INFO"
    console: bool = True
    file: str | None = None


@dataclass
class FinscopeConfig:
    """finscope main configuration."""

    sources: SourcesConfig = field(default_factory=SourcesConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_dict(cls, config_dict: dict[str, Any]) -> "FinscopeConfig":
        """Build a configuration from a nested dictionary."""
        return cls(
            sources=SourcesConfig(**config_dict.get("sources", {})),
            storage=StorageConfig(**config_dict.get("storage", {})),
            logging=LoggingConfig(**config_dict.get("logging", {})),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to a nested dictionary."""
        return {
            "sources": asdict(self.sources),
            "storage": asdict(self.storage),
            "logging": asdict(self.logging),
        }


class ConfigManager:
    """Loads configuration from a TOML file, overlaid with environment variables."""

    def __init__(self, config_path: Path | None = None, use_env: bool = True):
        """Initialise the manager.

        Args:
            config_path: path of the TOML file, defaults to ~/.finscope/config.toml
            use_env: whether FINSCOPE_* environment variables override the file
        """
        self.config_path = config_path or DEFAULT_HOME / "config.toml"
        self.use_env = use_env
        self.config = self._load_config()

    def _load_file(self) -> dict[str, Any]:
        if not self.config_path.exists():
            return {}
        try:
            with open(self.config_path, "rb") as f:
                return tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            logger.warning(f"Failed to load config from {self.config_path}: {e}")
            return {}

    def _load_config(self) -> FinscopeConfig:
        config_dict = self._load_file()
        if self.use_env:
            config_dict = deep_update(config_dict, load_config_from_env())
        try:
            return FinscopeConfig.from_dict(config_dict)
        except TypeError as e:
            logger.warning(f"Ignoring invalid configuration keys: {e}")
            return FinscopeConfig()

    def get_config(self) -> FinscopeConfig:
        """Return the current configuration."""
        return self.config

    def update_config(self, **updates: Any) -> None:
        """Apply nested updates, e.g. ``update_config(sources={"http_timeout": 5})``."""
        self.config = FinscopeConfig.from_dict(deep_update(self.config.to_dict(), updates))


def deep_update(d: dict[str, Any], u: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``u`` into ``d``."""
    for k, v in u.items():
        if isinstance(v, dict):
            d[k] = deep_update(dict(d.get(k, {})), v)
        else:
            d[k] = v
    return d


def get_default_config() -> FinscopeConfig:
    """Return the default configuration."""
    return FinscopeConfig()


def load_config_from_env() -> dict[str, Any]:
    """Read FINSCOPE_* environment variables into a nested config dict."""
    config: dict[str, Any] = {}

    sources_config: dict[str, Any] = {}
    cmc_key = os.getenv("FINSCOPE_CMC_API_KEY")
    if cmc_key:
        sources_config["coinmarketcap_api_key"] = cmc_key
    http_timeout = os.getenv("FINSCOPE_HTTP_TIMEOUT")
    if http_timeout is not None:
        sources_config["http_timeout"] = float(http_timeout)
    supplemental_timeout = os.getenv("FINSCOPE_SUPPLEMENTAL_TIMEOUT")
    if supplemental_timeout is not None:
        sources_config["supplemental_timeout"] = float(supplemental_timeout)
    reference_symbol = os.getenv("FINSCOPE_REFERENCE_SYMBOL")
    if reference_symbol:
        sources_config["reference_symbol"] = reference_symbol.upper()

    if sources_config:
        config["sources"] = sources_config

    storage_config: dict[str, Any] = {}
    storage_backend = os.getenv("FINSCOPE_STORAGE_BACKEND")
    if storage_backend:
        storage_config["backend"] = storage_backend.lower()
    storage_path = os.getenv("FINSCOPE_STORAGE_PATH")
    if storage_path:
        storage_config["path"] = storage_path

    if storage_config:
        config["storage"] = storage_config

    logging_config: dict[str, Any] = {}
    log_level = os.getenv("FINSCOPE_LOG_LEVEL")
    if log_level is not None:
        logging_config["level"] = log_level.upper()
    log_file = os.getenv("FINSCOPE_LOG_FILE")
    if log_file is not None:
        logging_config["file"] = log_file

    if logging_config:
        config["logging"] = logging_config

    return config
