"""
Configuration management for bkm.

Provides a hierarchical configuration system with sensible defaults.
Supports both global (~/.config/bkm/config.toml) and local (bkm.toml) configurations.
"""
import os
import tomli
import tomli_w
from pathlib import Path
from typing import Dict, Any, Optional
from dataclasses import dataclass, field, asdict

from bkm.constants import (
    DEFAULT_FAVICON_PROVIDER_URL,
    FAVICON_DOWNLOAD_TIMEOUT,
    DEFAULT_ENRICH_WORKERS,
    DEFAULT_MAX_TREE_DEPTH,
    DEFAULT_EXPORT_TITLE,
)


@dataclass
class BkmConfig:
    """
    bkm configuration with sensible defaults.

    Configuration hierarchy (highest to lowest priority):
    1. Command-line arguments
    2. Environment variables (BKM_*)
    3. Local config file (./bkm.toml or ./.bkmrc)
    4. User config file (~/.config/bkm/config.toml)
    5. System defaults
    """

    # Database settings
    database: str = field(default="bkm.db")
    database_url: Optional[str] = field(default=None)  # Full connection string (overrides database)
    database_echo: bool = field(default=False)  # SQLAlchemy echo for debugging

    # Favicon enrichment
    favicon_provider_url: str = field(default=DEFAULT_FAVICON_PROVIDER_URL)
    favicon_timeout: int = field(default=FAVICON_DOWNLOAD_TIMEOUT)
    favicon_legacy_encoding: bool = field(default=False)  # bare base64 instead of data URI
    enrich_workers: int = field(default=DEFAULT_ENRICH_WORKERS)
    user_agent: str = field(default="bkm/1.0")
    verify_ssl: bool = field(default=True)

    # Tree and export
    max_tree_depth: int = field(default=DEFAULT_MAX_TREE_DEPTH)
    export_title: str = field(default=DEFAULT_EXPORT_TITLE)

    # Advanced
    log_level: str = field(default="WARNING")

    @classmethod
    def load(cls, config_file: Optional[Path] = None) -> "BkmConfig":
        """
        Load configuration from files and environment.

        Args:
            config_file: Specific config file to load (overrides search)

        Returns:
            Merged configuration object
        """
        config = cls()

        user_config_path = Path.home() / ".config" / "bkm" / "config.toml"
        if user_config_path.exists():
            config._merge(cls._load_toml(user_config_path))

        local_paths = [
            Path.cwd() / "bkm.toml",
            Path.cwd() / ".bkmrc",
        ]

        for path in local_paths:
            if path.exists():
                config._merge(cls._load_toml(path))
                break

        if config_file and config_file.exists():
            config._merge(cls._load_toml(config_file))

        config._apply_env_vars()
        config._expand_paths()

        return config

    @staticmethod
    def _load_toml(path: Path) -> Dict[str, Any]:
        """Load TOML configuration file."""
        with open(path, "rb") as f:
            return tomli.load(f)

    def _merge(self, data: Dict[str, Any]):
        """Merge configuration data into this instance."""
        for key, value in data.items():
            if hasattr(self, key):
                setattr(self, key, value)

    def _apply_env_vars(self):
        """Apply environment variables with BKM_ prefix."""
        prefix = "BKM_"
        for key, value in os.environ.items():
            if key.startswith(prefix):
                config_key = key[len(prefix):].lower()
                if hasattr(self, config_key):
                    current_value = getattr(self, config_key)
                    if isinstance(current_value, bool):
                        setattr(self, config_key, value.lower() in ("true", "1", "yes"))
                    elif isinstance(current_value, int):
                        setattr(self, config_key, int(value))
                    else:
                        setattr(self, config_key, value)

    def _expand_paths(self):
        """Expand ~ and environment variables in the database path."""
        if isinstance(self.database, str):
            self.database = os.path.expanduser(os.path.expandvars(self.database))

    def save(self, path: Optional[Path] = None):
        """
        Save current configuration to TOML file.

        Args:
            path: Path to save to (defaults to user config)
        """
        if path is None:
            path = Path.home() / ".config" / "bkm" / "config.toml"

        path.parent.mkdir(parents=True, exist_ok=True)

        # TOML has no null, drop unset optionals
        data = {k: v for k, v in asdict(self).items() if v is not None}
        with open(path, "wb") as f:
            tomli_w.dump(data, f)

    def get_database_path(self) -> Path:
        """Get the resolved database path."""
        path = Path(self.database)
        if not path.is_absolute():
            path = Path.cwd() / path
        return path

    def get_database_url(self) -> str:
        """
        Get SQLAlchemy database URL.

        Returns:
            Connection string for SQLAlchemy engine
        """
        if self.database_url:
            return self.database_url

        return f"sqlite:///{self.get_database_path()}"

    def is_sqlite(self) -> bool:
        """Check if database is SQLite."""
        return self.get_database_url().startswith("sqlite:")


# Global configuration instance
_config: Optional[BkmConfig] = None


def get_config(reload: bool = False, config_file: Optional[Path] = None) -> BkmConfig:
    """
    Get the global configuration instance.

    Args:
        reload: Force reload configuration from files
        config_file: Specific config file to load

    Returns:
        Global configuration instance
    """
    global _config
    if _config is None or reload:
        _config = BkmConfig.load(config_file)
    return _config


def init_config(database: Optional[str] = None, config_file: Optional[Path] = None, **kwargs) -> BkmConfig:
    """
    Initialize configuration with command-line overrides.

    Args:
        database: Database path override
        config_file: Config file to load before applying overrides
        **kwargs: Other configuration overrides

    Returns:
        Configured instance
    """
    config = get_config(reload=config_file is not None, config_file=config_file)

    if database:
        config.database = database

    for key, value in kwargs.items():
        if hasattr(config, key) and value is not None:
            setattr(config, key, value)

    return config
