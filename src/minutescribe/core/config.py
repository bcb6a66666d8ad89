"""Application configuration management"""

import json
import os
from pathlib import Path
from typing import Optional
from pydantic import BaseModel, Field
from loguru import logger


DEFAULT_API_URL = "http://localhost:5000/api"
API_URL_ENV_VAR = "MINUTESCRIBE_API_URL"
CONFIG_DIR_ENV_VAR = "MINUTESCRIBE_CONFIG_DIR"


class AppConfig(BaseModel):
    """Application configuration"""

    # Remote service
    api_base_url: str = DEFAULT_API_URL
    request_timeout_seconds: float = 30.0
    upload_timeout_seconds: float = 600.0  # transcription + summary can take minutes

    # Upload settings
    max_upload_bytes: int = 50 * 1024 * 1024  # 50 MiB

    # Simulated progress (the server reports no real progress)
    progress_tick_ms: int = 500
    progress_increment: int = 5
    progress_ceiling: int = 95
    completion_delay_ms: int = 500  # pause at 100% before handing over the new document

    # Export settings
    export_directory: Optional[str] = None  # None = ~/Downloads
    export_include_header: bool = True
    export_include_metadata_date: bool = True
    export_image_quality: int = 98  # JPEG quality of rasterized pages (1-100)

    # Third-party sign-in
    identity_userinfo_url: str = "https://www.googleapis.com/oauth2/v3/userinfo"

    # Logging
    log_level: str = "DEBUG"

    # UI settings
    last_window_geometry: Optional[str] = None
    documents_newest_first: bool = True

    # Remembered login email (never the password)
    last_login_email: Optional[str] = Field(default=None)


def get_config_dir() -> Path:
    """Get the application config directory"""
    import sys

    override = os.environ.get(CONFIG_DIR_ENV_VAR)
    if override:
        config_dir = Path(override)
    elif sys.platform == "win32":
        config_dir = Path.home() / "AppData" / "Local" / "MinuteScribe"
    elif sys.platform == "darwin":
        config_dir = Path.home() / "Library" / "Application Support" / "MinuteScribe"
    else:
        config_dir = Path.home() / ".config" / "MinuteScribe"

    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


def get_config_path() -> Path:
    """Get the config file path"""
    return get_config_dir() / "config.json"


class ConfigManager:
    """Singleton config manager"""

    _instance: Optional["ConfigManager"] = None
    _config: Optional[AppConfig] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        if self._config is None:
            self._config = self._load_config()

    def _load_config(self) -> AppConfig:
        """Load config from file or create default"""
        config_path = get_config_path()

        if config_path.exists():
            try:
                with open(config_path, "r", encoding="utf-8") as f:
                    data = json.load(f)
                logger.info(f"Loaded config from {config_path}")
                config = AppConfig(**data)
            except Exception as e:
                logger.warning(f"Failed to load config: {e}, using defaults")
                config = AppConfig()
        else:
            logger.info("No config file found, using defaults")
            config = AppConfig()

        # Environment wins over the file so a checkout can point at a dev server
        env_url = os.environ.get(API_URL_ENV_VAR)
        if env_url:
            config.api_base_url = env_url
        return config

    def save(self):
        """Save config to file"""
        config_path = get_config_path()

        try:
            with open(config_path, "w", encoding="utf-8") as f:
                json.dump(self._config.model_dump(), f, indent=2)
            logger.info(f"Saved config to {config_path}")
        except Exception as e:
            logger.error(f"Failed to save config: {e}")

    @property
    def config(self) -> AppConfig:
        """Get the current config"""
        return self._config

    def set_export_directory(self, path: str):
        """Set the directory exported files are written to"""
        self._config.export_directory = path
        self.save()

    def get_export_directory(self) -> Path:
        """Get the export directory, falling back to ~/Downloads"""
        if self._config.export_directory:
            return Path(self._config.export_directory)
        return Path.home() / "Downloads"

    def set_last_login_email(self, email: Optional[str]):
        self._config.last_login_email = email
        self.save()

    @classmethod
    def reset(cls):
        """Drop the cached instance so the next access reloads from disk"""
        cls._instance = None
        cls._config = None


def get_config_manager() -> ConfigManager:
    """Get the singleton config manager"""
    return ConfigManager()
