from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    base_url: str = Field(default="http://localhost:8000")
    debug: bool = Field(default=False)

    # Staging
    publish_root: str = Field(default="./publishBots")
    bot_folder_name: str = Field(default="ComposerDialogs")
    default_template_path: str = Field(default="./runtime")

    # History
    persist_history: bool = Field(default=False)
    history_file: str = Field(default="./publishHistory.json")

    # Deployment
    deployer: str = Field(default="null")  # null, zip
    deploy_timeout_seconds: int = Field(default=600)


class DeployConfig:
    """Deployment configuration from config.yml."""

    def __init__(self, data: dict[str, Any], settings: "Settings") -> None:
        self.provider: str = data.get("provider", settings.deployer)
        self.timeout_seconds: int = data.get("timeout_seconds", settings.deploy_timeout_seconds)
        self.zip_deploy_url: str = data.get(
            "zip_deploy_url",
            "https://{publish_name}-{environment}.scm.azurewebsites.net/api/zipdeploy",
        )
        self.exclude_dirs: list[str] = data.get("exclude_dirs", ["bin", "obj", ".git"])


class HistoryConfig:
    """History persistence configuration from config.yml and environment."""

    def __init__(self, data: dict[str, Any], settings: "Settings") -> None:
        self.persist: bool = settings.persist_history or data.get("persist", False)
        self.file: str = data.get("file", settings.history_file)


class AppConfig:
    """Combined application configuration from .env and config.yml."""

    def __init__(self) -> None:
        self.settings = Settings()
        self._load_yaml()

    def _load_yaml(self) -> None:
        config_path = Path("config.yml")
        if config_path.exists():
            with open(config_path) as f:
                data = yaml.safe_load(f) or {}
        else:
            data = {}

        self.deploy = DeployConfig(data.get("deploy", {}), self.settings)
        self.history = HistoryConfig(data.get("history", {}), self.settings)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


@lru_cache
def get_config() -> AppConfig:
    """Get cached full config instance."""
    return AppConfig()
