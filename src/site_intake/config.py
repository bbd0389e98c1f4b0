"""Configuration loading and validation for Site Intake."""

from __future__ import annotations

import os
from enum import Enum
from pathlib import Path
from typing import Dict, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from .schema import available_schemas


class TypeChangePolicy(str, Enum):
    """What happens to type details when the project type changes."""

    RETAIN = "retain"
    RESET = "reset"


class StoreBackend(str, Enum):
    MEMORY = "memory"
    YAML = "yaml"
    REST = "rest"


class WizardConfig(BaseModel):
    """Wizard behaviour."""

    schema_name: str = Field(default="extended", alias="schema")
    strict_paths: bool = Field(
        default=True,
        description="Raise on undeclared field paths instead of ignoring the edit.",
    )
    type_change_policy: TypeChangePolicy = TypeChangePolicy.RETAIN
    history_limit: int = 50

    model_config = {"populate_by_name": True}

    @field_validator("schema_name")
    @classmethod
    def _known_schema(cls, value: str) -> str:
        if value not in available_schemas():
            raise ValueError(f"Unknown wizard schema '{value}', expected one of {available_schemas()}")
        return value


class StoreConfig(BaseModel):
    """Where created projects are persisted."""

    backend: StoreBackend = StoreBackend.YAML
    path: Path = Path("projects.yaml")
    url: Optional[str] = None
    table: str = "projects"
    api_key: Optional[str] = None
    api_key_env: str = "SITE_INTAKE_API_KEY"
    timeout: float = 10.0

    @model_validator(mode="after")
    def _rest_needs_url(self) -> "StoreConfig":
        if self.backend == StoreBackend.REST and not self.url:
            raise ValueError("The rest store backend requires 'url'")
        return self

    def resolved_api_key(self) -> Optional[str]:
        return self.api_key or os.environ.get(self.api_key_env)


class LocaleConfig(BaseModel):
    language: str = "en"
    catalog: Optional[Path] = None


def _default_base_prices() -> Dict[str, int]:
    return {
        "portfolio": 300,
        "landing": 250,
        "blog": 400,
        "company": 600,
        "corporate": 600,
        "education": 900,
        "ecommerce": 1200,
        "saas": 1500,
        "custom": 500,
    }


class PricingConfig(BaseModel):
    currency: str = "USD"
    base_prices: Dict[str, int] = Field(default_factory=_default_base_prices)
    page_price: int = 50
    feature_prices: Dict[str, int] = Field(
        default_factory=lambda: {
            "live_chat": 80,
            "booking": 150,
            "multilingual": 200,
            "user_accounts": 250,
            "newsletter": 60,
        }
    )
    addon_prices: Dict[str, int] = Field(
        default_factory=lambda: {
            "seo": 150,
            "maintenance": 100,
            "copywriting": 120,
            "logo_design": 90,
            "hosting": 60,
        }
    )

    @model_validator(mode="after")
    def _has_fallback_price(self) -> "PricingConfig":
        if "custom" not in self.base_prices:
            raise ValueError("base_prices must define a 'custom' fallback")
        return self


class TemplatesConfig(BaseModel):
    brief_html: Optional[str] = None
    brief_docx: Optional[str] = None


class LoggingConfig(BaseModel):
    level: str = "INFO"
    file: Optional[Path] = None

    @field_validator("level")
    @classmethod
    def _upper(cls, value: str) -> str:
        return value.upper()


class Config(BaseModel):
    """Top-level configuration."""

    client_id: Optional[str] = None
    wizard: WizardConfig = Field(default_factory=WizardConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)
    locale: LocaleConfig = Field(default_factory=LocaleConfig)
    pricing: PricingConfig = Field(default_factory=PricingConfig)
    templates: TemplatesConfig = Field(default_factory=TemplatesConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


class ConfigError(Exception):
    """Raised when a configuration file is invalid."""


def default_config() -> Config:
    return Config()


def load_config(path: Path) -> Config:
    """Load configuration from YAML file."""

    try:
        data = yaml.safe_load(path.read_text())
    except FileNotFoundError as exc:
        raise ConfigError(f"Configuration file not found: {path}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse YAML: {exc}") from exc

    try:
        return Config.model_validate(data or {})
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc


def save_config(config: Config, path: Path) -> None:
    """Persist configuration to disk as YAML."""

    rendered = config.model_dump(mode="json", by_alias=True)
    path.write_text(yaml.safe_dump(rendered, sort_keys=False, allow_unicode=True))


__all__ = [
    "Config",
    "ConfigError",
    "LocaleConfig",
    "LoggingConfig",
    "PricingConfig",
    "StoreBackend",
    "StoreConfig",
    "TemplatesConfig",
    "TypeChangePolicy",
    "WizardConfig",
    "default_config",
    "load_config",
    "save_config",
]
