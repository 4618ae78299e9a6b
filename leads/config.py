"""
Run configuration: YAML file plus environment overrides.

    scraping:
      max_concurrent: 3
      delay_min_ms: 2000
      delay_max_ms: 6000
      max_pages_per_company: 3
      timeout_s: 15
      respect_robots: true
      user_agents: [...]
    enrichment:
      apollo_api_key: ""
      hunter_api_key: ""
    ops:
      ops_json: null

Environment variables win over the file: APOLLO_API_KEY, HUNTER_API_KEY,
MAX_CONCURRENT_PAGES, REQUEST_DELAY_MIN, REQUEST_DELAY_MAX, DML_OPS_JSON.
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from .pipeline.fetchers.static import DEFAULT_USER_AGENTS


class ConfigError(Exception):
    """Configuration file missing, unreadable, or with invalid values."""


class ScrapingSettings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    max_concurrent: int = Field(default=3, ge=1, le=32)
    delay_min_ms: int = Field(default=2000, ge=0)
    delay_max_ms: int = Field(default=6000, ge=0)
    max_pages_per_company: int = Field(default=3, ge=1)
    timeout_s: float = Field(default=15.0, gt=0)
    respect_robots: bool = True
    user_agents: List[str] = Field(default_factory=lambda: list(DEFAULT_USER_AGENTS))

    @model_validator(mode="after")
    def check_delays(self) -> "ScrapingSettings":
        if self.delay_max_ms < self.delay_min_ms:
            raise ValueError("delay_max_ms must be >= delay_min_ms")
        if not self.user_agents:
            self.user_agents = list(DEFAULT_USER_AGENTS)
        return self


class EnrichmentSettings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    apollo_api_key: str = ""
    hunter_api_key: str = ""


class OpsSettings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    ops_json: Optional[str] = None


class Settings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    scraping: ScrapingSettings = Field(default_factory=ScrapingSettings)
    enrichment: EnrichmentSettings = Field(default_factory=EnrichmentSettings)
    ops: OpsSettings = Field(default_factory=OpsSettings)


# env var -> (section, key)
ENV_OVERRIDES = {
    "APOLLO_API_KEY": ("enrichment", "apollo_api_key"),
    "HUNTER_API_KEY": ("enrichment", "hunter_api_key"),
    "MAX_CONCURRENT_PAGES": ("scraping", "max_concurrent"),
    "REQUEST_DELAY_MIN": ("scraping", "delay_min_ms"),
    "REQUEST_DELAY_MAX": ("scraping", "delay_max_ms"),
    "DML_OPS_JSON": ("ops", "ops_json"),
}


def _read_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists() or not path.is_file():
        raise ConfigError(f"file not found: {path}")
    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"invalid YAML in {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"expected a mapping at the top of {path}")
    return data


def load_settings(
    path: Optional[Union[str, Path]] = None,
    env: Optional[Mapping[str, str]] = None,
) -> Settings:
    """Build Settings from an optional YAML file, then apply environment overrides.

    Raises:
        ConfigError: missing/invalid file or values that fail validation
    """
    env = os.environ if env is None else env
    raw: Dict[str, Any] = _read_yaml(Path(path)) if path else {}

    for section in ("scraping", "enrichment", "ops"):
        value = raw.get(section)
        if value is None:
            raw[section] = {}
        elif not isinstance(value, dict):
            raise ConfigError(f"section '{section}' must be a mapping")
        else:
            raw[section] = dict(value)

    for var, (section, key) in ENV_OVERRIDES.items():
        value = env.get(var)
        if value is not None and value != "":
            raw[section][key] = value

    try:
        return Settings.model_validate(raw)
    except ValidationError as e:
        raise ConfigError(f"invalid configuration: {e}") from e
