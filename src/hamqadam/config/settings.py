# src/hamqadam/config/settings.py
"""
Application settings (Pydantic).

Settings are loaded from `src/hamqadam/config/defaults.yaml`, then optionally overridden by:
- environment variables (e.g., `GOOGLE_MAPS_API_KEY`, `HAMQADAM_LOCALE`)
- an external YAML file via `HAMQADAM_CONFIG_PATH`

Design rule:
- Tuning knobs (home view, tick cadence, provider URLs) live in YAML, not in the state machine.
"""

from __future__ import annotations

import os
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field

from hamqadam.core.env import load_dotenv_if_present


def _read_package_yaml(filename: str) -> dict[str, Any]:
    """Read a YAML file packaged inside `hamqadam.config`."""
    text = resources.files("hamqadam.config").joinpath(filename).read_text(encoding="utf-8")
    data = yaml.safe_load(text) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {filename}; expected a mapping.")
    return data


def _read_yaml_file(path: str | Path) -> dict[str, Any]:
    """Read a YAML file from disk and return its mapping root."""
    data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {path}; expected a mapping.")
    return data


class AppSettings(BaseModel):
    name: str = "Hamqadam"
    locale: Literal["fa", "en"] = "fa"
    log_level: str = "INFO"


class HomeView(BaseModel):
    lat: float = Field(35.6892, ge=-90, le=90)
    lng: float = Field(51.3890, ge=-180, le=180)
    zoom: int = Field(13, ge=0, le=22)


class RouteStyle(BaseModel):
    color: str = "#4285F4"
    weight: int = 6
    opacity: float = Field(0.8, ge=0, le=1)
    dash_array: str | None = "1, 12"


class MapSettings(BaseModel):
    home: HomeView = Field(default_factory=HomeView)
    fit_padding: float = Field(0.2, ge=0)
    route_style: RouteStyle = Field(default_factory=RouteStyle)


class GoogleDirectionsSettings(BaseModel):
    base_url: str = "https://maps.googleapis.com/maps/api/directions/json"
    api_key: str | None = None


class GraphHopperSettings(BaseModel):
    base_url: str = "https://graphhopper.com/api/1/route"
    profile: str = "foot"
    api_key: str | None = None


class DirectionsSettings(BaseModel):
    provider: Literal["google", "graphhopper"] = "google"
    mode: str = "walking"
    timeout_seconds: float = Field(10, gt=0)
    google: GoogleDirectionsSettings = Field(default_factory=GoogleDirectionsSettings)
    graphhopper: GraphHopperSettings = Field(default_factory=GraphHopperSettings)


class MatchingSettings(BaseModel):
    enabled: bool = True
    tick_interval_seconds: float = Field(3.0, ge=0)
    threshold: int = Field(3, ge=1)


class Settings(BaseModel):
    app: AppSettings = Field(default_factory=AppSettings)
    map: MapSettings = Field(default_factory=MapSettings)
    directions: DirectionsSettings = Field(default_factory=DirectionsSettings)
    matching: MatchingSettings = Field(default_factory=MatchingSettings)


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Overlay selected environment variables onto raw settings payload.

    Note: We intentionally keep this whitelist small to avoid exposing unsafe overrides.
    """
    load_dotenv_if_present()
    data = dict(data)

    log_level = os.getenv("HAMQADAM_LOG_LEVEL")
    if log_level:
        data.setdefault("app", {})["log_level"] = log_level

    locale = os.getenv("HAMQADAM_LOCALE")
    if locale:
        data.setdefault("app", {})["locale"] = locale

    provider = os.getenv("HAMQADAM_DIRECTIONS_PROVIDER")
    if provider:
        data.setdefault("directions", {})["provider"] = provider

    google_key = os.getenv("GOOGLE_MAPS_API_KEY")
    if google_key:
        data.setdefault("directions", {}).setdefault("google", {})["api_key"] = google_key

    graphhopper_key = os.getenv("GRAPHHOPPER_API_KEY")
    if graphhopper_key:
        data.setdefault("directions", {}).setdefault("graphhopper", {})["api_key"] = graphhopper_key

    return data


@lru_cache
def get_settings() -> Settings:
    """Load and validate settings (cached)."""
    load_dotenv_if_present()
    config_path = os.getenv("HAMQADAM_CONFIG_PATH")
    raw = _read_yaml_file(config_path) if config_path else _read_package_yaml("defaults.yaml")
    raw = _apply_env_overrides(raw)
    return Settings.model_validate(raw)


@lru_cache
def get_logging_config() -> dict[str, Any]:
    """Load logging configuration (cached)."""
    return _read_package_yaml("logging.yaml")


@lru_cache
def get_messages() -> dict[str, Any]:
    """Load the packaged user-facing display strings (cached), keyed by locale."""
    return _read_package_yaml("messages.yaml")
