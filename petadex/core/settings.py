"""Configuration management for the PETadex catalog service."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field

PROJECT_ROOT = Path(__file__).resolve().parents[2]
CONFIG_DIR = PROJECT_ROOT / "config"
SETTINGS_FILE = CONFIG_DIR / "settings.yaml"


class AppSettings(BaseModel):
    name: str = Field(default="petadex-catalog")
    environment: str = Field(default="development")
    log_level: str = Field(default="INFO")


class DatabaseSettings(BaseModel):
    path: str = Field(default="data/processed/petadex.db")
    read_only: bool = Field(default=True)


class ApiSettings(BaseModel):
    title: str = Field(default="PETadex Catalog API")
    version: str = Field(default="0.1.0")
    host: str = Field(default="127.0.0.1")
    port: int = Field(default=3001)
    cors_origins: List[str] = Field(
        default_factory=lambda: [
            "https://petadex.net",
            "https://www.petadex.net",
            "http://localhost:8000",
            "http://localhost:9000",
        ]
    )


class StorageSettings(BaseModel):
    pdb_base_url: str = Field(default="https://petadex.s3.amazonaws.com/pdb_structs")


class Settings(BaseModel):
    app: AppSettings = AppSettings()
    database: DatabaseSettings = DatabaseSettings()
    api: ApiSettings = ApiSettings()
    storage: StorageSettings = StorageSettings()
    raw: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def load(cls, path: Path = SETTINGS_FILE) -> "Settings":
        load_dotenv()
        data = _load_yaml(path)
        merged = _interpolate_env(data)
        return cls(
            app=AppSettings(**(merged.get("app") or {})),
            database=DatabaseSettings(**(merged.get("database") or {})),
            api=ApiSettings(**(merged.get("api") or {})),
            storage=StorageSettings(**(merged.get("storage") or {})),
            raw=merged,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.load()


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")
    return yaml.safe_load(path.read_text()) or {}


def _interpolate_env(data: Dict[str, Any]) -> Dict[str, Any]:
    def resolve(value: Any) -> Any:
        if isinstance(value, str) and value.startswith("${") and value.endswith("}"):
            expression = value[2:-1]
            env_key = expression
            default = ""
            if ":-" in expression:
                env_key, default = expression.split(":-", 1)
            elif "-" in expression:
                env_key, default = expression.split("-", 1)
            env_key = env_key.strip()
            return os.getenv(env_key, default)
        if isinstance(value, dict):
            return {k: resolve(v) for k, v in value.items()}
        if isinstance(value, list):
            return [resolve(v) for v in value]
        return value

    return {key: resolve(val) for key, val in data.items()}


__all__ = ["Settings", "get_settings"]
