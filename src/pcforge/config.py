from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Tuple

from dotenv import load_dotenv

ROOT = Path(__file__).resolve().parents[2]
DEFAULT_CATALOG_PATH = ROOT / "data" / "components.json"
DEFAULT_BUILDS_DB_PATH = ROOT / "data" / "builds.db"


def _env_path(name: str, default: Path) -> Path:
    raw = (os.getenv(name) or "").strip()
    return Path(raw) if raw else default


def _env_list(name: str, default: Tuple[str, ...]) -> Tuple[str, ...]:
    raw = os.getenv(name)
    if raw is None:
        return default
    values = tuple(v.strip() for v in raw.split(",") if v.strip())
    return values or default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in {"1", "true", "yes", "on"}:
        return True
    if value in {"0", "false", "no", "off"}:
        return False
    return default


@dataclass(frozen=True)
class Settings:
    catalog_path: Path = DEFAULT_CATALOG_PATH
    builds_db_path: Path = DEFAULT_BUILDS_DB_PATH
    cors_origins: Tuple[str, ...] = ("*",)
    debug: bool = False


def load_settings(env_file: Path | None = ROOT / ".env") -> Settings:
    """读取 .env 与环境变量；无效值回退到默认值"""
    if env_file is not None:
        load_dotenv(env_file)
    return Settings(
        catalog_path=_env_path("PCFORGE_CATALOG_PATH", DEFAULT_CATALOG_PATH),
        builds_db_path=_env_path("PCFORGE_BUILDS_DB_PATH", DEFAULT_BUILDS_DB_PATH),
        cors_origins=_env_list("PCFORGE_CORS_ORIGINS", ("*",)),
        debug=_env_bool("PCFORGE_DEBUG", False),
    )
