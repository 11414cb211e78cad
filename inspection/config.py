from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from dotenv import load_dotenv


load_dotenv()


DEFAULT_STORE_URL = (
    "https://script.google.com/macros/s/"
    "AKfycbw5JxCupI52bftlLMTvQtw3cdCdgb8_FKzyifm9w-MzI2crT0Nk6SsdH0haapPv0Heq/exec"
)
SESSION_STORAGE_KEY = "cwc_v26_user"


def _to_secret_str(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _get_streamlit_secret(*keys: str) -> str:
    try:
        import streamlit as st
    except Exception:
        return ""

    normalized: list[str] = []
    for key in keys:
        normalized.extend([key, key.lower(), key.upper()])

    try:
        for key in normalized:
            value = _to_secret_str(st.secrets.get(key))
            if value:
                return value
    except Exception:
        return ""

    section_aliases = {
        "store": {
            "inspection_store_url": ["url", "script_url", "store_url"],
            "google_script_url": ["url", "script_url", "store_url"],
            "store_timeout_seconds": ["timeout", "timeout_seconds"],
        },
        "app": {
            "app_env": ["env", "app_env"],
            "log_level": ["log_level"],
        },
    }

    for section_name, alias_map in section_aliases.items():
        try:
            section_data = st.secrets.get(section_name)
        except Exception:
            section_data = None
        if not isinstance(section_data, dict):
            continue
        nested = {str(k).lower(): _to_secret_str(v) for k, v in section_data.items()}
        for key in keys:
            for alias in alias_map.get(key.lower(), []):
                value = nested.get(alias.lower(), "")
                if value:
                    return value

    return ""


def _get_config_value(*keys: str, default: str = "") -> str:
    for key in keys:
        value = os.getenv(key, "").strip()
        if value:
            return value
    secret_value = _get_streamlit_secret(*keys)
    if secret_value:
        return secret_value
    return default


def _default_session_file() -> str:
    return str(Path.home() / ".cwc_inspection" / "session.json")


@dataclass(frozen=True)
class Settings:
    app_env: str
    store_url: str
    store_timeout_seconds: float
    session_file: str
    session_storage_key: str
    log_level: str
    log_file: str
    propagation_mode: str

    def store_url_valid(self) -> bool:
        return bool(re.match(r"^https?://[^\s/]+(/\S*)?$", self.store_url))

    def background_propagation(self) -> bool:
        return self.propagation_mode == "background"


def load_settings() -> Settings:
    return Settings(
        app_env=_get_config_value("APP_ENV", default="dev"),
        store_url=_get_config_value(
            "INSPECTION_STORE_URL",
            "GOOGLE_SCRIPT_URL",
            default=DEFAULT_STORE_URL,
        ).rstrip("/"),
        store_timeout_seconds=float(_get_config_value("STORE_TIMEOUT_SECONDS", default="15") or 15),
        session_file=_get_config_value("SESSION_FILE", default=_default_session_file()),
        session_storage_key=_get_config_value("SESSION_STORAGE_KEY", default=SESSION_STORAGE_KEY),
        log_level=_get_config_value("LOG_LEVEL", default="INFO").upper(),
        log_file=_get_config_value("LOG_FILE"),
        propagation_mode=_get_config_value("PROPAGATION_MODE", default="inline").lower(),
    )


settings = load_settings()
