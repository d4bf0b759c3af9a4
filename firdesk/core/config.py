# core/config.py
from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from dotenv import load_dotenv

from firdesk.core.errors import ConfigError
from firdesk.core.logs import get_logger

log = get_logger(__name__)

BACKENDS = ("memory", "firestore")


@dataclass
class Settings:
    backend: str = "memory"
    app_id: str = "default-app-id"
    firebase_config: Dict[str, Any] = field(default_factory=dict)
    credentials_path: str = ""
    initial_auth_token: str = ""
    refresh_seconds: int = 5
    success_banner_seconds: int = 3
    error_banner_seconds: int = 5
    activity_log_path: Path = Path("data") / "activity.jsonl"
    log_level: str = "INFO"

    @property
    def project_id(self) -> str:
        return str(self.firebase_config.get("projectId", "") or "")

    @property
    def api_key(self) -> str:
        return str(self.firebase_config.get("apiKey", "") or "")

    @property
    def storage_bucket(self) -> str:
        return str(self.firebase_config.get("storageBucket", "") or "")


def _secret(name: str) -> Optional[str]:
    """st.secrets lookup that never raises (no secrets.toml is the common case)."""
    try:
        import streamlit as st

        v = st.secrets.get(name, None)
    except Exception:
        return None
    if v is None:
        return None
    if isinstance(v, Mapping):
        return json.dumps(dict(v))
    return str(v)


def _get(env: Mapping[str, str], name: str, default: str = "", use_secrets: bool = True) -> str:
    v = env.get(name)
    if v is None and use_secrets:
        v = _secret(name)
    if v is None:
        return default
    return str(v).strip()


def _int(raw: str, name: str, default: int) -> int:
    if not raw:
        return default
    try:
        v = int(raw)
    except ValueError:
        log.warning("%s=%r is not an integer; using %s", name, raw, default)
        return default
    return v if v > 0 else default


def parse_firebase_config(raw: str) -> Dict[str, Any]:
    """Firebase web config JSON. Invalid JSON is logged and treated as empty."""
    if not raw:
        return {}
    try:
        cfg = json.loads(raw)
    except json.JSONDecodeError as e:
        log.error("Failed to parse FIR_FIREBASE_CONFIG: %s", e)
        return {}
    if not isinstance(cfg, dict):
        log.error("FIR_FIREBASE_CONFIG must be a JSON object")
        return {}
    return cfg


def load_settings(env: Optional[Mapping[str, str]] = None, use_secrets: bool = True) -> Settings:
    """
    Resolve settings from (in order): process env / .env file, then st.secrets.
    Passing `env` explicitly skips .env loading (tests).
    """
    if env is None:
        load_dotenv()
        env = os.environ

    backend = _get(env, "FIR_BACKEND", "memory", use_secrets).lower()
    if backend not in BACKENDS:
        raise ConfigError(f"FIR_BACKEND must be one of {', '.join(BACKENDS)} (got {backend!r})")

    return Settings(
        backend=backend,
        app_id=_get(env, "FIR_APP_ID", "default-app-id", use_secrets) or "default-app-id",
        firebase_config=parse_firebase_config(_get(env, "FIR_FIREBASE_CONFIG", "", use_secrets)),
        credentials_path=_get(env, "FIR_CREDENTIALS", "", use_secrets),
        initial_auth_token=_get(env, "FIR_INITIAL_AUTH_TOKEN", "", use_secrets),
        refresh_seconds=_int(_get(env, "FIR_REFRESH_SECONDS", "", use_secrets), "FIR_REFRESH_SECONDS", 5),
        success_banner_seconds=_int(
            _get(env, "FIR_SUCCESS_BANNER_SECONDS", "", use_secrets), "FIR_SUCCESS_BANNER_SECONDS", 3
        ),
        error_banner_seconds=_int(
            _get(env, "FIR_ERROR_BANNER_SECONDS", "", use_secrets), "FIR_ERROR_BANNER_SECONDS", 5
        ),
        activity_log_path=Path(_get(env, "FIR_ACTIVITY_LOG", str(Path("data") / "activity.jsonl"), use_secrets)),
        log_level=_get(env, "FIR_LOG_LEVEL", "INFO", use_secrets).upper() or "INFO",
    )
