# core/auth.py
from __future__ import annotations

from typing import Any, Dict, Optional
from uuid import uuid4

import requests

from firdesk.core.config import Settings
from firdesk.core.errors import AuthError
from firdesk.core.logs import get_logger
from firdesk.core.session import Session

log = get_logger(__name__)

IDENTITY_TOOLKIT_URL = "https://identitytoolkit.googleapis.com/v1"
AUTH_TIMEOUT_SEC = 15


def _post(base_url: str, method: str, api_key: str, payload: Dict[str, Any]) -> Dict[str, Any]:
    url = f"{base_url.rstrip('/')}/accounts:{method}"
    try:
        r = requests.post(url, params={"key": api_key}, json=payload, timeout=AUTH_TIMEOUT_SEC)
    except requests.RequestException as e:
        raise AuthError(f"{method} request failed: {e}") from e

    try:
        body = r.json()
    except ValueError:
        body = {}
    if r.status_code != 200:
        msg = ((body or {}).get("error") or {}).get("message") or f"HTTP {r.status_code}"
        raise AuthError(f"{method} rejected: {msg}")
    if not isinstance(body, dict):
        raise AuthError(f"{method} returned an unexpected payload")
    return body


def sign_in_anonymously(api_key: str, base_url: str = IDENTITY_TOOLKIT_URL) -> str:
    body = _post(base_url, "signUp", api_key, {"returnSecureToken": True})
    uid = str(body.get("localId", "") or "")
    if not uid:
        raise AuthError("anonymous sign-in returned no user id")
    return uid


def sign_in_with_custom_token(api_key: str, token: str, base_url: str = IDENTITY_TOOLKIT_URL) -> str:
    body = _post(base_url, "signInWithCustomToken", api_key, {"token": token, "returnSecureToken": True})
    id_token = str(body.get("idToken", "") or "")
    if not id_token:
        raise AuthError("custom token sign-in returned no id token")

    lookup = _post(base_url, "lookup", api_key, {"idToken": id_token})
    users = lookup.get("users") or []
    uid = str((users[0] or {}).get("localId", "") if users else "")
    if not uid:
        raise AuthError("token lookup returned no user id")
    return uid


def authenticate(settings: Settings, base_url: Optional[str] = None) -> Session:
    """
    Obtain a user id for this browser session.

    Memory backend: a local anonymous id. Firestore backend: exchange the
    bootstrap token when configured, else sign in anonymously. Failures are
    logged and yield a Session without a user id (writes are then blocked).
    """
    if settings.backend == "memory":
        uid = f"local-{uuid4().hex[:12]}"
        log.info("Authenticated locally with User ID: %s", uid)
        return Session(app_id=settings.app_id, user_id=uid, provider="local")

    base = base_url or IDENTITY_TOOLKIT_URL
    if not settings.api_key:
        log.error("Firebase sign-in error: FIR_FIREBASE_CONFIG has no apiKey")
        return Session(app_id=settings.app_id)

    try:
        if settings.initial_auth_token:
            uid = sign_in_with_custom_token(settings.api_key, settings.initial_auth_token, base)
            provider = "custom_token"
        else:
            uid = sign_in_anonymously(settings.api_key, base)
            provider = "anonymous"
    except AuthError as e:
        log.error("Firebase sign-in error: %s", e)
        return Session(app_id=settings.app_id)

    log.info("Authenticated with User ID: %s", uid)
    return Session(app_id=settings.app_id, user_id=uid, provider=provider)
