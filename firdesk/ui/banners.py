# ui/banners.py
from __future__ import annotations

import time
from typing import Any, Dict, List, Optional

import streamlit as st

_BANNERS_KEY = "_fir_banners"

_RENDERERS = {
    "success": st.success,
    "error": st.error,
    "warning": st.warning,
    "info": st.info,
}


def active_banners(banners: List[Dict[str, Any]], now: Optional[float] = None) -> List[Dict[str, Any]]:
    """Banners that have not expired yet."""
    now = time.time() if now is None else now
    return [b for b in (banners or []) if float(b.get("expires_at", 0)) > now]


def push_banner(kind: str, text: str, seconds: float, *, slot: str = "main") -> None:
    """Queue a banner that disappears on the first rerun after `seconds`."""
    banners = active_banners(st.session_state.get(_BANNERS_KEY, []))
    # one banner per slot+kind; a repeat just extends it
    banners = [b for b in banners if not (b["slot"] == slot and b["kind"] == kind)]
    banners.append({"kind": kind, "text": text, "slot": slot, "expires_at": time.time() + float(seconds)})
    st.session_state[_BANNERS_KEY] = banners


def render_banners(slot: str = "main") -> None:
    banners = active_banners(st.session_state.get(_BANNERS_KEY, []))
    st.session_state[_BANNERS_KEY] = banners
    for b in banners:
        if b["slot"] != slot:
            continue
        _RENDERERS.get(b["kind"], st.info)(b["text"])
