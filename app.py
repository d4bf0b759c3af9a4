# app.py
from __future__ import annotations

from firdesk.ui.app_shell import render_app

render_app()
