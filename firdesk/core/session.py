from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Session:
    """Who is acting, and in which app namespace. Passed explicitly to the store."""

    app_id: str
    user_id: Optional[str] = None
    provider: str = ""  # "anonymous" | "custom_token" | "local"

    @property
    def authenticated(self) -> bool:
        return bool(self.user_id)
