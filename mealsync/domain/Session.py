"""Session context passed explicitly into every repository call."""
from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

from mealsync.utilities.constants import LOCAL_USER_ID


@dataclass(frozen=True)
class Session:
    user_id: str = LOCAL_USER_ID
    access_token: Optional[str] = None
    # explicit choice for this call; falls back to the user's stored pointer
    active_profile_id: Optional[str] = None

    @classmethod
    def local(cls) -> "Session":
        return cls(LOCAL_USER_ID)

    @property
    def is_local(self) -> bool:
        return self.user_id == LOCAL_USER_ID
