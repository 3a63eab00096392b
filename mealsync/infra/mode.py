"""Mode resolution: does an operation target local storage or the remote store?"""
from typing import Optional

from mealsync.utilities.config import is_remote_configured
from mealsync.utilities.constants import LOCAL_USER_ID


def is_offline(user_id: str, remote_configured: bool) -> bool:
    """Offline when no remote store is deployed or the caller has no authenticated identity."""
    return not remote_configured or user_id == LOCAL_USER_ID


class ModeResolver:
    """Carries the deploy-time flag. Call once per operation; never cache the answer,
    a session may sign out (online -> offline) within one process lifetime."""

    def __init__(self, remote_configured: Optional[bool] = None):
        if remote_configured is None:
            remote_configured = is_remote_configured()
        self.remote_configured = remote_configured

    def is_offline(self, user_id: str) -> bool:
        return is_offline(user_id, self.remote_configured)
