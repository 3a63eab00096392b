"""Feedback submission. There is no local copy: offline feedback is refused."""
import logging

from mealsync.domain.Feedback import Feedback
from mealsync.domain.Session import Session
from mealsync.infra.dual_mode import RemoteBackend
from mealsync.utilities.constants import ANON_USER_ID, LOCAL_USER_ID
from mealsync.utilities.errors import StorageUnavailable

logger = logging.getLogger(__name__)


class FeedbackRepository(RemoteBackend):
    TABLE = "feedback"

    def __init__(self, remote_store, resolver):
        super().__init__(remote_store)
        self.resolver = resolver

    async def submit(self, session: Session, feedback: Feedback) -> None:
        """Insert one feedback row; anonymous and local callers are stored without an owner."""
        if self.resolver.is_offline(session.user_id) and session.user_id != ANON_USER_ID:
            raise StorageUnavailable("Cannot submit feedback in offline mode")
        if session.user_id in (ANON_USER_ID, LOCAL_USER_ID):
            await self.store.insert_anonymous(session, self.TABLE, feedback.to_row())
        else:
            await self.store.insert(session, self.TABLE, feedback.to_row())
        logger.info(f"Feedback submitted (rating {feedback.rating})")
