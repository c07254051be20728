"""Session management for checkout drawers"""

import uuid
import logging
from datetime import datetime, timezone
from typing import Optional
from dataclasses import dataclass

from ..services.checkout import CheckoutWorkflow

logger = logging.getLogger(__name__)


@dataclass
class CheckoutSession:
    """One open purchase drawer"""
    session_id: str
    created_at: datetime
    updated_at: datetime
    workflow: CheckoutWorkflow

    def touch(self) -> None:
        self.updated_at = datetime.now(timezone.utc)


class CheckoutSessionManager:
    """Manages checkout sessions"""

    def __init__(self):
        self.sessions: dict[str, CheckoutSession] = {}

    def create_session(self, workflow: CheckoutWorkflow) -> CheckoutSession:
        """Create a new session around a workflow"""
        now = datetime.now(timezone.utc)
        session = CheckoutSession(
            session_id=str(uuid.uuid4()),
            created_at=now,
            updated_at=now,
            workflow=workflow,
        )
        self.sessions[session.session_id] = session
        logger.debug(f"Checkout session {session.session_id} created for {workflow.product.slug}")
        return session

    def get_session(self, session_id: str) -> Optional[CheckoutSession]:
        """Get session by ID"""
        return self.sessions.get(session_id)

    def delete_session(self, session_id: str) -> bool:
        """Tear down and delete a session"""
        session = self.sessions.pop(session_id, None)
        if session is None:
            return False
        session.workflow.teardown()
        return True

    def cleanup_old_sessions(self, max_age_hours: int = 24) -> int:
        """Remove sessions idle for longer than max_age_hours"""
        now = datetime.now(timezone.utc)
        old_sessions = [
            sid for sid, session in self.sessions.items()
            if (now - session.updated_at).total_seconds() > max_age_hours * 3600
        ]
        for sid in old_sessions:
            self.delete_session(sid)
        if old_sessions:
            logger.info(f"Removed {len(old_sessions)} idle checkout sessions")
        return len(old_sessions)


# Singleton instance
session_manager = CheckoutSessionManager()
