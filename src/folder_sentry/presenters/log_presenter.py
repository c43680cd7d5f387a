"""Headless presenter that only logs what an operator would see."""

import logging

from folder_sentry.core.interfaces import IAcknowledgmentPresenter
from folder_sentry.models import AcknowledgmentSession, ChangeNotification, ElapsedUpdate, EscalationRequest

logger = logging.getLogger(__name__)


class LoggingPresenter(IAcknowledgmentPresenter):
    """Writes every presenter call to the log; decisions must come from elsewhere."""

    def present(self, notification: ChangeNotification) -> None:
        logger.warning("%s (%s, detected %s)", notification.message, notification.path, notification.detected_at)

    def update_elapsed(self, update: ElapsedUpdate) -> None:
        logger.debug("Session %s unanswered for %s", update.session_id, update.display)

    def escalate(self, request: EscalationRequest) -> None:
        logger.warning("Attention required for session %s (%s)", request.session_id, request.reason.value)

    def dismiss(self, session: AcknowledgmentSession) -> None:
        logger.info("Session %s closed (%s)", session.id, session.state.value)
