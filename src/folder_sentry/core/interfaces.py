"""
Abstract interfaces for the folder sentry.

The acknowledgment controller never renders anything itself; it talks to a
presenter through this contract so dialogs, consoles or tests can be swapped in.
"""

from abc import ABC, abstractmethod

from folder_sentry.models import AcknowledgmentSession, ChangeNotification, ElapsedUpdate, EscalationRequest


class IAcknowledgmentPresenter(ABC):
    """
    Interface for rendering acknowledgment sessions to an operator.

    All methods are called from inside the controller's critical section and
    must return promptly. A presenter that waits for operator input has to do
    so on its own thread and report back through
    ``AcknowledgmentController.decide``.
    """

    @abstractmethod
    def present(self, notification: ChangeNotification) -> None:
        """
        Show a newly opened session to the operator.

        Args:
            notification: The change and its operator message
        """
        pass

    @abstractmethod
    def update_elapsed(self, update: ElapsedUpdate) -> None:
        """
        Refresh how long the current session has gone unanswered.

        Args:
            update: Elapsed time since the change was detected
        """
        pass

    @abstractmethod
    def escalate(self, request: EscalationRequest) -> None:
        """
        Perform an attention-seeking side effect (flash, bell, alert).

        Args:
            request: Why and how strongly to escalate
        """
        pass

    @abstractmethod
    def dismiss(self, session: AcknowledgmentSession) -> None:
        """
        Close whatever was shown for a session.

        Called once the session is acknowledged or the run is shut down.

        Args:
            session: The session being closed
        """
        pass
