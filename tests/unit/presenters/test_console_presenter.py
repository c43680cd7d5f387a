"""Unit tests for the presenters."""

import io
from datetime import timedelta
from unittest.mock import Mock, patch

import pytest
from folder_sentry.models import (
    AcknowledgmentSession,
    ChangeEvent,
    ChangeKind,
    ChangeNotification,
    Decision,
    ElapsedUpdate,
    EscalationReason,
    EscalationRequest,
    NoActiveSessionError,
)
from folder_sentry.monitoring import AcknowledgmentController
from folder_sentry.presenters import ConsolePresenter, LoggingPresenter
from rich.console import Console


@pytest.fixture
def session():
    event = ChangeEvent(kind=ChangeKind.RENAMED, name="release", path="/builds/release", is_directory=True)
    return AcknowledgmentSession(event=event)


@pytest.fixture
def output():
    return io.StringIO()


@pytest.fixture
def mock_controller(session):
    """Create a mock controller with the session open."""
    controller = Mock(spec=AcknowledgmentController)
    controller.current_session = session
    return controller


@pytest.fixture
def presenter(output, mock_controller):
    """Create a console presenter writing to a buffer."""
    console = Console(file=output, force_terminal=False, width=120)
    return ConsolePresenter(console=console, controller=mock_controller)


class TestConsolePresenter:
    """Test cases for ConsolePresenter."""

    def test_present_renders_notification(self, presenter, output, session):
        """Test rendering a change and starting the prompt."""
        with patch.object(ConsolePresenter, "_start_prompt") as mock_start_prompt:
            presenter.present(ChangeNotification.for_session(session))

        text = output.getvalue()
        assert "Folder release Renamed!" in text
        assert "/builds/release" in text
        mock_start_prompt.assert_called_once_with(session.id)

    @patch('folder_sentry.presenters.console.Prompt.ask', return_value="s")
    def test_prompt_stop(self, mock_ask, presenter, mock_controller, session):
        """Test answering Stop."""
        presenter._prompt(session.id)

        mock_controller.decide.assert_called_once_with(Decision.STOP)

    @patch('folder_sentry.presenters.console.Prompt.ask', side_effect=["t", "c"])
    def test_prompt_elapsed_signals_attention(self, mock_ask, presenter, mock_controller, output, session):
        """Test that asking for the waiting time counts as attention returning."""
        presenter.update_elapsed(ElapsedUpdate(session_id=session.id, elapsed=timedelta(seconds=75)))

        presenter._prompt(session.id)

        mock_controller.signal_attention.assert_called_once()
        mock_controller.decide.assert_called_once_with(Decision.CONTINUE)
        assert "0:01:15" in output.getvalue()

    @patch('folder_sentry.presenters.console.Prompt.ask', side_effect=EOFError)
    def test_prompt_closed_input_stops(self, mock_ask, presenter, mock_controller, session):
        """Test that closed input stops monitoring."""
        presenter._prompt(session.id)

        mock_controller.decide.assert_called_once_with(Decision.STOP)

    @patch('folder_sentry.presenters.console.Prompt.ask', return_value="c")
    def test_prompt_for_closed_session(self, mock_ask, presenter, mock_controller, session):
        """Test that an answer for a session that is no longer open is dropped."""
        mock_controller.current_session = None

        presenter._prompt(session.id)

        mock_controller.decide.assert_not_called()

    @patch('folder_sentry.presenters.console.Prompt.ask', return_value="c")
    def test_prompt_decision_rejected(self, mock_ask, presenter, mock_controller, session):
        """Test that a rejected decision is not raised from the prompt thread."""
        mock_controller.decide.side_effect = NoActiveSessionError("No session", decision="continue")

        presenter._prompt(session.id)

    def test_escalate_rings_bell(self, presenter, output, session):
        """Test the console escalation."""
        request = EscalationRequest(
            session_id=session.id,
            reason=EscalationReason.ATTENTION_RETURNED,
            elapsed=timedelta(seconds=30),
            flash_count=2,
        )

        with patch.object(presenter.console, "bell") as mock_bell:
            presenter.escalate(request)

        assert mock_bell.call_count == 2
        assert "0:00:30" in output.getvalue()

    def test_dismiss_acknowledged(self, presenter, output, session):
        """Test the closing line of an acknowledged session."""
        presenter.update_elapsed(ElapsedUpdate(session_id=session.id, elapsed=timedelta(seconds=5)))
        session.acknowledge(Decision.CONTINUE)

        presenter.dismiss(session)

        assert "Continue" in output.getvalue()
        assert presenter.elapsed_display(session.id) == "0:00:00"

    def test_dismiss_unanswered(self, presenter, output, session):
        """Test the closing line of an aborted session."""
        presenter.dismiss(session)

        assert "Dismissed unanswered" in output.getvalue()


class TestLoggingPresenter:
    """Test cases for LoggingPresenter."""

    @patch('folder_sentry.presenters.log_presenter.logger')
    def test_present_logs_message(self, mock_logger, session):
        """Test that notifications are logged as warnings."""
        LoggingPresenter().present(ChangeNotification.for_session(session))

        mock_logger.warning.assert_called_once()
        assert mock_logger.warning.call_args.args[1] == "Folder release Renamed!"

    @patch('folder_sentry.presenters.log_presenter.logger')
    def test_escalate_logs_reason(self, mock_logger, session):
        """Test that escalations are logged with their reason."""
        LoggingPresenter().escalate(EscalationRequest(session_id=session.id, reason=EscalationReason.OVERDUE))

        assert mock_logger.warning.call_args.args[2] == "overdue"
